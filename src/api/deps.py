"""Shared FastAPI dependencies for the entity routers.

`get_request_auditor` binds the AuditRecorder to the current request's
actor, client IP and User-Agent, so handlers never read request metadata
themselves.
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

from fastapi import Depends, Request

from src.audit.recorder import AuditRecorder, RequestAuditor
from src.db.engine import async_session_factory
from src.models.audit import IP_ADDRESS_LENGTH, USER_AGENT_LENGTH
from src.security.auth import Actor, get_optional_actor

_recorder = AuditRecorder(async_session_factory)


def get_audit_recorder() -> AuditRecorder:
    """The process-wide recorder. Overridden in tests."""
    return _recorder


def client_ip(request: Request) -> str | None:
    """Best-effort client address: proxy headers first, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value
    return request.client.host if request.client else None


async def get_request_auditor(
    request: Request,
    actor: Actor | None = Depends(get_optional_actor),
    recorder: AuditRecorder = Depends(get_audit_recorder),
) -> RequestAuditor:
    # Header values are client-controlled; clip them to the column widths.
    ip_address = client_ip(request)
    user_agent = request.headers.get("user-agent")
    return RequestAuditor(
        recorder=recorder,
        performed_by=actor.user_id if actor else None,
        ip_address=ip_address[:IP_ADDRESS_LENGTH] if ip_address else None,
        user_agent=user_agent[:USER_AGENT_LENGTH] if user_agent else None,
    )
