"""Audit timeline endpoints — JSON API consumed by the admin UI.

GET /audit/entity/{entity_type}/{entity_id}  — one entity's history
GET /audit/user/{user_id}                    — one actor's activity
GET /audit/recent                            — global live feed

Paging parameters are read as raw strings and normalised permissively;
only an unknown entity type is rejected (400).
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.queries import AuditQueryService, InvalidEntityTypeError, audit_query_service
from src.db.engine import get_session
from src.schemas.audit import AuditLogEntry
from src.schemas.responses import ApiResponse, error_response, success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audit", tags=["audit"])


def get_audit_query_service() -> AuditQueryService:
    return audit_query_service


@router.get("/entity/{entity_type}/{entity_id}", response_model=ApiResponse[list[AuditLogEntry]])
async def entity_history(
    entity_type: str,
    entity_id: str,
    limit: str | None = Query(None),
    skip: str | None = Query(None),
    since: str | None = Query(None),
    until: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    service: AuditQueryService = Depends(get_audit_query_service),
) -> JSONResponse:
    """Create/update/delete history of a Project, Task or User."""
    try:
        history = await service.get_entity_history(
            db, entity_type, entity_id, limit=limit, skip=skip, since=since, until=until
        )
    except InvalidEntityTypeError:
        return error_response("Invalid entity type", status.HTTP_400_BAD_REQUEST)
    except Exception:
        logger.exception("Entity history query failed: %s:%s", entity_type, entity_id)
        return error_response("Error fetching entity history")
    return success_response(history)


@router.get("/user/{user_id}", response_model=ApiResponse[list[AuditLogEntry]])
async def user_activity(
    user_id: str,
    limit: str | None = Query(None),
    skip: str | None = Query(None),
    since: str | None = Query(None),
    until: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    service: AuditQueryService = Depends(get_audit_query_service),
) -> JSONResponse:
    """Everything one user has created, updated or deleted."""
    try:
        activity = await service.get_user_activity(
            db, user_id, limit=limit, skip=skip, since=since, until=until
        )
    except Exception:
        logger.exception("User activity query failed: user=%s", user_id)
        return error_response("Error fetching user activity")
    return success_response(activity)


@router.get("/recent", response_model=ApiResponse[list[AuditLogEntry]])
async def recent_activity(
    limit: str | None = Query(None),
    since: str | None = Query(None),
    until: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
    service: AuditQueryService = Depends(get_audit_query_service),
) -> JSONResponse:
    """Most recent entries across all entities and actors. No `skip`."""
    try:
        activity = await service.get_recent_activity(db, limit=limit, since=since, until=until)
    except Exception:
        logger.exception("Recent activity query failed")
        return error_response("Error fetching recent activity")
    return success_response(activity)
