"""Audit trail — recorder (write path) and query service (read path)."""

from src.audit.queries import AuditQueryService, InvalidEntityTypeError, audit_query_service
from src.audit.recorder import AuditRecorder, RequestAuditor

__all__ = [
    "AuditQueryService",
    "AuditRecorder",
    "InvalidEntityTypeError",
    "RequestAuditor",
    "audit_query_service",
]
