"""AuditLog model — immutable before/after trail for Project, Task and User mutations.

This table is append-only — no updates or deletes. Rows are written by
AuditRecorder and read back by AuditQueryService.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, JSONType, UUIDPrimaryKeyMixin, utcnow

IP_ADDRESS_LENGTH = 64
USER_AGENT_LENGTH = 512


class AuditLog(UUIDPrimaryKeyMixin, Base):
    """Immutable audit trail entry."""

    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_entity", "entity_type", "entity_id"),
        Index("ix_audit_log_performed_by_timestamp", "performed_by", "timestamp"),
        Index("ix_audit_log_timestamp", "timestamp"),
    )

    # What was touched
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False, comment="EntityType enum value")
    entity_id: Mapped[str] = mapped_column(String(100), nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False, comment="AuditAction enum value")

    # {"before": {...}, "after": {...}} — either half may be omitted
    changes: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    # Who and when (performed_by is NULL for system/unauthenticated actions)
    performed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True))
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    # Request provenance, best-effort
    ip_address: Mapped[str | None] = mapped_column(String(IP_ADDRESS_LENGTH))
    user_agent: Mapped[str | None] = mapped_column(String(USER_AGENT_LENGTH))

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.entity_type}:{self.entity_id}>"
