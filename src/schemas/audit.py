"""Audit trail schemas — the read shape of AuditLog rows.

Entries serialise with camelCase keys (`entityType`, `performedBy`, ...)
for the admin UI. Snapshot payloads stay opaque string-keyed maps.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.models.enums import AuditAction, EntityType

# Keys of the `changes` payload.
BEFORE = "before"
AFTER = "after"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PerformerSummary(_CamelModel):
    """Public fields of the actor behind an entry."""

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str


class AuditLogEntry(_CamelModel):
    """One immutable audit record as returned by the query endpoints."""

    id: uuid.UUID
    entity_type: EntityType
    entity_id: str
    action: AuditAction
    changes: dict[str, Any]
    performed_by: uuid.UUID | None = None
    performer: PerformerSummary | None = None
    timestamp: datetime
    ip_address: str | None = None
    user_agent: str | None = None


def build_changes(
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Assemble a `changes` payload, omitting absent halves."""
    changes: dict[str, Any] = {}
    if before is not None:
        changes[BEFORE] = before
    if after is not None:
        changes[AFTER] = after
    return changes
