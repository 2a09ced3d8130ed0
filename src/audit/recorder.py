"""Audit recorder — persists one immutable AuditLog row per mutation.

`AuditRecorder.record` validates its arguments, then writes the entry in a
session of its own so a failed audit insert can never roll back the caller's
transaction. Storage errors propagate out of `record`; `RequestAuditor`
(below) is the per-request facade that swallows and logs them.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.models.audit import AuditLog
from src.models.enums import AuditAction, EntityType
from src.schemas.audit import AFTER, BEFORE, build_changes

logger = logging.getLogger(__name__)


def coerce_entity_type(value: EntityType | str) -> EntityType:
    """Return the EntityType for `value`; raise ValueError for anything else."""
    if isinstance(value, EntityType):
        return value
    try:
        return EntityType(value)
    except ValueError:
        msg = f"Invalid entity type: {value!r}"
        raise ValueError(msg) from None


def _coerce_action(value: AuditAction | str) -> AuditAction:
    if isinstance(value, AuditAction):
        return value
    try:
        return AuditAction(value)
    except ValueError:
        msg = f"Invalid audit action: {value!r}"
        raise ValueError(msg) from None


class AuditRecorder:
    """Writes audit entries through an injected session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(
        self,
        entity_type: EntityType | str,
        entity_id: str,
        action: AuditAction | str,
        changes: dict[str, Any],
        performed_by: uuid.UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditLog:
        """Append one entry to the audit store and return it.

        Raises:
            ValueError: unknown entity type or action, empty entity id,
                or `changes` carrying neither a before nor an after snapshot.
        """
        entity = coerce_entity_type(entity_type)
        verb = _coerce_action(action)
        if not entity_id:
            msg = "entity_id must be non-empty"
            raise ValueError(msg)
        payload = build_changes(changes.get(BEFORE), changes.get(AFTER))
        if not payload:
            msg = f"{verb.value} on {entity.value}:{entity_id} carries no before/after snapshot"
            raise ValueError(msg)

        entry = AuditLog(
            entity_type=entity.value,
            entity_id=str(entity_id),
            action=verb.value,
            changes=payload,
            performed_by=performed_by,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        async with self._session_factory() as db:
            db.add(entry)
            await db.commit()

        logger.debug(
            "Audit entry %s: %s %s:%s by %s",
            entry.id,
            verb.value,
            entity.value,
            entity_id,
            performed_by or "system",
        )
        return entry


@dataclass(frozen=True)
class RequestAuditor:
    """Audit facade bound to one request's actor and provenance.

    Injected into mutation handlers. Every method is best-effort: storage
    failures are logged for operators and `None` is returned, so the
    handler's response never depends on the audit write.
    """

    recorder: AuditRecorder
    performed_by: uuid.UUID | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    async def log_create(
        self, entity_type: EntityType, entity_id: str, after: dict[str, Any]
    ) -> AuditLog | None:
        return await self._log(entity_type, entity_id, AuditAction.CREATE, build_changes(after=after))

    async def log_update(
        self,
        entity_type: EntityType,
        entity_id: str,
        before: dict[str, Any],
        after: dict[str, Any],
    ) -> AuditLog | None:
        return await self._log(
            entity_type, entity_id, AuditAction.UPDATE, build_changes(before=before, after=after)
        )

    async def log_delete(
        self, entity_type: EntityType, entity_id: str, before: dict[str, Any]
    ) -> AuditLog | None:
        return await self._log(entity_type, entity_id, AuditAction.DELETE, build_changes(before=before))

    async def _log(
        self,
        entity_type: EntityType,
        entity_id: str,
        action: AuditAction,
        changes: dict[str, Any],
    ) -> AuditLog | None:
        try:
            return await self.recorder.record(
                entity_type,
                entity_id,
                action,
                changes,
                performed_by=self.performed_by,
                ip_address=self.ip_address,
                user_agent=self.user_agent,
            )
        except ValueError:
            # Bad arguments are a wiring bug at the call site, not an outage.
            raise
        except Exception:
            logger.exception(
                "Failed to persist audit entry: %s %s:%s (actor=%s)",
                action.value,
                entity_type.value,
                entity_id,
                self.performed_by,
            )
            return None
