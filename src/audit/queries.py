"""Audit query service — entity history, user activity, and the recent feed.

Stateless reads over the append-only audit_log table. Every result is
ordered newest first; entries sharing a timestamp are ordered by id so
repeated reads return identical pages.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.audit.pagination import normalize_limit, normalize_skip, parse_time_bound
from src.config import AuditSettings, settings
from src.models.audit import AuditLog
from src.models.enums import EntityType
from src.models.user import User
from src.schemas.audit import AuditLogEntry, PerformerSummary

logger = logging.getLogger(__name__)


class InvalidEntityTypeError(ValueError):
    """Raised when an entity type outside EntityType is queried."""

    def __init__(self, value: str) -> None:
        super().__init__("Invalid entity type")
        self.value = value


def _parse_user_id(value: uuid.UUID | str) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class AuditQueryService:
    """Answers the three audit timeline queries."""

    def __init__(self, audit_settings: AuditSettings | None = None) -> None:
        self._cfg = audit_settings or settings.audit

    async def get_entity_history(
        self,
        db: AsyncSession,
        entity_type: EntityType | str,
        entity_id: str,
        limit: int | str | None = None,
        skip: int | str | None = None,
        since: datetime | str | None = None,
        until: datetime | str | None = None,
    ) -> list[AuditLogEntry]:
        """All entries for one entity, newest first.

        Raises:
            InvalidEntityTypeError: `entity_type` is not an EntityType value.
                Raised before the database is touched.
        """
        try:
            entity = EntityType(entity_type)
        except ValueError:
            raise InvalidEntityTypeError(str(entity_type)) from None

        query = select(AuditLog).where(
            AuditLog.entity_type == entity.value,
            AuditLog.entity_id == str(entity_id),
        )
        return await self._fetch_page(
            db,
            query,
            limit=normalize_limit(limit, self._cfg.default_page_size, self._cfg.max_page_size),
            skip=normalize_skip(skip),
            since=since,
            until=until,
        )

    async def get_user_activity(
        self,
        db: AsyncSession,
        user_id: uuid.UUID | str,
        limit: int | str | None = None,
        skip: int | str | None = None,
        since: datetime | str | None = None,
        until: datetime | str | None = None,
    ) -> list[AuditLogEntry]:
        """Entries performed by one actor, newest first."""
        actor = _parse_user_id(user_id)
        if actor is None:
            # Not a user identifier; nothing can have been performed by it.
            return []

        query = select(AuditLog).where(AuditLog.performed_by == actor)
        return await self._fetch_page(
            db,
            query,
            limit=normalize_limit(limit, self._cfg.default_page_size, self._cfg.max_page_size),
            skip=normalize_skip(skip),
            since=since,
            until=until,
        )

    async def get_recent_activity(
        self,
        db: AsyncSession,
        limit: int | str | None = None,
        since: datetime | str | None = None,
        until: datetime | str | None = None,
    ) -> list[AuditLogEntry]:
        """The unfiltered live feed: latest entries system-wide."""
        return await self._fetch_page(
            db,
            select(AuditLog),
            limit=normalize_limit(limit, self._cfg.default_recent_size, self._cfg.max_recent_size),
            skip=0,
            since=since,
            until=until,
        )

    async def _fetch_page(
        self,
        db: AsyncSession,
        query: Select[tuple[AuditLog]],
        limit: int,
        skip: int,
        since: datetime | str | None,
        until: datetime | str | None,
    ) -> list[AuditLogEntry]:
        lower = parse_time_bound(since)
        upper = parse_time_bound(until)
        if lower is not None:
            query = query.where(AuditLog.timestamp >= lower)
        if upper is not None:
            query = query.where(AuditLog.timestamp < upper)

        result = await db.execute(
            query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .offset(skip)
            .limit(limit)
        )
        logs = list(result.scalars().all())
        performers = await self._load_performers(db, logs)

        return [
            AuditLogEntry(
                id=log.id,
                entity_type=log.entity_type,
                entity_id=log.entity_id,
                action=log.action,
                changes=log.changes or {},
                performed_by=log.performed_by,
                performer=performers.get(log.performed_by) if log.performed_by else None,
                timestamp=log.timestamp,
                ip_address=log.ip_address,
                user_agent=log.user_agent,
            )
            for log in logs
        ]

    async def _load_performers(
        self, db: AsyncSession, logs: Sequence[AuditLog]
    ) -> dict[uuid.UUID, PerformerSummary]:
        """Public profile of every actor on the page that still exists."""
        actor_ids = {log.performed_by for log in logs if log.performed_by is not None}
        if not actor_ids:
            return {}
        result = await db.execute(select(User).where(User.id.in_(actor_ids)))
        return {user.id: PerformerSummary.model_validate(user) for user in result.scalars().all()}


# Module-level singleton
audit_query_service = AuditQueryService()
