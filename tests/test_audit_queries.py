"""Tests for AuditQueryService — ordering, filtering, paging, performers."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from src.audit.queries import AuditQueryService, InvalidEntityTypeError
from src.config import AuditSettings
from src.models.audit import AuditLog
from src.models.enums import AuditAction, EntityType
from src.models.user import User

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


# ── Helpers ──────────────────────────────────────────────────────────


def _entry(
    minute: int,
    entity_type: EntityType = EntityType.TASK,
    entity_id: str = "t-1",
    action: AuditAction = AuditAction.UPDATE,
    performed_by: uuid.UUID | None = None,
) -> AuditLog:
    return AuditLog(
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        changes={"before": {"m": minute - 1}, "after": {"m": minute}},
        performed_by=performed_by,
        timestamp=T0 + timedelta(minutes=minute),
    )


@pytest.fixture
def service() -> AuditQueryService:
    return AuditQueryService(
        AuditSettings(default_page_size=50, max_page_size=100, default_recent_size=100, max_recent_size=500)
    )


@pytest_asyncio.fixture
async def actor(db) -> User:
    user = User(first_name="Ada", last_name="Lovelace", email="ada@example.com", role="ADMIN")
    db.add(user)
    await db.commit()
    return user


# ── get_entity_history ───────────────────────────────────────────────


class TestEntityHistory:
    @pytest.mark.asyncio()
    async def test_returns_all_newest_first(self, service, db):
        db.add_all([_entry(m) for m in (3, 1, 4, 2)])
        db.add(_entry(5, entity_id="t-2"))
        db.add(_entry(6, entity_type=EntityType.PROJECT, entity_id="t-1"))
        await db.commit()

        history = await service.get_entity_history(db, EntityType.TASK, "t-1", limit=4, skip=0)

        assert len(history) == 4
        assert [h.changes["after"]["m"] for h in history] == [4, 3, 2, 1]
        assert all(h.entity_type is EntityType.TASK and h.entity_id == "t-1" for h in history)

    @pytest.mark.asyncio()
    async def test_string_entity_type_accepted(self, service, db):
        db.add(_entry(1, entity_type=EntityType.USER, entity_id="u-1"))
        await db.commit()

        history = await service.get_entity_history(db, "USER", "u-1")

        assert len(history) == 1

    @pytest.mark.asyncio()
    async def test_no_match_is_empty_list(self, service, db):
        assert await service.get_entity_history(db, EntityType.PROJECT, "missing") == []

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("bad", ["project", "COMMENT", "", "TASKS"])
    async def test_invalid_type_rejected_before_query(self, service, bad):
        db = AsyncMock()

        with pytest.raises(InvalidEntityTypeError, match="Invalid entity type"):
            await service.get_entity_history(db, bad, "x")

        db.execute.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_skip_offsets_into_sorted_results(self, service, db):
        db.add_all([_entry(m) for m in range(1, 6)])
        await db.commit()

        page = await service.get_entity_history(db, EntityType.TASK, "t-1", limit=2, skip=2)

        assert [h.changes["after"]["m"] for h in page] == [3, 2]

    @pytest.mark.asyncio()
    async def test_limit_capped(self, db):
        service = AuditQueryService(AuditSettings(default_page_size=2, max_page_size=3))
        db.add_all([_entry(m) for m in range(1, 6)])
        await db.commit()

        assert len(await service.get_entity_history(db, EntityType.TASK, "t-1", limit="999")) == 3
        assert len(await service.get_entity_history(db, EntityType.TASK, "t-1", limit="junk")) == 2
        assert len(await service.get_entity_history(db, EntityType.TASK, "t-1", limit=-4)) == 2

    @pytest.mark.asyncio()
    async def test_time_window(self, service, db):
        db.add_all([_entry(m) for m in range(1, 6)])
        await db.commit()

        page = await service.get_entity_history(
            db,
            EntityType.TASK,
            "t-1",
            since=(T0 + timedelta(minutes=2)).isoformat(),
            until=(T0 + timedelta(minutes=4)).isoformat(),
        )

        assert [h.changes["after"]["m"] for h in page] == [3, 2]

    @pytest.mark.asyncio()
    async def test_unparseable_time_window_ignored(self, service, db):
        db.add_all([_entry(m) for m in range(1, 4)])
        await db.commit()

        page = await service.get_entity_history(db, EntityType.TASK, "t-1", since="last week")

        assert len(page) == 3


# ── get_user_activity ────────────────────────────────────────────────


class TestUserActivity:
    @pytest.mark.asyncio()
    async def test_filters_by_actor_and_populates_performer(self, service, db, actor):
        other = uuid.uuid4()
        db.add_all([_entry(1, performed_by=actor.id), _entry(2, performed_by=other), _entry(3)])
        db.add(_entry(4, entity_type=EntityType.PROJECT, entity_id="p-1", performed_by=actor.id))
        await db.commit()

        activity = await service.get_user_activity(db, str(actor.id))

        assert len(activity) == 2
        assert all(a.performed_by == actor.id for a in activity)
        assert activity[0].entity_type is EntityType.PROJECT
        assert activity[0].performer is not None
        assert activity[0].performer.email == "ada@example.com"
        assert activity[0].performer.first_name == "Ada"

    @pytest.mark.asyncio()
    async def test_deleted_actor_has_no_performer(self, service, db):
        ghost = uuid.uuid4()
        db.add(_entry(1, performed_by=ghost))
        await db.commit()

        activity = await service.get_user_activity(db, ghost)

        assert len(activity) == 1
        assert activity[0].performed_by == ghost
        assert activity[0].performer is None

    @pytest.mark.asyncio()
    async def test_consecutive_pages_are_disjoint_and_contiguous(self, service, db):
        actor_id = uuid.uuid4()
        db.add_all([_entry(m, entity_id=f"t-{m}", performed_by=actor_id) for m in range(1, 11)])
        await db.commit()

        first = await service.get_user_activity(db, actor_id, limit=3, skip=2)
        second = await service.get_user_activity(db, actor_id, limit=3, skip=5)
        whole = await service.get_user_activity(db, actor_id, limit=6, skip=2)

        first_ids = [e.id for e in first]
        second_ids = [e.id for e in second]
        assert not set(first_ids) & set(second_ids)
        assert first_ids + second_ids == [e.id for e in whole]

    @pytest.mark.asyncio()
    async def test_non_uuid_user_matches_nothing(self, service):
        db = AsyncMock()

        assert await service.get_user_activity(db, "not-a-uuid") == []
        db.execute.assert_not_awaited()


# ── get_recent_activity ──────────────────────────────────────────────


class TestRecentActivity:
    @pytest.mark.asyncio()
    async def test_unfiltered_and_bounded(self, service, db):
        db.add_all(
            [
                _entry(1, entity_type=EntityType.PROJECT, entity_id="p-1", action=AuditAction.CREATE),
                _entry(2, entity_type=EntityType.TASK, entity_id="t-1", performed_by=uuid.uuid4()),
                _entry(3, entity_type=EntityType.USER, entity_id="u-1", action=AuditAction.DELETE),
            ]
        )
        await db.commit()

        everything = await service.get_recent_activity(db)
        top_two = await service.get_recent_activity(db, limit=2)

        assert [e.entity_type for e in everything] == [EntityType.USER, EntityType.TASK, EntityType.PROJECT]
        assert len(top_two) == 2
        assert [e.id for e in top_two] == [e.id for e in everything[:2]]

    @pytest.mark.asyncio()
    async def test_cap(self, db):
        service = AuditQueryService(AuditSettings(default_recent_size=2, max_recent_size=4))
        db.add_all([_entry(m, entity_id=f"t-{m}") for m in range(1, 8)])
        await db.commit()

        assert len(await service.get_recent_activity(db)) == 2
        assert len(await service.get_recent_activity(db, limit=50)) == 4


# ── Read idempotence & ties ──────────────────────────────────────────


class TestIdempotence:
    @pytest.mark.asyncio()
    async def test_repeated_reads_identical_with_timestamp_ties(self, service, db):
        db.add_all([_entry(1, entity_id="t-1") for _ in range(5)])
        await db.commit()

        first = await service.get_entity_history(db, EntityType.TASK, "t-1")
        second = await service.get_entity_history(db, EntityType.TASK, "t-1")

        assert [e.model_dump() for e in first] == [e.model_dump() for e in second]
        assert [e.id for e in first] == sorted((e.id for e in first), reverse=True)

    @pytest.mark.asyncio()
    async def test_timestamp_ties_follow_insertion_order(self, service, db):
        inserted = []
        for n in range(5):
            entry = _entry(1, entity_id="t-1")
            entry.changes = {"after": {"n": n}}
            db.add(entry)
            await db.flush()
            inserted.append(entry.id)
        await db.commit()

        history = await service.get_entity_history(db, EntityType.TASK, "t-1")

        assert [h.id for h in history] == list(reversed(inserted))
        assert [h.changes["after"]["n"] for h in history] == [4, 3, 2, 1, 0]
