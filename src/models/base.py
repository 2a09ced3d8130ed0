"""SQLAlchemy declarative base and shared mixins.

Mutable tables get `id`, `created_at`, and `updated_at` via the TimestampMixin.
Append-only tables take only the UUID key from UUIDPrimaryKeyMixin.

Column types are the generic `Uuid` / `JSON` so the same metadata runs on
PostgreSQL (native UUID + JSONB) and on SQLite in tests.
"""

from __future__ import annotations

import os
import threading
import time
import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON elsewhere.
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Timezone-aware now, used for application-assigned timestamps."""
    return datetime.now(UTC)


_uuid7_lock = threading.Lock()
_uuid7_last_ms = 0
_uuid7_seq = 0


def uuid7() -> uuid.UUID:
    """Time-ordered UUID (RFC 9562 version 7), monotonic within the process.

    The 12-bit `rand_a` field is used as a counter for ids minted in the same
    millisecond, so ids sort in creation order.
    """
    global _uuid7_last_ms, _uuid7_seq
    with _uuid7_lock:
        ms = time.time_ns() // 1_000_000
        if ms > _uuid7_last_ms:
            _uuid7_last_ms, _uuid7_seq = ms, 0
        else:
            _uuid7_seq += 1
            if _uuid7_seq > 0xFFF:
                _uuid7_last_ms, _uuid7_seq = _uuid7_last_ms + 1, 0
        ms, seq = _uuid7_last_ms, _uuid7_seq
    rand_b = int.from_bytes(os.urandom(8), "big") & ((1 << 62) - 1)
    value = (ms << 80) | (0x7 << 76) | (seq << 64) | (0b10 << 62) | rand_b
    return uuid.UUID(int=value)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


class UUIDPrimaryKeyMixin:
    """Mixin adding a time-ordered UUID primary key, assigned on insert."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )


class TimestampMixin(UUIDPrimaryKeyMixin):
    """Mixin adding id (UUID), created_at, and updated_at to every mutable model."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
