"""Permissive parsing of paging and time-window query parameters.

Malformed values never fail a request: they fall back to defaults.
"""

from __future__ import annotations

from datetime import UTC, datetime


def _to_int(raw: int | str | None) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def normalize_limit(raw: int | str | None, default: int, cap: int) -> int:
    """Page size in `1..cap`; missing, non-numeric, zero or negative → `default`."""
    value = _to_int(raw)
    if value is None or value <= 0:
        value = default
    return min(value, cap)


def normalize_skip(raw: int | str | None) -> int:
    """Offset `>= 0`; missing, non-numeric or negative → 0."""
    value = _to_int(raw)
    if value is None or value < 0:
        return 0
    return value


def parse_time_bound(raw: datetime | str | None) -> datetime | None:
    """ISO-8601 instant, or None when absent or unparseable.

    Naive values are taken as UTC.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        parsed = raw
    else:
        try:
            parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
