"""Timestamp helpers — UTC-aware datetimes across SQLite and PostgreSQL.

Invariants:
    - Every datetime leaving this module is timezone-aware UTC
    - SQLite returns naive datetimes for DateTime(timezone=True); as_utc treats those as UTC
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso(value: datetime | None) -> str | None:
    """ISO-8601 with a Z suffix, or None."""
    value = as_utc(value)
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_ms(value: datetime | None = None) -> int:
    return int((as_utc(value) or utc_now()).timestamp() * 1000)


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """A missing expiry never expires."""
    if expires_at is None:
        return False
    return as_utc(expires_at) <= (now or utc_now())
