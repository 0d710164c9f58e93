"""Timestamp helpers shared by the store and the wire models."""

from datetime import UTC, datetime


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_iso(dt: datetime) -> str:
    """Serialize a timestamp for storage, always in UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def from_iso(value: str | datetime | None) -> datetime | None:
    """Parse a stored or remote timestamp.

    Naive values are assumed to be UTC. ``None`` passes through.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        # Handle both 'Z' suffix and explicit timezone
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
