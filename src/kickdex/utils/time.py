"""Timestamp helpers.

Timestamps are naive UTC datetimes everywhere in Kickdex.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Get the current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_iso(value: datetime) -> str:
    """Serialize a naive UTC datetime for the key/value store."""
    return value.isoformat()


def from_iso(value: str) -> datetime:
    """Parse a stored timestamp back to a naive UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
