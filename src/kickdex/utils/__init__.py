"""Utility functions package."""

from kickdex.utils.formatting import normalize_participant, truncate_message
from kickdex.utils.time import from_iso, to_iso, utcnow

__all__ = [
    "normalize_participant",
    "truncate_message",
    "utcnow",
    "to_iso",
    "from_iso",
]
