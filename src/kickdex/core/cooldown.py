"""Per-participant catch cooldowns."""

from datetime import datetime, timedelta


class CooldownTracker:
    """In-memory table of the last catch attempt per participant.

    Owned by the engine that created it. Entries are lost on restart, which
    only relaxes rate limiting.
    """

    def __init__(self, cooldown_seconds: float) -> None:
        self.cooldown = timedelta(seconds=cooldown_seconds)
        self._last_attempt: dict[str, datetime] = {}

    def __len__(self) -> int:
        return len(self._last_attempt)

    def remaining(self, participant_id: str, now: datetime) -> float:
        """Seconds left before the participant may try again (0 if none)."""
        last = self._last_attempt.get(participant_id)
        if last is None:
            return 0.0
        return max(0.0, (self.cooldown - (now - last)).total_seconds())

    def hit(self, participant_id: str, now: datetime) -> bool:
        """Record an attempt and report whether it falls inside the cooldown.

        The timestamp is refreshed even when the attempt is rejected.
        """
        on_cooldown = self.remaining(participant_id, now) > 0
        self._last_attempt[participant_id] = now
        return on_cooldown

    def prune(self, now: datetime) -> int:
        """Drop entries whose cooldown has fully elapsed."""
        stale = [
            pid for pid, last in self._last_attempt.items()
            if now - last >= self.cooldown
        ]
        for pid in stale:
            del self._last_attempt[pid]
        return len(stale)

    def clear(self) -> None:
        self._last_attempt.clear()
