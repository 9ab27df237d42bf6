"""Exponential backoff shared by the chat connector and the delivery queue."""

import math
import random
from dataclasses import dataclass


@dataclass(frozen=True)
class BackoffPolicy:
    """Delay for retry ``attempt`` (1-based).

    ``min(cap, initial * multiplier ** n + jitter)`` where jitter is uniform in
    ``[0, jitter)``. ``n`` is the attempt number, but it stops growing once the
    base delay reaches ``cap`` (and at ``max_exponent`` when one is set), so
    delays never shrink from one attempt to the next.
    """

    initial: float = 1.0
    multiplier: float = 2.0
    cap: float = 30.0
    jitter: float = 0.0
    max_exponent: int | None = None

    def exponent(self, attempt: int) -> int:
        exponent = max(0, attempt)
        if self.max_exponent is not None:
            exponent = min(exponent, self.max_exponent)
        if self.multiplier > 1 and 0 < self.initial < self.cap:
            exponent = min(exponent, math.ceil(math.log(self.cap / self.initial, self.multiplier)))
        return exponent

    def delay(self, attempt: int, rng: random.Random | None = None) -> float:
        base = self.initial * self.multiplier ** self.exponent(attempt)
        if self.jitter > 0:
            base += (rng or random).random() * self.jitter
        return min(self.cap, base)


# Reconnects: 2s, 4s, 8s, 16s, then the cap (plus up to 0.5s jitter)
RECONNECT_BACKOFF = BackoffPolicy(initial=1.0, multiplier=2.0, cap=30.0, jitter=0.5)

# Delivery retries: 1s, 2s, 4s, capped at 8s
DELIVERY_BACKOFF = BackoffPolicy(initial=0.5, multiplier=2.0, cap=8.0)
