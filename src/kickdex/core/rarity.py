"""Rarity weights and the weighted species draw."""

import random
from bisect import bisect_right
from collections.abc import Sequence
from itertools import accumulate

from kickdex.core.types import Rarity, SpeciesInfo

# Relative spawn weights per tier
RARITY_WEIGHTS: dict[str, float] = {
    Rarity.COMMON.value: 1.0,
    Rarity.UNCOMMON.value: 0.6,
    Rarity.RARE.value: 0.2,
    Rarity.LEGENDARY.value: 0.05,
}
UNKNOWN_RARITY_WEIGHT = 0.1

# Each species holds weight * TICKETS_PER_WEIGHT tickets in the draw (at least one)
TICKETS_PER_WEIGHT = 100

# Base catch rate per tier, used when seeding the catalog
BASE_CATCH_RATES: dict[str, float] = {
    Rarity.COMMON.value: 0.7,
    Rarity.UNCOMMON.value: 0.25,
    Rarity.RARE.value: 0.08,
    Rarity.LEGENDARY.value: 0.01,
}

MAX_CATCH_CHANCE = 0.99


def rarity_weight(rarity: str) -> float:
    """Get the spawn weight for a rarity tier."""
    return RARITY_WEIGHTS.get(rarity, UNKNOWN_RARITY_WEIGHT)


def ticket_count(rarity: str) -> int:
    """Number of draw tickets a species of the given tier receives."""
    return max(1, round(rarity_weight(rarity) * TICKETS_PER_WEIGHT))


def pick_weighted_species(
    species: Sequence[SpeciesInfo],
    rng: random.Random | None = None,
) -> SpeciesInfo | None:
    """Pick a species with probability proportional to its tier weight.

    Equivalent to putting ``ticket_count`` copies of every species in a bucket
    and drawing one uniformly, without building the bucket.
    """
    if not species:
        return None

    rng = rng or random
    cumulative = list(accumulate(ticket_count(s.rarity) for s in species))
    ticket = rng.randrange(cumulative[-1])
    return species[bisect_right(cumulative, ticket)]


def catch_chance(base_rate: float, modifier: float) -> float:
    """Probability that a throw succeeds, capped below certainty."""
    return min(MAX_CATCH_CHANCE, base_rate * modifier)
