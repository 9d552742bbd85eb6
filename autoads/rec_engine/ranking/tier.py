"""
Priority tier selection.

Ads compete only within the best (numerically lowest) priority tier present;
inside the tier one is drawn uniformly at random so that equal campaigns
rotate across requests.
"""

import random
from collections.abc import Callable, Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomProvider(Protocol):
    """Source of the tie-break draw."""

    def choice(self, seq: Sequence[T]) -> T: ...


class SystemRandomProvider:
    """Production randomness."""

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.SystemRandom()

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)


def top_tier(items: Sequence[T], priority: Callable[[T], int]) -> list[T]:
    """Items sharing the lowest priority value."""
    if not items:
        return []
    best = min(priority(item) for item in items)
    return [item for item in items if priority(item) == best]


class TierSelector:
    def __init__(self, random_provider: RandomProvider | None = None):
        self.random_provider = random_provider or SystemRandomProvider()

    def select(self, items: Sequence[T], priority: Callable[[T], int]) -> T | None:
        tier = top_tier(items, priority)
        if not tier:
            return None
        if len(tier) == 1:
            return tier[0]
        return self.random_provider.choice(tier)
