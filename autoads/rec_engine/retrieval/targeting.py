"""
Targeting-based retrieval.

Matches request context against campaign targeting rules.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from autoads.common.logger import get_logger
from autoads.schemas.targeting import DIMENSIONS, Targeting, TargetingContext

logger = get_logger(__name__)

T = TypeVar("T")


class TargetingMatcher:
    """
    Strict AND over targeting dimensions.

    A dimension constrains the match only when the campaign lists values for
    it and the request supplies a value; then the value must be listed.
    """

    def __init__(self, dimensions: Sequence[str] = DIMENSIONS):
        unknown = set(dimensions) - set(DIMENSIONS)
        if unknown:
            raise ValueError(f"Unknown targeting dimensions: {sorted(unknown)}")
        self.dimensions = tuple(dimensions)

    def matches(self, targeting: Targeting | None, context: TargetingContext | None) -> bool:
        """Check if the request context is admitted by the targeting rules."""
        if targeting is None or context is None:
            return True  # No targeting or no context = match all

        for dimension in self.dimensions:
            allowed = targeting.allowed(dimension)
            value = context.value(dimension)
            if not allowed or not value:
                continue
            if value not in allowed:
                return False

        return True

    def filter(
        self,
        items: Iterable[T],
        context: TargetingContext | None,
        key: Callable[[T], Targeting | None],
    ) -> list[T]:
        """Keep the items whose targeting (read through ``key``) admits the context."""
        matched = [item for item in items if self.matches(key(item), context)]
        logger.debug("Targeting filter applied", kept=len(matched))
        return matched
