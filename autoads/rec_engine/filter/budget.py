"""
Budget filter.

Removes campaigns that have spent their total budget.
"""

from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any, Protocol, TypeVar

from autoads.common.logger import get_logger
from autoads.common.utils import to_decimal

logger = get_logger(__name__)

T = TypeVar("T")


class Budgeted(Protocol):
    budget: Any
    spent: Any


class BudgetFilter:
    """Total-budget gate. A budget of zero means unlimited spend."""

    @staticmethod
    def within_budget(campaign: Budgeted) -> bool:
        budget = to_decimal(campaign.budget)
        if budget == Decimal("0"):
            return True
        return to_decimal(campaign.spent) < budget

    def filter(self, items: Iterable[T], key: Callable[[T], Budgeted]) -> list[T]:
        """Keep the items whose campaign (read through ``key``) still has budget."""
        kept: list[T] = []
        for item in items:
            campaign = key(item)
            if self.within_budget(campaign):
                kept.append(item)
            else:
                logger.debug(
                    "Campaign over budget",
                    budget=str(campaign.budget),
                    spent=str(campaign.spent),
                )
        return kept
