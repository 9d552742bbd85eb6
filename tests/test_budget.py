from dataclasses import dataclass
from decimal import Decimal

import pytest

from autoads.rec_engine.filter.budget import BudgetFilter


@dataclass
class FakeCampaign:
    name: str
    budget: Decimal
    spent: Decimal


@pytest.mark.parametrize(
    "budget, spent, eligible",
    [
        ("100.00", "0", True),
        ("100.00", "99.99", True),
        ("100.00", "100.00", False),
        ("100.00", "150.00", False),
        ("0", "0", True),
        ("0", "1000000.00", True),
    ],
)
def test_within_budget(budget, spent, eligible):
    campaign = FakeCampaign("c", Decimal(budget), Decimal(spent))
    assert BudgetFilter.within_budget(campaign) is eligible


def test_float_values_compared_exactly():
    # 0.1 + 0.2 as a float is slightly above 0.3
    campaign = FakeCampaign("c", 0.3, 0.1 + 0.2)
    assert not BudgetFilter.within_budget(campaign)

    campaign = FakeCampaign("c", Decimal("0.30"), Decimal("0.29"))
    assert BudgetFilter.within_budget(campaign)


def test_filter_drops_exhausted_campaigns():
    campaigns = [
        FakeCampaign("open", Decimal("500"), Decimal("10")),
        FakeCampaign("exhausted", Decimal("500"), Decimal("500")),
        FakeCampaign("unlimited", Decimal("0"), Decimal("9999")),
    ]

    kept = BudgetFilter().filter(campaigns, key=lambda c: c)

    assert [c.name for c in kept] == ["open", "unlimited"]
