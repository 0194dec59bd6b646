from decimal import Decimal

import pytest

from rental_pricing.schemas import (
    BookingAttributeAxis,
    CombinationAvailability,
    PricingTier,
    ProductPricing,
    Rate,
    RateBasedPricing,
)
from rental_pricing.services import plan_cache


@pytest.fixture(autouse=True)
def _fresh_plan_cache():
    plan_cache.clear()
    yield
    plan_cache.clear()


@pytest.fixture
def daily_pricing() -> ProductPricing:
    return ProductPricing(
        base_price=Decimal("100"),
        deposit=Decimal("50"),
        pricing_mode="day",
        tiers=[
            PricingTier(min_duration=3, discount_percent=10),
            PricingTier(min_duration=7, discount_percent=20),
        ],
    )


@pytest.fixture
def weekly_rate_pricing() -> RateBasedPricing:
    return RateBasedPricing(
        base_price=Decimal("20"),
        base_period_minutes=1440,
        deposit=Decimal("30"),
        rates=[Rate(id="week", price=Decimal("120"), period_minutes=10080)],
    )


@pytest.fixture
def axes():
    # positions deliberately out of list order
    return [
        BookingAttributeAxis(key="color", position=1),
        BookingAttributeAxis(key="size", position=0),
    ]


def make_combination(size: str, color: str, available: int) -> CombinationAvailability:
    return CombinationAvailability(
        combination_key=f"size:{size}|color:{color}",
        selected_attributes={"size": size, "color": color},
        available_quantity=available,
    )


@pytest.fixture
def combinations():
    return [
        make_combination("M", "Red", 2),
        make_combination("L", "Blue", 5),
        make_combination("M", "Blue", 1),
        make_combination("S", "Red", 0),
        make_combination("M", "Green", 3),
    ]
