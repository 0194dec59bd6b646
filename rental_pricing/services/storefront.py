from typing import List

from rental_pricing.core.utils import HUNDRED, ZERO, round_money
from rental_pricing.schemas import (
    BASE_RATE_ID,
    PricingConfig,
    RateBasedPricingConfig,
    StorefrontPricingSummary,
    StorefrontRateRow,
    TieredPricingConfig,
)
from rental_pricing.services.duration import normalize_price_to_period, per_minute_cost
from rental_pricing.services.rates import compute_reduction_percent


def _rate_based_rows(config: RateBasedPricingConfig) -> List[StorefrontRateRow]:
    pricing = config.pricing
    return [
        StorefrontRateRow(
            id=rate.id,
            period_minutes=rate.period_minutes,
            price=round_money(rate.price),
            reduction_percent=max(
                ZERO,
                compute_reduction_percent(
                    pricing.base_price,
                    pricing.base_period_minutes,
                    rate.price,
                    rate.period_minutes,
                ),
            ),
        )
        for rate in pricing.rates
        if rate.period_minutes > 0
    ]


def _tiered_rows(
    config: TieredPricingConfig, base_period_minutes: int
) -> List[StorefrontRateRow]:
    pricing = config.pricing
    rows = []
    for tier in pricing.tiers:
        if tier.min_duration <= 0:
            continue
        discount = max(ZERO, tier.discount_percent)
        unit_price = pricing.base_price * (1 - discount / HUNDRED)
        rows.append(
            StorefrontRateRow(
                id=tier.id or f"tier-{tier.min_duration}",
                period_minutes=tier.min_duration * base_period_minutes,
                price=round_money(unit_price * tier.min_duration),
                reduction_percent=discount,
            )
        )
    return rows


def get_storefront_rate_rows(config: PricingConfig) -> List[StorefrontRateRow]:
    """Both pricing models flattened to (period, price) rows, base row included."""
    if isinstance(config, RateBasedPricingConfig):
        base_period_minutes = config.pricing.base_period_minutes
        extra_rows = _rate_based_rows(config)
    else:
        base_period_minutes = config.pricing.pricing_mode.minutes
        extra_rows = _tiered_rows(config, base_period_minutes)

    base_row = StorefrontRateRow(
        id=BASE_RATE_ID,
        period_minutes=base_period_minutes,
        price=round_money(config.pricing.base_price),
        reduction_percent=ZERO,
    )
    return sorted(
        [base_row, *extra_rows], key=lambda row: (row.period_minutes, row.price)
    )


def get_storefront_pricing_summary(config: PricingConfig) -> StorefrontPricingSummary:
    rows = get_storefront_rate_rows(config)
    smallest_period = min(row.period_minutes for row in rows)
    best = min(
        rows, key=lambda row: (per_minute_cost(row.price, row.period_minutes), row.period_minutes)
    )

    return StorefrontPricingSummary(
        display_price=round_money(
            normalize_price_to_period(best.price, best.period_minutes, smallest_period)
        ),
        display_period_minutes=smallest_period,
        show_starting_from=best.id != BASE_RATE_ID,
        max_reduction_percent=max([row.reduction_percent for row in rows] + [ZERO]),
    )
