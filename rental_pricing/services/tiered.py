from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from rental_pricing.core.exceptions import InvalidPricingTiersException
from rental_pricing.core.utils import (
    HUNDRED,
    ZERO,
    MoneyLike,
    round_money,
    round_percent,
    to_decimal,
)
from rental_pricing.monitoring.metrics import MetricsCollector
from rental_pricing.schemas import (
    PriceCalculationResult,
    PricingBreakdown,
    PricingMode,
    PricingTier,
    ProductPricing,
)

MAX_DISCOUNT_PERCENT = Decimal("99")

_MODE_LABELS = {
    PricingMode.HOUR: ("hour", "hours"),
    PricingMode.DAY: ("day", "days"),
    PricingMode.WEEK: ("week", "weeks"),
}


def find_applicable_tier(
    tiers: Iterable[PricingTier], duration: int
) -> Optional[PricingTier]:
    """Tier with the largest threshold the duration still qualifies for."""
    candidates = [tier for tier in tiers if tier.min_duration > 0]
    if not candidates:
        return None

    # sorted() is stable, so equal thresholds keep their configured order
    for tier in sorted(candidates, key=lambda t: t.min_duration, reverse=True):
        if duration >= tier.min_duration:
            return tier
    return None


def calculate_effective_price(
    base_price: MoneyLike, tier: Optional[PricingTier]
) -> Decimal:
    base_price = to_decimal(base_price)
    if tier is None:
        return base_price
    return base_price * (1 - tier.discount_percent / HUNDRED)


def calculate_rental_price(
    pricing: ProductPricing, duration: int, quantity: int
) -> PriceCalculationResult:
    tier = find_applicable_tier(pricing.tiers, duration)
    effective_price = calculate_effective_price(pricing.base_price, tier)

    original_subtotal = pricing.base_price * duration * quantity
    subtotal = effective_price * duration * quantity
    deposit = pricing.deposit * quantity

    savings = original_subtotal - subtotal
    savings_percent = (
        round_percent(savings / original_subtotal * HUNDRED)
        if original_subtotal > 0
        else 0
    )

    MetricsCollector.record_price_calculation("tiered")
    logger.debug(
        f"Tiered price: base={pricing.base_price}, duration={duration}, "
        f"quantity={quantity}, tier={tier.min_duration if tier else None}, "
        f"subtotal={subtotal}"
    )

    return PriceCalculationResult(
        subtotal=round_money(subtotal),
        original_subtotal=round_money(original_subtotal),
        deposit=round_money(deposit),
        # deposit is a refundable hold and never part of the charge
        total=round_money(subtotal),
        effective_price_per_unit=round_money(effective_price),
        base_price=round_money(pricing.base_price),
        applied_tier=tier,
        discount_percent=tier.discount_percent if tier else None,
        duration=duration,
        quantity=quantity,
        savings=round_money(savings),
        savings_percent=savings_percent,
    )


def calculate_unit_price(
    base_price: MoneyLike, tiers: Iterable[PricingTier], duration: int
) -> Tuple[Decimal, Optional[Decimal]]:
    tier = find_applicable_tier(tiers, duration)
    effective_price = calculate_effective_price(base_price, tier)
    return (
        round_money(effective_price * duration),
        tier.discount_percent if tier else None,
    )


def validate_pricing_tiers(tiers: Sequence[PricingTier]) -> None:
    durations = [tier.min_duration for tier in tiers]
    if len(durations) != len(set(durations)):
        raise InvalidPricingTiersException(
            "Each pricing tier must have a unique minimum duration"
        )

    for tier in tiers:
        if tier.min_duration < 1:
            raise InvalidPricingTiersException(
                "Minimum duration must be at least 1"
            )
        if tier.discount_percent < ZERO or tier.discount_percent > MAX_DISCOUNT_PERCENT:
            raise InvalidPricingTiersException(
                "Discount must be between 0 and 99%"
            )


def sort_tiers_by_duration(tiers: Iterable[PricingTier]) -> List[PricingTier]:
    return sorted(tiers, key=lambda tier: tier.min_duration)


def get_available_durations(
    tiers: Sequence[PricingTier], enforce_strict_tiers: bool
) -> Optional[List[int]]:
    """Durations a customer may book when package pricing is enforced.

    Returns None for progressive pricing, where any duration is allowed.
    """
    if not enforce_strict_tiers or not tiers:
        return None
    return sorted({1, *(tier.min_duration for tier in tiers)})


def snap_to_nearest_tier(duration: int, available_durations: Sequence[int]) -> int:
    if not available_durations:
        return duration
    for candidate in available_durations:
        if candidate >= duration:
            return candidate
    return available_durations[-1]


def get_pricing_mode_label(mode: PricingMode, plural: bool = False) -> str:
    singular, plural_label = _MODE_LABELS[PricingMode(mode)]
    return plural_label if plural else singular


def generate_pricing_breakdown(
    result: PriceCalculationResult, pricing_mode: PricingMode
) -> PricingBreakdown:
    tier_label = None
    if result.applied_tier is not None:
        min_duration = result.applied_tier.min_duration
        tier_label = (
            f"{min_duration}+ "
            f"{get_pricing_mode_label(pricing_mode, plural=min_duration > 1)}"
        )

    return PricingBreakdown(
        base_price=result.base_price,
        effective_price=result.effective_price_per_unit,
        duration=result.duration,
        pricing_mode=pricing_mode,
        discount_percent=result.discount_percent,
        discount_amount=result.savings,
        tier_applied=tier_label,
    )
