import math
from decimal import Decimal
from functools import reduce
from typing import Iterable, List, Optional, Sequence

from loguru import logger

from rental_pricing.config.settings import get_settings
from rental_pricing.core.exceptions import InvalidRateException
from rental_pricing.core.utils import (
    HUNDRED,
    ZERO,
    MoneyLike,
    ceil_div,
    round_money,
    to_decimal,
)
from rental_pricing.monitoring.metrics import MetricsCollector
from rental_pricing.schemas import (
    BASE_RATE_ID,
    BestRateResult,
    Rate,
    RateBasedPricing,
    RateCalculationResult,
    RatePlanEntry,
)
from rental_pricing.services import plan_cache
from rental_pricing.services.duration import normalize_price_to_period, per_minute_cost


def gcd_of_list(values: Sequence[int]) -> int:
    if not values:
        return 1
    return reduce(math.gcd, values) or 1


def _target_minutes(duration_minutes: MoneyLike) -> int:
    return max(1, math.ceil(to_decimal(duration_minutes)))


def _normalize_rates(rates: Iterable[Rate]) -> List[Rate]:
    # Ties on period are broken by price then id so the plan never depends on input order
    usable = [rate for rate in rates if rate.period_minutes > 0 and rate.price >= 0]
    return sorted(usable, key=lambda r: (r.period_minutes, r.price, r.id))


def _fallback_plan(rates: List[Rate], target: int, reason: str) -> BestRateResult:
    cheapest = min(
        rates, key=lambda r: (per_minute_cost(r.price, r.period_minutes), r.period_minutes)
    )
    count = ceil_div(target, cheapest.period_minutes)

    MetricsCollector.record_optimizer_fallback(reason)
    logger.warning(
        f"Rate optimizer fell back to {count} x rate {cheapest.id} "
        f"for {target} minutes ({reason})"
    )

    return BestRateResult(
        total_cost=round_money(cheapest.price * count),
        covered_minutes=count * cheapest.period_minutes,
        plan=(RatePlanEntry(rate=cheapest, quantity=count),),
        is_fallback=True,
    )


def calculate_best_rate(
    duration_minutes: MoneyLike,
    rates: Iterable[Rate],
    max_steps: Optional[int] = None,
) -> BestRateResult:
    """Cheapest multiset of rate periods whose summed length covers the duration.

    Runs a dynamic program over a minute axis discretized by the gcd of all
    periods. Overshooting the target is allowed. Among equal-cost plans the
    one with fewer periods wins, then the one ending at the earliest step.
    If the table would exceed ``max_steps`` the cheapest per-minute rate is
    repeated instead, which may be suboptimal.
    """
    normalized = _normalize_rates(rates)
    target = _target_minutes(duration_minutes)

    if not normalized:
        return BestRateResult(total_cost=round_money(ZERO), covered_minutes=target)

    scale = gcd_of_list([rate.period_minutes for rate in normalized])
    rate_steps = [rate.period_minutes // scale for rate in normalized]
    prices = [rate.price for rate in normalized]
    target_steps = ceil_div(target, scale)
    table_steps = target_steps + max(rate_steps)

    limit = max_steps if max_steps is not None else get_settings().rate_optimizer_max_steps
    if table_steps > limit:
        return _fallback_plan(normalized, target, "table_limit")

    MetricsCollector.record_optimizer_table(table_steps)

    cost: List[Optional[Decimal]] = [None] * (table_steps + 1)
    segments = [0] * (table_steps + 1)
    prev_step = [-1] * (table_steps + 1)
    prev_rate = [-1] * (table_steps + 1)
    cost[0] = ZERO

    for step in range(1, table_steps + 1):
        for index, rate_step in enumerate(rate_steps):
            # rate_steps is ascending, nothing further fits either
            if rate_step > step:
                break
            source = step - rate_step
            source_cost = cost[source]
            if source_cost is None:
                continue

            candidate_cost = source_cost + prices[index]
            candidate_segments = segments[source] + 1
            current = cost[step]
            if (
                current is None
                or candidate_cost < current
                or (candidate_cost == current and candidate_segments < segments[step])
            ):
                cost[step] = candidate_cost
                segments[step] = candidate_segments
                prev_step[step] = source
                prev_rate[step] = index

    best_step = -1
    for step in range(target_steps, table_steps + 1):
        step_cost = cost[step]
        if step_cost is None:
            continue
        if best_step == -1 or step_cost < cost[best_step]:
            best_step = step
        elif step_cost == cost[best_step] and segments[step] < segments[best_step]:
            best_step = step

    if best_step == -1:
        return _fallback_plan(normalized, target, "no_covering_step")

    quantities = [0] * len(normalized)
    cursor = best_step
    while cursor > 0:
        index = prev_rate[cursor]
        if index < 0:
            break
        quantities[index] += 1
        cursor = prev_step[cursor]

    plan = tuple(
        RatePlanEntry(rate=rate, quantity=quantity)
        for rate, quantity in zip(normalized, quantities)
        if quantity > 0
    )

    logger.debug(
        f"Best rate plan for {target} minutes: cost={cost[best_step]}, "
        f"steps={best_step}/{table_steps}, scale={scale}, "
        f"plan={[(entry.rate.id, entry.quantity) for entry in plan]}"
    )

    return BestRateResult(
        total_cost=round_money(cost[best_step]),
        covered_minutes=best_step * scale,
        plan=plan,
    )


def _plan_cache_key(target: int, rates: Sequence[Rate]) -> tuple:
    # str() keeps the price exponent, so 120 and 120.00 stay distinct entries
    return (
        target,
        tuple(
            (rate.id, str(rate.price), rate.period_minutes, rate.display_order)
            for rate in rates
        ),
    )


def cached_best_rate(duration_minutes: MoneyLike, rates: Sequence[Rate]) -> BestRateResult:
    if not plan_cache.is_enabled():
        return calculate_best_rate(duration_minutes, rates)

    key = _plan_cache_key(_target_minutes(duration_minutes), rates)
    cached = plan_cache.get_cached(key)
    MetricsCollector.record_plan_cache(cached is not None)
    if cached is not None:
        return cached

    result = calculate_best_rate(duration_minutes, rates)
    plan_cache.put_cached(key, result)
    return result


def build_base_rate(pricing: RateBasedPricing) -> Rate:
    return Rate(
        id=BASE_RATE_ID,
        price=pricing.base_price,
        period_minutes=pricing.base_period_minutes,
        display_order=-1,
    )


def calculate_rental_price_v2(
    pricing: RateBasedPricing, duration_minutes: MoneyLike, quantity: int
) -> RateCalculationResult:
    target = _target_minutes(duration_minutes)
    rates = [build_base_rate(pricing), *pricing.rates]
    best = cached_best_rate(target, rates)

    subtotal = best.total_cost * quantity
    deposit = pricing.deposit * quantity

    base_periods = ceil_div(target, pricing.base_period_minutes)
    original_subtotal = base_periods * pricing.base_price * quantity
    savings = original_subtotal - subtotal
    reduction_percent = (
        round_money(savings / original_subtotal * HUNDRED)
        if original_subtotal > 0
        else None
    )

    # max() keeps the first entry among equal quantities
    dominant = max(best.plan, key=lambda entry: entry.quantity, default=None)

    MetricsCollector.record_price_calculation("rate_based")

    return RateCalculationResult(
        subtotal=round_money(subtotal),
        deposit=round_money(deposit),
        total=round_money(subtotal),
        applied_rate=dominant.rate if dominant else None,
        periods_used=sum(entry.quantity for entry in best.plan),
        plan=best.plan,
        savings=round_money(savings),
        reduction_percent=reduction_percent,
        duration_minutes=target,
        quantity=quantity,
        original_subtotal=round_money(original_subtotal),
    )


def is_rate_based_product(base_period_minutes: Optional[int]) -> bool:
    return bool(base_period_minutes and base_period_minutes > 0)


def compute_reduction_percent(
    base_price: MoneyLike,
    base_period_minutes: int,
    rate_price: MoneyLike,
    rate_period_minutes: int,
) -> Decimal:
    """Discount of a rate against the base price stretched over the same period."""
    expected = normalize_price_to_period(
        base_price, base_period_minutes, rate_period_minutes
    )
    if expected <= 0:
        return round_money(ZERO)
    return round_money((expected - to_decimal(rate_price)) / expected * HUNDRED)


def validate_rates(rates: Sequence[Rate]) -> None:
    ids = [rate.id for rate in rates]
    if len(ids) != len(set(ids)):
        raise InvalidRateException("Each rate must have a unique id")

    periods = [rate.period_minutes for rate in rates]
    if len(periods) != len(set(periods)):
        raise InvalidRateException("Each rate must have a unique period")

    for rate in rates:
        if rate.id == BASE_RATE_ID:
            raise InvalidRateException(f"Rate id {BASE_RATE_ID} is reserved")
        if rate.period_minutes <= 0:
            raise InvalidRateException("Rate period must be positive")
        if rate.price < 0:
            raise InvalidRateException("Rate price must not be negative")


def get_available_duration_minutes(
    rates: Sequence[Rate], enforce_strict_tiers: bool
) -> Optional[List[int]]:
    if not enforce_strict_tiers or not rates:
        return None
    return sorted({rate.period_minutes for rate in rates if rate.period_minutes > 0})


def snap_to_nearest_rate_period(
    duration_minutes: int, available_periods: Sequence[int]
) -> int:
    if not available_periods:
        return duration_minutes
    for period in available_periods:
        if period >= duration_minutes:
            return period
    return available_periods[-1]
