from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple, Union

from rental_pricing.core.utils import ZERO, MoneyLike, ceil_div, to_decimal
from rental_pricing.schemas import DurationUnit, PricingMode

Instant = Union[datetime, str]

# Largest unit first so 10080 minutes reads as one week
_UNITS_DESCENDING = (
    DurationUnit.WEEK,
    DurationUnit.DAY,
    DurationUnit.HOUR,
)


def to_minutes(duration: MoneyLike, unit: DurationUnit) -> int:
    minutes = to_decimal(duration) * DurationUnit(unit).minutes
    rounded = int(minutes.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(1, rounded)


def from_minutes(minutes: int) -> Tuple[int, DurationUnit]:
    for unit in _UNITS_DESCENDING:
        if minutes % unit.minutes == 0:
            return minutes // unit.minutes, unit
    return minutes, DurationUnit.MINUTE


def pricing_mode_to_minutes(mode: PricingMode) -> int:
    return PricingMode(mode).minutes


def _as_utc(value: Instant) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _elapsed_microseconds(start: Instant, end: Instant) -> int:
    return (_as_utc(end) - _as_utc(start)) // timedelta(microseconds=1)


def calculate_duration(start: Instant, end: Instant, pricing_mode: PricingMode) -> int:
    """Whole pricing-mode units between two instants.

    Any partial period bills as a full one, and the result is never below 1.
    """
    period = timedelta(minutes=PricingMode(pricing_mode).minutes)
    elapsed = _elapsed_microseconds(start, end)
    return max(1, ceil_div(elapsed, period // timedelta(microseconds=1)))


def calculate_duration_minutes(start: Instant, end: Instant) -> int:
    elapsed = _elapsed_microseconds(start, end)
    return max(1, ceil_div(elapsed, 60_000_000))


def per_minute_cost(price: MoneyLike, period_minutes: int) -> Decimal:
    if period_minutes <= 0:
        return ZERO
    return to_decimal(price) / period_minutes


def normalize_price_to_period(
    price: MoneyLike, from_period_minutes: int, target_period_minutes: int
) -> Decimal:
    if from_period_minutes <= 0 or target_period_minutes <= 0:
        return ZERO
    return per_minute_cost(price, from_period_minutes) * target_period_minutes
