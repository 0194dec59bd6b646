from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from rental_pricing.core.utils import round_money
from rental_pricing.schemas import DurationUnit, PricingMode
from rental_pricing.services.duration import (
    calculate_duration,
    calculate_duration_minutes,
    from_minutes,
    normalize_price_to_period,
    per_minute_cost,
    pricing_mode_to_minutes,
    to_minutes,
)


def test_to_minutes_uses_unit_constants():
    assert to_minutes(1, DurationUnit.MINUTE) == 1
    assert to_minutes(2, DurationUnit.HOUR) == 120
    assert to_minutes(3, DurationUnit.DAY) == 4320
    assert to_minutes(1, DurationUnit.WEEK) == 10080


def test_to_minutes_rounds_and_floors_at_one():
    assert to_minutes(Decimal("1.5"), DurationUnit.MINUTE) == 2
    assert to_minutes("0.25", DurationUnit.HOUR) == 15
    assert to_minutes(Decimal("0.001"), DurationUnit.MINUTE) == 1


def test_from_minutes_picks_largest_dividing_unit():
    assert from_minutes(10080) == (1, DurationUnit.WEEK)
    assert from_minutes(20160) == (2, DurationUnit.WEEK)
    assert from_minutes(2880) == (2, DurationUnit.DAY)
    assert from_minutes(90) == (90, DurationUnit.MINUTE)
    assert from_minutes(180) == (3, DurationUnit.HOUR)


@pytest.mark.parametrize("unit", [DurationUnit.HOUR, DurationUnit.DAY, DurationUnit.WEEK])
@pytest.mark.parametrize("n", [1, 5, 13])
def test_round_trip_for_coarse_units(unit, n):
    assert from_minutes(to_minutes(n, unit)) == (n, unit)


def test_seven_days_reads_back_as_one_week():
    assert from_minutes(to_minutes(7, DurationUnit.DAY)) == (1, DurationUnit.WEEK)


def test_pricing_mode_to_minutes():
    assert pricing_mode_to_minutes(PricingMode.HOUR) == 60
    assert pricing_mode_to_minutes("day") == 1440
    assert pricing_mode_to_minutes(PricingMode.WEEK) == 10080


def test_calculate_duration_rounds_partial_periods_up():
    start = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    assert calculate_duration(start, start + timedelta(minutes=5), "hour") == 1
    assert calculate_duration(start, start + timedelta(hours=2), "hour") == 2
    assert calculate_duration(start, start + timedelta(hours=2, seconds=1), "hour") == 3
    assert calculate_duration(start, start + timedelta(days=1), "day") == 1
    assert calculate_duration(start, start + timedelta(days=1, minutes=1), "day") == 2
    assert calculate_duration(start, start + timedelta(days=8), "week") == 2


def test_calculate_duration_never_below_one():
    start = datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert calculate_duration(start, start, "day") == 1
    assert calculate_duration(start, start - timedelta(days=3), "day") == 1


def test_calculate_duration_accepts_naive_and_iso_strings():
    assert calculate_duration("2024-05-01T10:00:00", "2024-05-03T09:00:00", "day") == 2
    aware_end = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    assert calculate_duration(datetime(2024, 5, 1, 10, 0), aware_end, "hour") == 3


def test_calculate_duration_minutes():
    start = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert calculate_duration_minutes(start, start + timedelta(seconds=61)) == 2
    assert calculate_duration_minutes(start, start + timedelta(hours=1)) == 60
    assert calculate_duration_minutes(start, start) == 1


def test_per_minute_cost_guards_zero_period():
    assert per_minute_cost(Decimal("60"), 0) == 0
    assert per_minute_cost(Decimal("60"), -5) == 0
    assert per_minute_cost(Decimal("60"), 60) == 1


def test_normalize_price_to_period():
    assert round_money(normalize_price_to_period(Decimal("120"), 10080, 1440)) == Decimal("17.14")
    assert round_money(normalize_price_to_period(Decimal("20"), 1440, 10080)) == Decimal("140")
    assert normalize_price_to_period(Decimal("20"), 0, 1440) == 0
