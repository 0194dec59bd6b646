from decimal import ROUND_HALF_UP, Decimal
from typing import Union

MoneyLike = Union[Decimal, int, str, float]

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: MoneyLike) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr() keeps the shortest decimal form, Decimal(float) would not
        return Decimal(repr(value))
    return Decimal(value)


def round_money(value: MoneyLike) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def round_percent(value: MoneyLike) -> int:
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)
