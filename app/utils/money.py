from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps 19.99 from becoming 19.989999...
    return Decimal(str(value))


def round_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Round a monetary amount to cents, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value: Union[Decimal, int, float, str]) -> str:
    return f"${round_money(value):.2f}"
