# app/utils/decimal_utils.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

TWOPLACES = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def compute_subtotal(items: Iterable) -> Decimal:
    """Sum of offer_price * quantity over quote items (ORM rows or payloads)."""
    total = sum(
        (to_decimal(i.offer_price) * i.quantity for i in items),
        Decimal("0.00"),
    )
    return to_decimal(total)


def money_amount(value) -> str:
    # GraphQL Decimal scalars are sent as strings
    return str(to_decimal(value))
