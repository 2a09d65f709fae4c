# app/utils/decimal_utils.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re
from typing import Any

CENT = Decimal("0.01")

LEADING_NUMBER = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def to_decimal(value: Any) -> Decimal:
    """
    Lenient numeric coercion: anything missing or non-numeric becomes 0.
    Strings with trailing garbage keep their leading number ("12kg" -> 12).
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    else:
        number = _parse_leading_number(str(value).strip())
    if not number.is_finite():
        return Decimal("0")
    return number


def _parse_leading_number(text: str) -> Decimal:
    match = LEADING_NUMBER.match(text)
    if match is None:
        return Decimal("0")
    try:
        return Decimal(match.group(0))
    except InvalidOperation:
        return Decimal("0")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
