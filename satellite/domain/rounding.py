"""
Decimal helpers shared by the calculator and the usage tracker.
All rounding is ROUND_HALF_UP.
Non-finite or unrepresentable values degrade to 0 instead of raising.
"""

from decimal import Decimal, DecimalException, InvalidOperation, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal('0.01')
PRICE_STEP = Decimal('0.0001')
HUNDRED = Decimal('100')


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal via str() so floats keep their printed value"""
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation:
            return Decimal('0')
    if not value.is_finite():
        return Decimal('0')
    return value


def round2(value: Number) -> Decimal:
    """Round half-up to 2 decimal places"""
    try:
        return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    except DecimalException:
        return Decimal('0.00')


def round_price(value: Number) -> Decimal:
    """Round half-up to the 4 decimal places prices are stored with"""
    try:
        return to_decimal(value).quantize(PRICE_STEP, rounding=ROUND_HALF_UP)
    except DecimalException:
        return Decimal('0.0000')


def round_int(value: Number) -> int:
    """Round half-up to a whole number"""
    try:
        return int(to_decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    except DecimalException:
        return 0


def ratio_percentage(numerator: Number, denominator: Number) -> Decimal:
    """round2(numerator / denominator * 100), 0 when denominator <= 0"""
    den = to_decimal(denominator)
    if den <= 0:
        return Decimal('0.00')
    try:
        return round2(to_decimal(numerator) / den * HUNDRED)
    except DecimalException:
        return Decimal('0.00')
