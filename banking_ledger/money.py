"""
Money Handling Module

Decimal parsing and cent rounding for ledger amounts.
NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Any
import re

from .errors import InvalidAmount

# Set global decimal context for financial precision
getcontext().prec = 28

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')


def round_cents(value: Decimal) -> Decimal:
    """Round a Decimal to two places using banker-safe half-up rounding"""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


# Plain "1250.00", grouped "1,250.00", or comma decimal "1,5"
_PLAIN_NUMBER = re.compile(r'[+-]?(\d+(\.\d*)?|\.\d+)')
_GROUPED_NUMBER = re.compile(r'[+-]?\d{1,3}(,\d{3})+(\.\d+)?')
_COMMA_DECIMAL = re.compile(r'[+-]?\d+,\d{1,2}')

_CURRENCY_AND_SPACE = re.compile(r'[\s$€£¥]')


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Args:
        value: String representation of number, e.g. "$1,250.00"

    Returns:
        Decimal value

    Raises:
        InvalidAmount: If string is not a plain, grouped or comma-decimal number
    """
    if not value or not isinstance(value, str):
        raise InvalidAmount("Value must be a non-empty string")

    clean_value = _CURRENCY_AND_SPACE.sub('', value)

    if _GROUPED_NUMBER.fullmatch(clean_value):
        clean_value = clean_value.replace(',', '')
    elif _COMMA_DECIMAL.fullmatch(clean_value):
        clean_value = clean_value.replace(',', '.')
    elif not _PLAIN_NUMBER.fullmatch(clean_value):
        raise InvalidAmount(f"Cannot convert '{value}' to Decimal")

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise InvalidAmount(f"Cannot convert '{value}' to Decimal")


def to_decimal(value: Any) -> Decimal:
    """
    Coerce an incoming amount to a finite Decimal

    Accepts Decimal, int, float (via its string form) and numeric strings.
    Booleans and anything non-numeric are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(f"Amount must be numeric, got {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        result = decimal_from_string(value)
    else:
        raise InvalidAmount(f"Amount must be numeric, got {type(value).__name__}")

    if not result.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")

    return result


def parse_amount(value: Any) -> Decimal:
    """
    Validate a user-supplied transaction amount

    Returns the amount rounded to cents. Raises InvalidAmount unless the
    rounded amount is strictly positive.
    """
    amount = round_cents(to_decimal(value))
    if amount <= ZERO:
        raise InvalidAmount(f"Amount must be positive, got {amount}")
    return amount
