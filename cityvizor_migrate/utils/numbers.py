"""
Numeric coercion for loosely typed document-store values

Follows JavaScript Number() conversion, which is how the source application
stored and read these fields:

    >>> to_number(" 42 ")
    Decimal('42')
    >>> to_number("")
    Decimal('0')
    >>> to_number("0x10")
    Decimal('16')
    >>> to_number("1_000") is None
    True
"""
import logging
import re
from datetime import date, datetime
from decimal import Decimal

logger = logging.getLogger(__name__)

# StrDecimalLiteral: digits only, no separators, optional sign and exponent
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Unsigned 0x / 0o / 0b literals
_RADIX_LITERAL = re.compile(r"0(?:[xX](?P<hex>[0-9a-fA-F]+)|[oO](?P<oct>[0-7]+)|[bB](?P<bin>[01]+))")
_RADIX_BASES = {"hex": 16, "oct": 8, "bin": 2}


def _parse_text(text: str) -> Decimal | None:
    """
    Разобрать строку как JS Number()

    Args:
        text: Строка без пробелов по краям, не пустая

    Returns:
        Decimal или None (NaN / Infinity)
    """
    if _DECIMAL_LITERAL.fullmatch(text):
        return Decimal(text)

    match = _RADIX_LITERAL.fullmatch(text)
    if match:
        for group, base in _RADIX_BASES.items():
            digits = match.group(group)
            if digits is not None:
                return Decimal(int(digits, base))

    # "abc", "1_000", "-0x10", "Infinity", non-ASCII digits ...
    return None


def to_number(value) -> Decimal | None:
    """
    Convert a value to Decimal, None when it is not a finite number

    None/missing is NaN, empty or blank string is 0, booleans are 1/0.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return Decimal(0)
        number = _parse_text(text)
        if number is None:
            return None
    else:
        return None

    if not number.is_finite():
        return None
    return number


def to_int(value) -> int | None:
    """Integer code (paragraph, item, ...) or None when not an integral number"""
    number = to_number(value)
    if number is None or number != number.to_integral_value():
        return None
    return int(number)


def parse_source_id(value) -> int | None:
    """
    Accounting-system id of an event

    Returns None for anything that does not convert to a non-zero integer.
    """
    number = to_int(value)
    return number or None


def to_amount(value) -> Decimal:
    """Money amount; a missing or non-numeric amount counts as zero"""
    number = to_number(value)
    return number if number is not None else Decimal(0)


def to_date(value) -> date | None:
    """
    Date column value

    Strings that are not ISO dates become None (with a warning) instead of
    aborting the run.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            logger.warning("Not an ISO date, stored as NULL: %r", value)
            return None
    return None
