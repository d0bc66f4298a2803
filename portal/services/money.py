"""
Money Utilities - Safe Decimal operations for monetary values.

Avoids float precision issues by using Decimal throughout.
Floats appear only at the JSON boundary towards the backend and frontend.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

# Precision for currencies without minor units (JPY, KRW, ...)
INTEGER_PRECISION = Decimal("1")

Number = Union[str, int, float, Decimal]


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Go through str to keep the shortest repr, not the binary expansion
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number, to_int: bool = False) -> Decimal:
    """
    Round monetary value for display.

    Args:
        value: Value to round
        to_int: If True, round to integer (currencies without minor units)

    Returns:
        Rounded Decimal value
    """
    decimal_value = to_decimal(value)
    precision = INTEGER_PRECISION if to_int else MONEY_PRECISION
    return decimal_value.quantize(precision, rounding=ROUND_HALF_UP)


def format_money(value: Number, currency: str = "USD") -> str:
    """
    Format monetary value with currency symbol.

    Args:
        value: Value to format
        currency: ISO currency code of the property

    Returns:
        Formatted string with currency symbol
    """
    from portal.services.currency import CURRENCY_SYMBOLS, INTEGER_CURRENCIES, PREFIX_CURRENCIES

    currency = (currency or "USD").upper()
    decimal_value = to_decimal(value)
    symbol = CURRENCY_SYMBOLS.get(currency, currency)

    if currency in INTEGER_CURRENCIES:
        formatted = f"{int(round_money(decimal_value, to_int=True)):,}"
    else:
        formatted = f"{round_money(decimal_value):,.2f}"

    if currency in PREFIX_CURRENCIES:
        return f"{symbol}{formatted}"
    return f"{formatted} {symbol}"


def to_float(value: Number) -> float:
    """
    Convert Decimal to float for JSON serialization or external APIs.

    Use only at API boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def parse_money(value: Number) -> Decimal:
    """
    Strict conversion for prices that will be charged.

    Unlike to_decimal(), nothing falls back to 0: None, booleans, unparseable
    text, NaN and infinities raise ValueError.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"not a monetary amount: {value!r}")
    try:
        decimal_value = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"not a monetary amount: {value!r}") from e
    if not decimal_value.is_finite():
        raise ValueError(f"not a finite amount: {value!r}")
    return decimal_value
