"""
Currency and Decimal Handling Module

ISO 4217 currency metadata and the conversions every ledger amount goes
through. NEVER uses float for monetary values: floats are routed through
str() before they become Decimal.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from enum import Enum
from typing import Type, Union
import re

from .errors import ValidationError

# Set global decimal context for financial precision
getcontext().prec = 28

Numeric = Union[Decimal, int, float, str]


class Currency(Enum):
    """ISO 4217 Currency Codes with precision and display symbol"""
    EUR = ("EUR", 2, "€")
    USD = ("USD", 2, "$")
    GBP = ("GBP", 2, "£")
    CHF = ("CHF", 2, "CHF")
    MAD = ("MAD", 2, "DH")
    JPY = ("JPY", 0, "¥")

    def __init__(self, code: str, precision: int, symbol: str):
        self.code = code
        self.precision = precision
        self.symbol = symbol

    @property
    def quantum(self) -> Decimal:
        """Smallest representable unit (0.01 for EUR)"""
        return Decimal('0.1') ** self.precision

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        try:
            return cls[code.strip().upper()]
        except KeyError:
            raise ValidationError(f"Unsupported currency code '{code}'")


# "1050", "1050.5", "1050,5"
PLAIN_NUMBER = re.compile(r'^[+-]?\d+(?:[.,](\d+))?$')
# "1,050" groups with an optional dot decimal part
COMMA_GROUPED = re.compile(r'^[+-]?\d{1,3}(?:,\d{3})+(?:\.\d+)?$')
# "1 050" groups with an optional dot or comma decimal part
SPACE_GROUPED = re.compile(r'^[+-]?\d{1,3}(?: \d{3})+(?:[.,]\d+)?$')
# "1.050,50": dot groups always followed by a comma decimal part
DOT_GROUPED = re.compile(r'^[+-]?\d{1,3}(?:\.\d{3})+,\d+$')


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Accepts "1050.50", "1050,5", "1,050.50", "1,500,000", "1 050,50" and
    "1.050,50". A lone comma followed by exactly three digits ("1,500")
    could be either separator and is rejected, as is any letter or symbol.

    Args:
        value: String representation of number

    Returns:
        Decimal value

    Raises:
        ValueError: If string is ambiguous or cannot be converted
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    # Any run of whitespace (including narrow no-break spaces) is one group separator
    clean_value = re.sub(r'\s+', ' ', value.strip())

    match = PLAIN_NUMBER.match(clean_value)
    if match:
        if ',' in clean_value:
            if len(match.group(1)) == 3:
                raise ValueError(
                    f"Ambiguous amount '{value}': use '.' as the decimal separator"
                )
            clean_value = clean_value.replace(',', '.')
    elif COMMA_GROUPED.match(clean_value):
        clean_value = clean_value.replace(',', '')
    elif SPACE_GROUPED.match(clean_value):
        clean_value = clean_value.replace(' ', '').replace(',', '.')
    elif DOT_GROUPED.match(clean_value):
        clean_value = clean_value.replace('.', '').replace(',', '.')
    else:
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")


def to_decimal(value: Numeric, error_cls: Type[ValidationError] = ValidationError,
               field_name: str = "value") -> Decimal:
    """
    Coerce user input into a finite Decimal

    Args:
        value: Decimal, int, float or numeric string
        error_cls: ValidationError subclass raised on bad input
        field_name: Name used in the error message

    Returns:
        Finite Decimal
    """
    if value is None:
        raise error_cls(f"{field_name} is required")
    if isinstance(value, bool):
        raise error_cls(f"{field_name} must be a number, not a boolean")

    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, int):
            result = Decimal(value)
        elif isinstance(value, float):
            result = Decimal(str(value))
        elif isinstance(value, str):
            result = decimal_from_string(value)
        else:
            raise error_cls(f"{field_name} must be numeric, got {type(value).__name__}")
    except ValueError as exc:
        if isinstance(exc, error_cls):
            raise
        raise error_cls(f"{field_name} is not a valid number: {value!r} ({exc})") from exc

    if not result.is_finite():
        raise error_cls(f"{field_name} must be a finite number")
    return result


def round_to_currency(value: Decimal, currency: Currency) -> Decimal:
    """Round a Decimal to the currency's minor unit (display only)"""
    return value.quantize(currency.quantum, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal, currency: Currency) -> str:
    """Format for display, e.g. 'EUR 1,050.00'"""
    rounded = round_to_currency(value, currency)
    if currency.precision == 0:
        return f"{currency.code} {rounded:,.0f}"
    return f"{currency.code} {rounded:,.{currency.precision}f}"
