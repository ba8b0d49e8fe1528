"""
Currency and Money Module

Handles ISO 4217 currency codes, minor-unit precision and display formatting
for ledger amounts. NEVER uses float for monetary values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from dataclasses import dataclass
from typing import Optional, Union
from enum import Enum
import re

from .errors import InvalidAmountError

# Set global decimal context for financial precision
getcontext().prec = 28


class Currency(Enum):
    """ISO 4217 Currency Codes with precision and display symbol"""
    GHS = ("GHS", 2, "GH₵")  # Ghanaian Cedi, 100 pesewas
    USD = ("USD", 2, "$")
    EUR = ("EUR", 2, "€")
    GBP = ("GBP", 2, "£")
    NGN = ("NGN", 2, "₦")
    JPY = ("JPY", 0, "¥")  # No minor unit

    def __init__(self, code: str, precision: int, symbol: str):
        self.code = code
        self.precision = precision
        self.symbol = symbol


@dataclass(frozen=True)
class Money:
    """
    Immutable money value with currency, rounded to the currency's minor unit.
    """
    amount: Decimal
    currency: Currency

    def __post_init__(self):
        try:
            amount = self.amount
            if not isinstance(amount, Decimal):
                amount = Decimal(str(amount))
            rounded = validate_decimal_precision(amount, self.currency)
        except InvalidOperation:
            # Non-finite, or too many digits to hold at the minor unit
            raise ValueError(
                f"Amount {self.amount} cannot be represented in {self.currency.code}"
            )
        object.__setattr__(self, 'amount', rounded)

    @classmethod
    def zero(cls, currency: Currency) -> 'Money':
        return cls(Decimal('0'), currency)

    def _check_currency(self, other: 'Money', verb: str) -> None:
        if self.currency != other.currency:
            raise ValueError(f"Cannot {verb} {self.currency.code} and {other.currency.code}")

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> 'Money':
        return Money(-self.amount, self.currency)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return False
        return self.amount == other.amount and self.currency == other.currency

    def __hash__(self) -> int:
        return hash((self.amount, self.currency))

    def __lt__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: 'Money') -> bool:
        self._check_currency(other, "compare")
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.amount == Decimal('0')

    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.amount > Decimal('0')

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.amount < Decimal('0')

    def to_string(self) -> str:
        """Format with the ISO code, e.g. 'GHS 1,250.00'"""
        return f"{self.currency.code} {self.amount:,.{self.currency.precision}f}"

    def to_display(self, signed: bool = False) -> str:
        """
        Format with the currency symbol, e.g. 'GH₵50.00'.

        With signed=True a leading '+' or '-' is always shown, as in the
        transaction history list.
        """
        text = f"{self.currency.symbol}{abs(self.amount):.{self.currency.precision}f}"
        if self.is_negative():
            return f"-{text}"
        if signed:
            return f"+{text}"
        return text


_NUMBER_PATTERN = re.compile(
    r'[+-]?'
    r'(?:(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d*)?|\.\d+)'  # mantissa, optional thousands grouping
    r'(?:[eE][+-]?\d+)?'
)


def _strip_currency_marker(text: str, currency: Optional[Currency]) -> str:
    """Remove one leading or trailing currency symbol or ISO code"""
    currencies = [currency] if currency else list(Currency)
    markers = sorted(
        {marker for c in currencies for marker in (c.symbol, c.code)},
        key=len, reverse=True
    )
    upper = text.upper()
    for marker in markers:
        if upper.startswith(marker.upper()):
            return text[len(marker):].strip()
        if upper.endswith(marker.upper()):
            return text[:-len(marker)].strip()
    return text


def decimal_from_string(value: str, currency: Optional[Currency] = None) -> Decimal:
    """
    Safely convert string to Decimal

    Accepts an optional sign, digits with optional comma thousands grouping,
    one decimal point and an optional exponent. A single currency symbol or
    ISO code may lead or trail the number (or follow the sign). Anything else,
    such as embedded letters or a second number, is rejected rather than
    stripped.

    Args:
        value: String representation of number
        currency: Restrict the accepted symbol/code to this currency; any
            known currency if None

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    text = value.strip()
    sign = ''
    if text[:1] in ('+', '-'):
        sign, text = text[0], text[1:].strip()
    text = sign + _strip_currency_marker(text, currency)

    if not _NUMBER_PATTERN.fullmatch(text):
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    try:
        return Decimal(text.replace(',', ''))
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")


def validate_decimal_precision(value: Decimal, currency: Currency) -> Decimal:
    """Round decimal to currency precision"""
    return value.quantize(
        Decimal('0.1') ** currency.precision,
        rounding=ROUND_HALF_UP
    )


AmountLike = Union[Money, Decimal, int, float, str]


def parse_amount(value: AmountLike, currency: Currency) -> Money:
    """
    Convert caller input into Money in the given currency

    Floats are converted through str() so 0.1 becomes Decimal('0.1') rather
    than its binary expansion. Strings may carry this currency's symbol or
    code but no other text.

    Raises:
        InvalidAmountError: If the value is not a finite number, has too many
            digits for the currency, or carries a different currency
    """
    if isinstance(value, Money):
        if value.currency != currency:
            raise InvalidAmountError(
                f"Amount currency {value.currency.code} does not match ledger currency {currency.code}"
            )
        return value

    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    if isinstance(value, str):
        try:
            amount = decimal_from_string(value, currency)
        except ValueError:
            raise InvalidAmountError(f"Invalid amount: {value!r}")
    elif isinstance(value, (Decimal, int, float)):
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise InvalidAmountError(f"Invalid amount: {value!r}")
        if not amount.is_finite():
            raise InvalidAmountError(f"Invalid amount: {value!r}")
    else:
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    try:
        return Money(amount, currency)
    except ValueError:
        raise InvalidAmountError(f"Amount out of range: {value!r}")
