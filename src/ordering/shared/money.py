"""Money value object — exact decimal amounts with two fractional digits.

Amounts are held as an integer number of cents so that no arithmetic on the
storefront ever passes through binary floating point. Values enter through
``Money.of()`` (strings, integers or ``Decimal``) and leave as ``Decimal`` or
their canonical string form (``"25.00"``).
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean.exceptions import ValidationError
from protean.fields import Integer

from ordering.domain import ordering
from ordering.errors import NegativeResultError

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert a monetary input to a Decimal rounded half-up to the cent."""
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError({"amount": ["Monetary amounts cannot be built from floating point numbers"]})
    try:
        return Decimal(str(value).strip()).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValidationError({"amount": [f"'{value}' is not a valid monetary amount"]}) from None


@ordering.value_object
class Money:
    """A monetary amount in the store currency."""

    cents = Integer(default=0)

    @classmethod
    def of(cls, value) -> "Money":
        if isinstance(value, Money):
            return value
        return cls(cents=int(to_decimal(value) / CENT))

    @classmethod
    def zero(cls) -> "Money":
        return cls(cents=0)

    @property
    def amount(self) -> Decimal:
        return (Decimal(self.cents or 0) * CENT).quantize(CENT)

    @property
    def is_zero(self) -> bool:
        return not self.cents

    # -------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------
    def add(self, other: "Money") -> "Money":
        return Money(cents=self.cents + other.cents)

    def subtract(self, other: "Money", allow_negative: bool = False) -> "Money":
        cents = self.cents - other.cents
        if cents < 0 and not allow_negative:
            raise NegativeResultError(f"{self} - {other} would be negative")
        return Money(cents=cents)

    def multiply(self, quantity: int) -> "Money":
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError("Money can only be multiplied by an integer quantity")
        return Money(cents=self.cents * quantity)

    def percentage(self, rate) -> "Money":
        """``rate`` percent of this amount, rounded half-up to the cent."""
        share = (self.amount * Decimal(str(rate)) / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
        return Money(cents=int(share / CENT))

    @staticmethod
    def min(first: "Money", second: "Money") -> "Money":
        return first if first.cents <= second.cents else second

    @staticmethod
    def total(amounts) -> "Money":
        return Money(cents=sum(amount.cents for amount in amounts))

    def compare(self, other: "Money") -> int:
        return (self.cents > other.cents) - (self.cents < other.cents)

    def __lt__(self, other):
        return self.compare(other) < 0

    def __le__(self, other):
        return self.compare(other) <= 0

    def __gt__(self, other):
        return self.compare(other) > 0

    def __ge__(self, other):
        return self.compare(other) >= 0

    def __str__(self):
        return str(self.amount)
