"""Fixed-point currency value stored as integer minor units (paise)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

MINOR_UNITS_PER_MAJOR = 100
CENT = Decimal("0.01")
ONE = Decimal("1")
HUNDRED = Decimal("100")

Amount = Union[Decimal, int, str]


class InvalidAmount(ValueError):
    pass


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, float):
        # floats would smuggle binary rounding error into the amount
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmount(f"Not a decimal amount: {value!r}") from exc
    if not result.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value!r}")
    return result


@dataclass(frozen=True, order=True)
class Money:
    minor: int

    def __post_init__(self) -> None:
        if isinstance(self.minor, bool) or not isinstance(self.minor, int):
            raise TypeError("Money.minor must be an int")

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    @classmethod
    def from_major(cls, value: Amount, allow_negative: bool = False) -> Money:
        """Convert a user-facing amount (e.g. ``"99.50"``) to minor units.

        Rejects non-finite values, negatives unless ``allow_negative`` is set,
        and anything finer than one minor unit.
        """
        amount = _to_decimal(value)
        if amount < 0 and not allow_negative:
            raise InvalidAmount(f"Amount must not be negative, got {amount}")
        minor = amount * MINOR_UNITS_PER_MAJOR
        if minor != minor.to_integral_value():
            raise InvalidAmount(f"Amount {amount} has more precision than {CENT}")
        return cls(int(minor))

    def to_major(self) -> Decimal:
        return (Decimal(self.minor) / MINOR_UNITS_PER_MAJOR).quantize(CENT)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.minor + other.minor)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.minor - other.minor)

    def times(self, quantity: int) -> Money:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError("Quantity must be an int")
        return Money(self.minor * quantity)

    def apply_rate(self, rate_percent: Amount) -> Money:
        """Return ``rate_percent`` % of this amount, rounded half-up to a minor unit.

        Discount percentages and tax both go through here so totals are
        reproducible.
        """
        rate = _to_decimal(rate_percent)
        portion = (Decimal(self.minor) * rate / HUNDRED).quantize(ONE, rounding=ROUND_HALF_UP)
        return Money(int(portion))

    def format(self, symbol: str = "") -> str:
        sign = "-" if self.minor < 0 else ""
        return f"{sign}{symbol}{abs(self.to_major()):,}"

    def __str__(self) -> str:
        return str(self.to_major())
