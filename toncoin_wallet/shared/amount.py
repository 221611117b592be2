"""Integer amounts in the smallest unit of an asset."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from fractions import Fraction


@dataclass(frozen=True)
class Amount:
    value: int
    decimals: int

    def __post_init__(self):
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"Amount value must be an int, got {type(self.value).__name__}")

    def to_decimal(self) -> Decimal:
        return Decimal(self.value).scaleb(-self.decimals)

    def __str__(self) -> str:
        return f"{self.to_decimal():f}"


def multiply_atom(value: int, factor: float | str | Decimal) -> int:
    """Multiply an integer amount by a decimal factor and floor the result."""
    ratio = Fraction(Decimal(str(factor)))
    return (value * ratio.numerator) // ratio.denominator


def to_atom(value: Decimal, decimals: int) -> int:
    return int((value.scaleb(decimals)).to_integral_value(rounding=ROUND_FLOOR))
