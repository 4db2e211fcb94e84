"""
Money and DCR unit helpers for billing arithmetic [CA][CMV]

USD amounts travel as `Money`, a Decimal wrapper with 4 decimal places
internally and 2 decimal places for display. DCR amounts are `Decimal`
values in user-facing code and integer atoms against the balance store.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, InvalidOperation
from typing import Union

from falbot.utils.logging import get_logger

logger = get_logger(__name__)

# 1 DCR = 10^11 atoms; the single source of truth for unit conversion [CMV]
ATOMS_PER_DCR = 10**11
DCR_DISPLAY_PRECISION = Decimal("0.00000001")

Number = Union[str, int, float, Decimal]


class Money:
    """
    Type-safe USD amount using Decimal for precise arithmetic.

    Internal precision is 4 decimal places, display precision is 2.
    """

    CURRENCY = "USD"
    INTERNAL_PRECISION = Decimal("0.0001")
    DISPLAY_PRECISION = Decimal("0.01")
    ZERO = Decimal("0")

    def __init__(self, value: Union[Number, "Money"]) -> None:
        if isinstance(value, Money):
            self._amount = value._amount
            return
        try:
            decimal_value = value if isinstance(value, Decimal) else Decimal(str(value))
            self._amount = decimal_value.quantize(
                self.INTERNAL_PRECISION, rounding=ROUND_HALF_UP
            )
        except (InvalidOperation, ValueError) as e:
            logger.error(f"Invalid money value: {value} - {e}")
            raise ValueError(f"Cannot convert {value} to Money: {e}")

        if self._amount < self.ZERO:
            logger.warning(f"Negative money value created: {self._amount}")

    @classmethod
    def zero(cls) -> Money:
        return cls(cls.ZERO)

    def to_decimal(self) -> Decimal:
        """Get raw Decimal value"""
        return self._amount

    def to_float(self) -> float:
        return float(self._amount)

    def to_display_string(self) -> str:
        """Format for user display with $ symbol"""
        return f"${self._amount.quantize(self.DISPLAY_PRECISION, rounding=ROUND_HALF_UP)}"

    def to_json_value(self) -> str:
        return str(self._amount)

    def __add__(self, other: Union[Money, Number]) -> Money:
        return Money(self._amount + Money(other)._amount)

    def __sub__(self, other: Union[Money, Number]) -> Money:
        return Money(self._amount - Money(other)._amount)

    def __mul__(self, factor: Number) -> Money:
        """Multiply money by a scalar factor (per-second price times seconds)"""
        return Money(self._amount * Decimal(str(factor)))

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (Money, int, float, Decimal, str)):
            return False
        return self._amount == Money(other)._amount

    def __lt__(self, other: Union[Money, Number]) -> bool:
        return self._amount < Money(other)._amount

    def __le__(self, other: Union[Money, Number]) -> bool:
        return self._amount <= Money(other)._amount

    def __gt__(self, other: Union[Money, Number]) -> bool:
        return self._amount > Money(other)._amount

    def __ge__(self, other: Union[Money, Number]) -> bool:
        return self._amount >= Money(other)._amount

    def __str__(self) -> str:
        return f"{self._amount} {self.CURRENCY}"

    def __repr__(self) -> str:
        return f"Money('{self._amount}')"

    def __hash__(self) -> int:
        return hash((self._amount, self.CURRENCY))

    def is_zero(self) -> bool:
        return self._amount == self.ZERO

    def is_positive(self) -> bool:
        return self._amount > self.ZERO


def dcr_to_atoms(dcr: Number) -> int:
    """Convert DCR to integer atoms, truncating toward zero."""
    value = dcr if isinstance(dcr, Decimal) else Decimal(str(dcr))
    return int((value * ATOMS_PER_DCR).to_integral_value(rounding=ROUND_DOWN))


def atoms_to_dcr(atoms: int) -> Decimal:
    """Convert integer atoms to an exact DCR Decimal."""
    return Decimal(int(atoms)) / Decimal(ATOMS_PER_DCR)


def format_dcr(dcr: Number) -> str:
    """Render a DCR amount with 8 decimal places."""
    value = dcr if isinstance(dcr, Decimal) else Decimal(str(dcr))
    return f"{value.quantize(DCR_DISPLAY_PRECISION, rounding=ROUND_HALF_UP):f}"


def format_usd(amount: Union[Money, Number]) -> str:
    """Render a USD amount with 2 decimal places, without the $ sign."""
    value = Money(amount).to_decimal()
    return f"{value.quantize(Money.DISPLAY_PRECISION, rounding=ROUND_HALF_UP):f}"
