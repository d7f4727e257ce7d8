"""Money is kept as integer minor units (cents); the payment API speaks decimals."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union


_CENT = Decimal('0.01')
_UNIT = Decimal('1')


def to_cents(amount: Union[int, float, str, Decimal]) -> int:
    return int((Decimal(str(amount)) / _CENT).quantize(_UNIT, rounding=ROUND_HALF_UP))


def to_decimal(cents: int) -> Decimal:
    return (Decimal(cents) * _CENT).quantize(_CENT)


def fee_of(total_cents: int, rate: Union[float, str, Decimal]) -> int:
    """Share of ``total_cents`` at ``rate``, rounded half-up to the cent."""
    return int((Decimal(total_cents) * Decimal(str(rate))).quantize(_UNIT, rounding=ROUND_HALF_UP))
