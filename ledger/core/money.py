"""
Fixed-point money helpers.

Amounts travel as decimal strings and are stored as ``Numeric(19, 4)``.
Binary floats never enter the core.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from ledger.core.exceptions import InvalidAmount

SCALE = 4
PRECISION = 19
QUANTUM = Decimal(1).scaleb(-SCALE)  # 0.0001
UPPER_BOUND = Decimal(10) ** (PRECISION - SCALE)


def parse_amount(raw: Union[str, int, Decimal]) -> Decimal:
    """
    Parse a positive monetary amount into a 4-place ``Decimal``.

    Raises ``InvalidAmount`` for floats, malformed text, non-finite or
    non-positive values, more than 4 fractional digits, and values that do
    not fit the amount columns.
    """
    if isinstance(raw, (float, bool)) or raw is None:
        raise InvalidAmount()

    try:
        amount = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
    except InvalidOperation:
        raise InvalidAmount(f"Malformed amount: {raw!r}")

    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount()
    if amount >= UPPER_BOUND:
        raise InvalidAmount("Amount exceeds the supported range")

    quantized = amount.quantize(QUANTUM)
    if quantized != amount:
        raise InvalidAmount("Amount has more than 4 fractional digits")
    return quantized


def format_amount(amount: Decimal) -> str:
    """Render a stored amount as text with exactly 4 fractional digits."""
    return str(Decimal(amount).quantize(QUANTUM))
