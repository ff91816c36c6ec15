"""
Money helpers.

Amounts are stored as integers in the minor currency unit and only turned
into ``Decimal`` at the edges.
"""

from decimal import Decimal

MINOR_UNIT_FACTOR = Decimal(100)
CENT = Decimal("0.01")


def cents_to_amount(cents: int) -> Decimal:
    """Convert an integer amount of cents to a two-place Decimal (``1050 -> Decimal("10.50")``)."""
    return (Decimal(cents) / MINOR_UNIT_FACTOR).quantize(CENT)
