"""
Stock and money primitives shared by the cart, orders and the inventory reconciler
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")


def quantize_money(amount) -> Decimal:
    """Round a monetary amount to cents, half-up (same as Postgres ROUND on numeric)"""
    return Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class StockLine:
    """A (variant, quantity) pair passed to the inventory reconciler"""
    variant_id: int
    quantity: int
