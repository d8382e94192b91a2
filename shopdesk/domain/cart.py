"""
Cart used while an operator composes a manual order

The cart is ephemeral view state: nothing here is persisted. Each entry keeps
the variant's stock at the time it was added as a ceiling, so the operator
cannot ask for more than was on the shelf. The inventory reconciler re-checks
live stock when the order is submitted.
"""
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from shopdesk.core.errors import NotFoundError, ValidationError
from shopdesk.domain.product import VariantDetail
from shopdesk.domain.stock import StockLine, quantize_money


class CartEntry(BaseModel):
    """One variant in the cart"""

    variant_id: int
    quantity: int
    unit_price: Decimal
    stock_ceiling: Optional[int] = Field(None, description="Variant stock when it was added")

    product_id: Optional[int] = None
    product_name: Optional[str] = None
    color_name: Optional[str] = None
    size_name: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return quantize_money(self.unit_price * self.quantity)

    def to_stock_line(self) -> StockLine:
        return StockLine(variant_id=self.variant_id, quantity=self.quantity)


class Cart:
    """Ordered collection of cart entries keyed by variant"""

    def __init__(self, entries: Optional[List[CartEntry]] = None):
        self._entries: Dict[int, CartEntry] = {}
        for entry in entries or []:
            existing = self._entries.get(entry.variant_id)
            if existing:
                # Repeated variant: quantities add up, the first entry's price stands
                existing.quantity += entry.quantity
            else:
                self._entries[entry.variant_id] = entry.model_copy()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries.values())

    @property
    def entries(self) -> List[CartEntry]:
        return list(self._entries.values())

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def total(self) -> Decimal:
        return quantize_money(sum((e.unit_price * e.quantity for e in self._entries.values()), Decimal("0")))

    def add(self, variant: VariantDetail) -> CartEntry:
        """
        Add one unit of a variant

        A variant already in the cart has its quantity bumped instead of
        getting a second entry.

        Raises:
            ValidationError: variant out of stock, or the ceiling is reached
        """
        if variant.stock_quantity <= 0:
            raise ValidationError(f"Out of stock: {variant.sku or variant.id}")

        existing = self._entries.get(variant.id)
        if existing:
            if existing.stock_ceiling is not None and existing.quantity + 1 > existing.stock_ceiling:
                raise ValidationError(f"Max stock reached for {variant.sku or variant.id}")
            existing.quantity += 1
            return existing

        entry = CartEntry(
            variant_id=variant.id,
            quantity=1,
            unit_price=variant.unit_price,
            stock_ceiling=variant.stock_quantity,
            product_id=variant.product_id,
            product_name=variant.product_name,
            color_name=variant.color_name,
            size_name=variant.size_name,
        )
        self._entries[variant.id] = entry
        return entry

    def update_quantity(self, variant_id: int, delta: int) -> CartEntry:
        """
        Change an entry's quantity by delta

        Changes that would drop below 1 or exceed the stock ceiling are
        ignored and the entry is returned unchanged.
        """
        entry = self._entries.get(variant_id)
        if entry is None:
            raise NotFoundError("Cart entry", variant_id)

        new_qty = entry.quantity + delta
        if new_qty < 1:
            return entry
        if entry.stock_ceiling is not None and new_qty > entry.stock_ceiling:
            return entry

        entry.quantity = new_qty
        return entry

    def remove(self, variant_id: int) -> None:
        self._entries.pop(variant_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def stock_lines(self) -> List[StockLine]:
        return [e.to_stock_line() for e in self._entries.values()]
