"""
Inventory reconciler: stock reservation and restoration for orders

Every stock movement caused by an order goes through this service:
- reserve_stock when an order is created (all-or-nothing per order)
- restore_stock when an order is cancelled (exactly once per order)

Both accept the caller's cursor so they run inside the same transaction as
the order write. Without a cursor they open and commit their own.

Author: TM3
Date: 2026-03-02
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional

from shopdesk.core.config import settings
from shopdesk.core.database import transaction
from shopdesk.core.errors import InsufficientStockError, NotFoundError, ValidationError
from shopdesk.domain.product import InventoryMatch, VariantDetail
from shopdesk.domain.stock import StockLine
from shopdesk.repositories.product_repository import ProductRepository
from shopdesk.repositories.variant_repository import VariantRepository

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


def normalize_lines(lines: Iterable[StockLine]) -> List[StockLine]:
    """
    Validate stock lines and merge repeated variants

    Returns one line per variant, sorted by variant id so that concurrent
    transactions always lock variant rows in the same order.

    Raises:
        ValidationError: empty list, or a quantity that is not a positive integer
    """
    merged: Dict[int, int] = {}
    for line in lines:
        quantity = line.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(
                f"Quantity for variant {line.variant_id} must be a positive integer, got {quantity!r}"
            )
        merged[line.variant_id] = merged.get(line.variant_id, 0) + quantity

    if not merged:
        raise ValidationError("No stock lines given")

    return [StockLine(variant_id=v, quantity=q) for v, q in sorted(merged.items())]


class InventoryService:
    """Service for stock movements and inventory lookups"""

    def __init__(
        self,
        variants: Optional[VariantRepository] = None,
        products: Optional[ProductRepository] = None,
        transaction_factory: Optional[Callable] = None
    ):
        self.variants = variants or VariantRepository()
        self.products = products or ProductRepository()
        self._transaction = transaction_factory or transaction

    def reserve_stock(self, lines: Iterable[StockLine], cursor=None) -> Dict[int, int]:
        """
        Deduct stock for every line, or for none of them

        Each deduction is a conditional decrement, so the availability check
        and the write are one atomic statement. The first line that cannot be
        satisfied raises; the enclosing transaction is then rolled back and
        no earlier deduction survives.

        Returns:
            Dict of variant_id -> new stock level

        Raises:
            ValidationError: bad quantities
            NotFoundError: variant does not exist
            InsufficientStockError: variant has fewer units than requested
        """
        normalized = normalize_lines(lines)

        if cursor is None:
            with self._transaction("reserve stock") as own_cursor:
                return self.reserve_stock(normalized, own_cursor)

        levels: Dict[int, int] = {}
        for line in normalized:
            new_level = self.variants.decrement_if_sufficient(cursor, line.variant_id, line.quantity)
            if new_level is None:
                available = self.variants.get_stock(cursor, line.variant_id)
                if available is None:
                    raise NotFoundError("Variant", line.variant_id)
                logger.info(
                    f"Reservation refused for variant {line.variant_id}: "
                    f"requested {line.quantity}, available {available}"
                )
                raise InsufficientStockError(line.variant_id, line.quantity, available)
            levels[line.variant_id] = new_level

        logger.info(f"Reserved stock for {len(normalized)} variant(s): {levels}")
        return levels

    def restore_stock(self, lines: Iterable[StockLine], cursor=None) -> Dict[int, int]:
        """
        Put units back into stock (atomic increment, no upper bound)

        Only OrderService calls this, once per order entering 'cancelled'.

        Returns:
            Dict of variant_id -> new stock level

        Raises:
            ValidationError: bad quantities
            NotFoundError: variant no longer exists
        """
        normalized = normalize_lines(lines)

        if cursor is None:
            with self._transaction("restore stock") as own_cursor:
                return self.restore_stock(normalized, own_cursor)

        levels: Dict[int, int] = {}
        for line in normalized:
            new_level = self.variants.increment(cursor, line.variant_id, line.quantity)
            if new_level is None:
                raise NotFoundError("Variant", line.variant_id)
            levels[line.variant_id] = new_level

        logger.info(f"Restored stock for {len(normalized)} variant(s): {levels}")
        return levels

    def low_stock(self, threshold: Optional[int] = None, limit: int = 5) -> List[VariantDetail]:
        """Variants of active products running low (dashboard widget)"""
        threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
        return self.variants.find_low_stock(threshold=threshold, limit=limit)

    def search(self, term: str, limit: int = 10) -> List[InventoryMatch]:
        """
        Search products by name or SKU and attach their variants

        Terms shorter than two characters return nothing.
        """
        term = (term or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            return []

        products = self.products.search(term)[:limit]
        variants = self.variants.find_by_product_ids([p.id for p in products])
        return [InventoryMatch(product=p, variants=variants.get(p.id, [])) for p in products]
