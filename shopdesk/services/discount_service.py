"""
Discount Service
Category-wide sales and the store-wide "clear all discounts" switch

Each operation is a single bulk UPDATE inside one transaction. Only pricing
fields (sale_price, is_on_sale) are touched, never stock.

Author: TM3
Date: 2026-03-02
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Optional

from shopdesk.core.database import transaction
from shopdesk.core.errors import NotFoundError
from shopdesk.domain.product import HUNDRED, validate_percent
from shopdesk.repositories.product_repository import ProductRepository
from shopdesk.services.audit_service import AuditService

logger = logging.getLogger(__name__)


def summarize_active_sales(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Group on-sale products per category with the average discount

    Args:
        rows: dicts with price, sale_price, category_id, category_name

    Returns:
        [{'id', 'name', 'count', 'avg_discount'}] in first-seen order
    """
    groups: Dict[Any, Dict[str, Any]] = {}

    for row in rows:
        cat_id = row.get('category_id') or 'unknown'
        group = groups.setdefault(cat_id, {
            'id': cat_id,
            'name': row.get('category_name') or 'Uncategorized',
            'count': 0,
            'total_discount_pct': Decimal("0"),
        })

        price = Decimal(str(row['price']))
        sale_price = row.get('sale_price')
        discount = Decimal("0")
        if price and sale_price is not None:
            discount = HUNDRED - (Decimal(str(sale_price)) / price) * HUNDRED

        group['count'] += 1
        group['total_discount_pct'] += discount

    return [
        {
            'id': g['id'],
            'name': g['name'],
            'count': g['count'],
            'avg_discount': int((g["total_discount_pct"] / g["count"]).quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
        }
        for g in groups.values()
    ]


class DiscountService:
    """Applies and removes percentage discounts"""

    def __init__(
        self,
        products: Optional[ProductRepository] = None,
        audit: Optional[AuditService] = None,
        transaction_factory: Optional[Callable] = None
    ):
        self.products = products or ProductRepository()
        self.audit = audit or AuditService()
        self._transaction = transaction_factory or transaction

    def apply_category_discount(self, category_id: int, percent, actor: Optional[str] = None) -> int:
        """
        Put every active product of a category on sale

        sale_price = round(price * (1 - percent / 100), 2), is_on_sale = true

        Returns:
            Number of products updated

        Raises:
            ValidationError: percent outside (0, 100)
            NotFoundError: category does not exist
        """
        pct = validate_percent(percent)

        with self._transaction("apply category discount") as cursor:
            if not self.products.category_exists(category_id, cursor):
                raise NotFoundError("Category", category_id)
            affected = self.products.apply_category_discount(cursor, category_id, pct)

        logger.info(f"Applied {pct}% discount to {affected} product(s) in category {category_id}")
        self.audit.log_action(
            'CREATE', 'Sale',
            f"Launched {pct}% sale for category ID: {category_id}",
            {'categoryId': category_id, 'percent': pct, 'affected': affected},
            actor=actor
        )
        return affected

    def clear_category_discount(self, category_id: int, actor: Optional[str] = None) -> int:
        """
        Take every product of a category off sale

        Raises:
            NotFoundError: category does not exist
        """
        with self._transaction("clear category discount") as cursor:
            if not self.products.category_exists(category_id, cursor):
                raise NotFoundError("Category", category_id)
            affected = self.products.clear_category_discount(cursor, category_id)

        logger.info(f"Cleared discounts on {affected} product(s) in category {category_id}")
        self.audit.log_action(
            'DELETE', 'Sale',
            f"Removed sale for category ID: {category_id}",
            {'categoryId': category_id, 'affected': affected},
            actor=actor
        )
        return affected

    def clear_all_discounts(self, actor: Optional[str] = None) -> int:
        """Emergency reset: remove every discount in the store"""
        with self._transaction("clear all discounts") as cursor:
            affected = self.products.clear_all_discounts(cursor)

        logger.warning(f"Emergency reset: cleared discounts on {affected} product(s)")
        self.audit.log_action(
            'DELETE', 'Sale',
            'Emergency Reset: Removed all discounts from store',
            {'affected': affected},
            actor=actor
        )
        return affected

    def list_active_sales(self) -> List[Dict[str, Any]]:
        return summarize_active_sales(self.products.find_active_sales())
