"""
Product Repository - Data Access Layer for Products

Pricing/discount updates are single bulk statements over a category (or the
whole table), never per-row loops.

Author: TM3
Date: 2026-03-02
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from shopdesk.core.database import get_supabase, read_cursor
from shopdesk.domain.product import Product

PRODUCT_SELECT = """
    SELECT
        id, name, price, sale_price, is_on_sale, is_active,
        category_id, cost_price
    FROM products
"""


class ProductRepository:
    """Repository for product data access"""

    def category_exists(self, category_id: int, cursor=None) -> bool:
        if cursor is not None:
            cursor.execute("SELECT 1 FROM categories WHERE id = %s", (category_id,))
            return cursor.fetchone() is not None

        with read_cursor("find category") as own_cursor:
            return self.category_exists(category_id, own_cursor)

    def search(self, term: str) -> List[Product]:
        """
        Search active products by name or variant SKU

        Delegates to the search_inventory RPC on Supabase.
        """
        response = get_supabase().rpc('search_inventory', {'term': term}).execute()
        return [Product(**row) for row in (response.data or [])]

    def find_active_sales(self) -> List[Dict[str, Any]]:
        """Active, on-sale products with their category name"""
        with read_cursor("find active sales") as cursor:
            cursor.execute("""
                SELECT
                    p.id, p.price, p.sale_price,
                    p.category_id,
                    c.name as category_name
                FROM products p
                LEFT JOIN categories c ON p.category_id = c.id
                WHERE p.is_on_sale = true AND p.is_active = true
                ORDER BY c.name, p.id
            """)
            return cursor.fetchall()

    def find_sku_conflicts(self, skus: Sequence[str], exclude_product_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        SKUs already used by variants of other products

        Returns:
            List of dicts with sku, product_id, product_name
        """
        if not skus:
            return []

        with read_cursor("find sku conflicts") as cursor:
            cursor.execute("""
                SELECT v.sku, v.product_id, p.name as product_name
                FROM product_variants v
                JOIN products p ON v.product_id = p.id
                WHERE v.sku = ANY(%s)
                  AND (%s::bigint IS NULL OR v.product_id <> %s::bigint)
                ORDER BY v.sku
            """, (list(skus), exclude_product_id, exclude_product_id))
            return [dict(row) for row in cursor.fetchall()]

    # ------------------------------------------------------------------
    # Bulk discount updates (caller-supplied cursor)
    # ------------------------------------------------------------------

    def apply_category_discount(self, cursor, category_id: int, percent: Decimal) -> int:
        """Set sale price and on-sale flag on every active product of a category"""
        cursor.execute("""
            UPDATE products
            SET sale_price = ROUND(price * (1 - %s / 100.0), 2),
                is_on_sale = true
            WHERE category_id = %s AND is_active = true
        """, (percent, category_id))
        return cursor.rowcount

    def clear_category_discount(self, cursor, category_id: int) -> int:
        cursor.execute("""
            UPDATE products
            SET is_on_sale = false, sale_price = NULL
            WHERE category_id = %s
        """, (category_id,))
        return cursor.rowcount

    def clear_all_discounts(self, cursor) -> int:
        """Remove every discount in the store (plain SQL allows an unfiltered UPDATE)"""
        cursor.execute("""
            UPDATE products
            SET is_on_sale = false, sale_price = NULL
        """)
        return cursor.rowcount
