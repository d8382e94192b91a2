"""
Variant Repository - Data Access Layer for product variants and stock

Stock changes are single conditional statements so that two orders racing
for the same variant can never both succeed past the available quantity.

Author: TM3
Date: 2026-03-02
"""
from typing import Dict, List, Optional

from shopdesk.core.database import read_cursor
from shopdesk.domain.product import VariantDetail

VARIANT_DETAIL_SELECT = """
    SELECT
        v.id, v.product_id, v.color_id, v.size_id, v.stock_quantity, v.sku,
        p.name as product_name, p.price, p.sale_price, p.is_on_sale,
        c.name as color_name,
        s.name as size_name
    FROM product_variants v
    JOIN products p ON v.product_id = p.id
    LEFT JOIN colors c ON v.color_id = c.id
    LEFT JOIN sizes s ON v.size_id = s.id
"""


class VariantRepository:
    """
    Repository for variant data access

    Read methods open their own connection. Stock mutations take the
    caller's cursor so they join the caller's transaction.
    """

    def find_by_product_ids(self, product_ids: List[int]) -> Dict[int, List[VariantDetail]]:
        """Variants grouped by product, in color/size order"""
        if not product_ids:
            return {}

        with read_cursor("find variants by product") as cursor:
            cursor.execute(
                VARIANT_DETAIL_SELECT + """
                WHERE v.product_id = ANY(%s)
                ORDER BY v.product_id, c.name, s.sort_order, v.id
                """,
                (list(product_ids),)
            )
            grouped: Dict[int, List[VariantDetail]] = {}
            for row in cursor.fetchall():
                grouped.setdefault(row['product_id'], []).append(VariantDetail(**row))
            return grouped

    def find_low_stock(self, threshold: int, limit: int) -> List[VariantDetail]:
        """Variants of active products below threshold, lowest stock first"""
        with read_cursor("find low stock") as cursor:
            cursor.execute(
                VARIANT_DETAIL_SELECT + """
                WHERE p.is_active = true AND v.stock_quantity < %s
                ORDER BY v.stock_quantity ASC, v.id
                LIMIT %s
                """,
                (threshold, limit)
            )
            return [VariantDetail(**row) for row in cursor.fetchall()]

    # ------------------------------------------------------------------
    # Stock mutations (caller-supplied cursor, caller owns the transaction)
    # ------------------------------------------------------------------

    def get_stock(self, cursor, variant_id: int) -> Optional[int]:
        cursor.execute(
            "SELECT stock_quantity FROM product_variants WHERE id = %s",
            (variant_id,)
        )
        row = cursor.fetchone()
        return row['stock_quantity'] if row else None

    def decrement_if_sufficient(self, cursor, variant_id: int, quantity: int) -> Optional[int]:
        """
        Decrement stock only if at least `quantity` units are available

        Returns:
            New stock level, or None when the variant is missing or short
        """
        cursor.execute("""
            UPDATE product_variants
            SET stock_quantity = stock_quantity - %s
            WHERE id = %s AND stock_quantity >= %s
            RETURNING stock_quantity
        """, (quantity, variant_id, quantity))
        row = cursor.fetchone()
        return row['stock_quantity'] if row else None

    def increment(self, cursor, variant_id: int, quantity: int) -> Optional[int]:
        """
        Add units back to stock

        Returns:
            New stock level, or None when the variant no longer exists
        """
        cursor.execute("""
            UPDATE product_variants
            SET stock_quantity = stock_quantity + %s
            WHERE id = %s
            RETURNING stock_quantity
        """, (quantity, variant_id))
        row = cursor.fetchone()
        return row['stock_quantity'] if row else None
