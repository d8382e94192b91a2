"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and returns Order domain models.
Write methods take the caller's cursor: order creation and status changes
run inside a transaction owned by OrderService.

Author: TM3
Date: 2026-03-02
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from psycopg2.extras import Json

from shopdesk.core.database import read_cursor
from shopdesk.domain.order import Order, OrderItem, OrderStatus

ORDER_SELECT = """
    SELECT
        o.id, o.order_number, o.customer_name, o.customer_phone,
        o.shipping_address, o.payment_method, o.status, o.total_amount,
        o.notes, o.stock_restored, o.created_at, o.updated_at
    FROM orders o
"""

ITEMS_SELECT = """
    SELECT
        oi.id, oi.order_id, oi.variant_id, oi.quantity, oi.price_at_purchase,
        v.sku,
        p.name as product_name,
        c.name as color_name,
        s.name as size_name
    FROM order_items oi
    LEFT JOIN product_variants v ON oi.variant_id = v.id
    LEFT JOIN products p ON v.product_id = p.id
    LEFT JOIN colors c ON v.color_id = c.id
    LEFT JOIN sizes s ON v.size_id = s.id
    WHERE oi.order_id = ANY(%s)
    ORDER BY oi.order_id, oi.id
"""


class OrderRepository:
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    Returns Order domain models with their items.
    """

    def _attach_items(self, cursor, order_rows: Sequence[Dict[str, Any]]) -> List[Order]:
        """Load items for all rows in ONE query and build Order models"""
        if not order_rows:
            return []

        order_ids = [row['id'] for row in order_rows]
        cursor.execute(ITEMS_SELECT, (order_ids,))

        items_by_order: Dict[int, List[OrderItem]] = {}
        for item in cursor.fetchall():
            items_by_order.setdefault(item['order_id'], []).append(OrderItem(**dict(item)))

        orders = []
        for row in order_rows:
            order_dict = dict(row)
            order_dict['shipping_address'] = order_dict.get('shipping_address') or {}
            order_dict['items'] = items_by_order.get(row['id'], [])
            orders.append(Order(**order_dict))
        return orders

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """
        Find order by ID with items

        Returns:
            Order with all related data or None if not found
        """
        with read_cursor("find order") as cursor:
            cursor.execute(ORDER_SELECT + " WHERE o.id = %s", (order_id,))
            row = cursor.fetchone()
            if not row:
                return None
            return self._attach_items(cursor, [row])[0]

    def find_by_ids(self, order_ids: Sequence[int]) -> List[Order]:
        """Find several orders (with items); missing ids are simply absent"""
        if not order_ids:
            return []

        with read_cursor("find orders by id") as cursor:
            cursor.execute(
                ORDER_SELECT + " WHERE o.id = ANY(%s) ORDER BY o.order_number",
                (list(order_ids),)
            )
            return self._attach_items(cursor, cursor.fetchall())

    def find_all(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        """
        Find orders with filters, newest first

        Args:
            status: Filter by order status
            search: Search by customer name, phone or order number
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of orders, total count)
        """
        conditions = []
        params: List[Any] = []

        if status:
            conditions.append("o.status = %s")
            params.append(status)

        if search:
            conditions.append("""(
                o.customer_name ILIKE %s OR
                o.customer_phone ILIKE %s OR
                o.order_number::text ILIKE %s
            )""")
            search_param = f"%{search}%"
            params.extend([search_param, search_param, search_param])

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        with read_cursor("list orders") as cursor:
            cursor.execute(f"SELECT COUNT(*) as total FROM orders o WHERE {where_clause}", params)
            total = cursor.fetchone()['total']

            cursor.execute(
                ORDER_SELECT + f"""
                WHERE {where_clause}
                ORDER BY o.created_at DESC
                LIMIT %s OFFSET %s
                """,
                params + [limit, offset]
            )
            return self._attach_items(cursor, cursor.fetchall()), total

    def get_stats(self) -> Dict[str, Any]:
        """
        Order statistics for the dashboard

        Revenue excludes cancelled orders.
        """
        with read_cursor("order stats") as cursor:
            cursor.execute("""
                SELECT
                    COUNT(*) as total_orders,
                    COALESCE(SUM(total_amount) FILTER (WHERE status <> 'cancelled'), 0) as total_revenue,
                    COUNT(*) FILTER (WHERE status = 'pending') as pending_orders
                FROM orders
            """)
            totals = cursor.fetchone()

            cursor.execute("""
                SELECT status, COUNT(*) as count
                FROM orders
                GROUP BY status
                ORDER BY count DESC
            """)
            by_status = {row['status']: row['count'] for row in cursor.fetchall()}

            return {
                'total_orders': totals['total_orders'],
                'total_revenue': float(totals['total_revenue']),
                'pending_orders': totals['pending_orders'],
                'by_status': by_status,
            }

    # ------------------------------------------------------------------
    # Transactional methods (caller-supplied cursor)
    # ------------------------------------------------------------------

    def get_by_id(self, cursor, order_id: int, for_update: bool = False) -> Optional[Order]:
        """
        Load an order inside the caller's transaction

        With for_update the order row stays locked until the transaction ends.
        """
        lock_clause = " FOR UPDATE OF o" if for_update else ""
        cursor.execute(ORDER_SELECT + " WHERE o.id = %s" + lock_clause, (order_id,))
        row = cursor.fetchone()
        if not row:
            return None
        return self._attach_items(cursor, [row])[0]

    def insert_order(
        self,
        cursor,
        customer_name: str,
        customer_phone: str,
        shipping_address: Dict[str, Any],
        payment_method: Optional[str],
        status: OrderStatus,
        total_amount: Decimal,
        notes: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Insert the order header; the database assigns id and order_number

        Returns:
            Dict with id, order_number, created_at
        """
        cursor.execute("""
            INSERT INTO orders (
                customer_name, customer_phone, shipping_address, payment_method,
                status, total_amount, notes, user_id
            ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id, order_number, created_at
        """, (
            customer_name,
            customer_phone,
            Json(shipping_address),
            payment_method,
            OrderStatus(status).value,
            total_amount,
            notes,
            user_id
        ))
        return dict(cursor.fetchone())

    def insert_items(self, cursor, order_id: int, lines: Sequence[Tuple[int, int, Decimal]]) -> None:
        """Insert (variant_id, quantity, price_at_purchase) lines for an order"""
        cursor.executemany("""
            INSERT INTO order_items (order_id, variant_id, quantity, price_at_purchase)
            VALUES (%s, %s, %s, %s)
        """, [(order_id, variant_id, quantity, price) for variant_id, quantity, price in lines])

    def update_status(
        self,
        cursor,
        order_id: int,
        expected_status: OrderStatus,
        new_status: OrderStatus,
        notes: Optional[str],
        mark_stock_restored: bool = False
    ) -> Optional[datetime]:
        """
        Compare-and-set the status of an order

        The update only applies while the order is still in expected_status
        (and, when marking a restore, has not been restored already).

        Returns:
            The new updated_at, or None if the row was not updated
        """
        cursor.execute("""
            UPDATE orders
            SET status = %s,
                notes = %s,
                stock_restored = stock_restored OR %s,
                updated_at = now()
            WHERE id = %s
              AND status = %s
              AND (NOT %s OR stock_restored = false)
            RETURNING id, updated_at
        """, (
            OrderStatus(new_status).value,
            notes,
            mark_stock_restored,
            order_id,
            OrderStatus(expected_status).value,
            mark_stock_restored
        ))
        row = cursor.fetchone()
        return row['updated_at'] if row else None
