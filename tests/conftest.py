"""
Pytest fixtures and configuration for Shopdesk Backend tests

Service tests run against an in-memory store that behaves like the database
for the statements the services issue: conditional stock decrements,
order inserts and compare-and-set status updates. Its transaction() context
manager snapshots the state and puts it back on any exception, the same
all-or-nothing contract as shopdesk.core.database.transaction.

Author: TM3
Date: 2026-03-02
"""
import copy
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

from shopdesk.core.errors import StoreError
from shopdesk.domain.order import Order, OrderItem, OrderStatus
from shopdesk.domain.product import VariantDetail
from shopdesk.services.audit_service import AuditService
from shopdesk.services.inventory_service import InventoryService
from shopdesk.services.manifest_service import ManifestService
from shopdesk.services.order_service import OrderService

# Load environment variables for tests
load_dotenv()

FIXED_NOW = datetime(2026, 3, 2, 14, 5, tzinfo=timezone.utc)
UPDATED_AT = datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc)


class FakeStore:
    """In-memory stand-in for the variant/order tables"""

    def __init__(self):
        self.variants = {}
        self.orders = {}
        self.items = {}
        self.next_order_id = 1
        self.next_order_number = 1001
        self.next_item_id = 1
        self.commits = 0
        self.rollbacks = 0

    def add_variant(self, variant_id, stock, name="Linen Kurta", color="Navy", size="M", price="499.00"):
        self.variants[variant_id] = {
            'id': variant_id,
            'product_id': 100 + variant_id,
            'stock_quantity': stock,
            'sku': f"linen-kurta-{variant_id}",
            'product_name': name,
            'color_name': color,
            'size_name': size,
            'price': Decimal(price),
        }

    def stock(self, variant_id):
        return self.variants[variant_id]['stock_quantity']

    def _state(self):
        return (self.variants, self.orders, self.items,
                self.next_order_id, self.next_order_number, self.next_item_id)

    @contextmanager
    def transaction(self, operation):
        snapshot = copy.deepcopy(self._state())
        try:
            yield self
            self.commits += 1
        except Exception:
            (self.variants, self.orders, self.items,
             self.next_order_id, self.next_order_number, self.next_item_id) = snapshot
            self.rollbacks += 1
            raise


class FakeVariantRepository:

    def __init__(self, store):
        self.store = store

    def get_stock(self, cursor, variant_id):
        row = self.store.variants.get(variant_id)
        return row['stock_quantity'] if row else None

    def decrement_if_sufficient(self, cursor, variant_id, quantity):
        row = self.store.variants.get(variant_id)
        if row is None or row['stock_quantity'] < quantity:
            return None
        row['stock_quantity'] -= quantity
        return row['stock_quantity']

    def increment(self, cursor, variant_id, quantity):
        row = self.store.variants.get(variant_id)
        if row is None:
            return None
        row['stock_quantity'] += quantity
        return row['stock_quantity']

    def find_low_stock(self, threshold, limit):
        rows = sorted(
            (r for r in self.store.variants.values() if r['stock_quantity'] < threshold),
            key=lambda r: (r['stock_quantity'], r['id'])
        )
        return [VariantDetail(**r) for r in rows[:limit]]

    def find_by_product_ids(self, product_ids):
        grouped = {}
        for row in self.store.variants.values():
            if row['product_id'] in product_ids:
                grouped.setdefault(row['product_id'], []).append(VariantDetail(**row))
        return grouped


class FakeOrderRepository:

    def __init__(self, store):
        self.store = store

    def _build(self, order_id):
        row = self.store.orders.get(order_id)
        if row is None:
            return None
        items = []
        for item in self.store.items.get(order_id, []):
            variant = self.store.variants.get(item['variant_id'], {})
            items.append(OrderItem(
                **item,
                product_name=variant.get('product_name'),
                color_name=variant.get('color_name'),
                size_name=variant.get('size_name'),
                sku=variant.get('sku'),
            ))
        return Order(**row, items=items)

    def insert_order(self, cursor, customer_name, customer_phone, shipping_address,
                     payment_method, status, total_amount, notes=None, user_id=None):
        order_id = self.store.next_order_id
        self.store.next_order_id += 1
        order_number = self.store.next_order_number
        self.store.next_order_number += 1
        self.store.orders[order_id] = {
            'id': order_id,
            'order_number': order_number,
            'customer_name': customer_name,
            'customer_phone': customer_phone,
            'shipping_address': shipping_address,
            'payment_method': payment_method,
            'status': OrderStatus(status).value,
            'total_amount': total_amount,
            'notes': notes,
            'stock_restored': False,
            'created_at': FIXED_NOW,
        }
        return {'id': order_id, 'order_number': order_number, 'created_at': FIXED_NOW}

    def insert_items(self, cursor, order_id, lines):
        for variant_id, quantity, price in lines:
            if variant_id not in self.store.variants:
                # order_items.variant_id references product_variants(id)
                raise StoreError("create order", Exception(f"variant {variant_id} violates foreign key constraint"))
            self.store.items.setdefault(order_id, []).append({
                'id': self.store.next_item_id,
                'order_id': order_id,
                'variant_id': variant_id,
                'quantity': quantity,
                'price_at_purchase': price,
            })
            self.store.next_item_id += 1

    def get_by_id(self, cursor, order_id, for_update=False):
        return self._build(order_id)

    def update_status(self, cursor, order_id, expected_status, new_status, notes, mark_stock_restored=False):
        row = self.store.orders.get(order_id)
        if row is None or row['status'] != OrderStatus(expected_status).value:
            return None
        if mark_stock_restored and row['stock_restored']:
            return None
        row['status'] = OrderStatus(new_status).value
        row['notes'] = notes
        row['stock_restored'] = row['stock_restored'] or mark_stock_restored
        row['updated_at'] = UPDATED_AT
        return UPDATED_AT

    def find_by_id(self, order_id):
        return self._build(order_id)

    def find_by_ids(self, order_ids):
        orders = [self._build(order_id) for order_id in order_ids if order_id in self.store.orders]
        return sorted(orders, key=lambda o: o.order_number)


@pytest.fixture
def store():
    """Empty in-memory store"""
    return FakeStore()


@pytest.fixture
def audit():
    """Audit service double; log_action always succeeds"""
    mock = MagicMock(spec=AuditService)
    mock.log_action.return_value = True
    return mock


@pytest.fixture
def inventory_service(store):
    return InventoryService(
        variants=FakeVariantRepository(store),
        products=MagicMock(),
        transaction_factory=store.transaction
    )


@pytest.fixture
def order_service(store, inventory_service, audit):
    return OrderService(
        orders=FakeOrderRepository(store),
        inventory=inventory_service,
        audit=audit,
        transaction_factory=store.transaction,
        clock=lambda: FIXED_NOW
    )


@pytest.fixture
def manifest_service(store):
    return ManifestService(orders=FakeOrderRepository(store), clock=lambda: FIXED_NOW)


@pytest.fixture
def make_order():
    """Factory for Order models with sensible defaults"""
    def _make(order_id=1, order_number=1001, status=OrderStatus.CONFIRMED, items=None, **overrides):
        data = {
            'id': order_id,
            'order_number': order_number,
            'customer_name': "Asha Rao",
            'customer_phone': "9876543210",
            'shipping_address': {'street': "12 MG Road", 'city': "Pune", 'state': "MH", 'zip': "411001"},
            'payment_method': "upi",
            'status': status,
            'total_amount': Decimal("998.00"),
            'created_at': FIXED_NOW,
            'items': items if items is not None else [
                OrderItem(id=1, order_id=order_id, variant_id=1, quantity=2,
                          price_at_purchase=Decimal("499.00"), product_name="Linen Kurta",
                          color_name="Navy", size_name="M")
            ],
        }
        data.update(overrides)
        return Order(**data)
    return _make


@pytest.fixture
def mock_db():
    """
    Mocked psycopg2 connection and cursor

    Patch shopdesk.core.database.get_db_connection_dict_with_retry to return
    mock_db[0]; mock_db[1] is the cursor every query runs on.
    """
    mock_conn = MagicMock()
    mock_cursor = MagicMock()
    mock_conn.cursor.return_value = mock_cursor
    return mock_conn, mock_cursor


@pytest.fixture(scope="session")
def database_url():
    """
    Provides the database URL for integration tests

    Scope: session (created once per test session)
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not configured")
    return url
