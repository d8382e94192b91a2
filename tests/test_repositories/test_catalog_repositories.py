"""
Unit tests for ProductRepository, VariantRepository and ActivityLogRepository
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

from shopdesk.domain.product import Product, VariantDetail
from shopdesk.repositories.activity_log_repository import ActivityLogRepository
from shopdesk.repositories.product_repository import ProductRepository
from shopdesk.repositories.variant_repository import VariantRepository

VARIANT_ROW = {
    'id': 3, 'product_id': 101, 'color_id': 1, 'size_id': 2, 'stock_quantity': 1,
    'sku': "linen-kurta-navy-m", 'product_name': "Linen Kurta",
    'price': Decimal("499.00"), 'sale_price': None, 'is_on_sale': False,
    'color_name': "Navy", 'size_name': "M",
}


class TestVariantRepository:

    def test_decrement_only_when_sufficient(self):
        cursor = MagicMock()
        cursor.fetchone.return_value = {'stock_quantity': 3}

        assert VariantRepository().decrement_if_sufficient(cursor, 1, 2) == 3

        sql, params = cursor.execute.call_args[0]
        assert "stock_quantity >= %s" in sql
        assert params == (2, 1, 2)

    def test_decrement_short_returns_none(self):
        cursor = MagicMock()
        cursor.fetchone.return_value = None
        assert VariantRepository().decrement_if_sufficient(cursor, 1, 9) is None

    def test_increment_is_atomic(self):
        cursor = MagicMock()
        cursor.fetchone.return_value = {'stock_quantity': 8}

        assert VariantRepository().increment(cursor, 1, 3) == 8
        assert "stock_quantity = stock_quantity + %s" in cursor.execute.call_args[0][0]

    @patch('shopdesk.core.database.get_db_connection_dict_with_retry')
    def test_find_low_stock(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = [VARIANT_ROW]

        variants = VariantRepository().find_low_stock(threshold=5, limit=5)

        assert isinstance(variants[0], VariantDetail)
        assert variants[0].unit_price == Decimal("499.00")
        assert mock_cursor.execute.call_args[0][1] == (5, 5)

    def test_find_by_product_ids_empty(self):
        assert VariantRepository().find_by_product_ids([]) == {}


class TestProductRepository:

    def test_apply_category_discount_single_update(self):
        cursor = MagicMock()
        cursor.rowcount = 4

        affected = ProductRepository().apply_category_discount(cursor, 3, Decimal("20"))

        assert affected == 4
        sql, params = cursor.execute.call_args[0]
        assert "ROUND(price * (1 - %s / 100.0), 2)" in sql
        assert params == (Decimal("20"), 3)
        cursor.execute.assert_called_once()

    def test_clear_all_discounts_has_no_filter(self):
        cursor = MagicMock()
        cursor.rowcount = 12

        assert ProductRepository().clear_all_discounts(cursor) == 12
        assert "WHERE" not in cursor.execute.call_args[0][0]

    def test_category_exists_with_cursor(self):
        cursor = MagicMock()
        cursor.fetchone.return_value = None
        assert ProductRepository().category_exists(3, cursor) is False

    @patch('shopdesk.repositories.product_repository.get_supabase')
    def test_search_uses_rpc(self, mock_get_supabase):
        mock_get_supabase.return_value.rpc.return_value.execute.return_value = MagicMock(data=[
            {'id': 101, 'name': "Linen Kurta", 'price': "499.00", 'is_active': True}
        ])

        products = ProductRepository().search("linen")

        mock_get_supabase.return_value.rpc.assert_called_once_with('search_inventory', {'term': "linen"})
        assert isinstance(products[0], Product)
        assert products[0].price == Decimal("499.00")

    def test_sku_conflicts_empty(self):
        assert ProductRepository().find_sku_conflicts([]) == []

    @patch('shopdesk.core.database.get_db_connection_dict_with_retry')
    def test_sku_conflicts_excludes_product(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = [
            {'sku': "linen-kurta-navy-m", 'product_id': 5, 'product_name': "Old Kurta"}
        ]

        conflicts = ProductRepository().find_sku_conflicts(["linen-kurta-navy-m"], exclude_product_id=101)

        assert conflicts[0]['product_id'] == 5
        assert mock_cursor.execute.call_args[0][1] == (["linen-kurta-navy-m"], 101, 101)


class TestActivityLogRepository:

    @patch('shopdesk.core.database.get_db_connection_dict_with_retry')
    def test_find_recent(self, mock_get_conn, mock_db):
        mock_conn, mock_cursor = mock_db
        mock_get_conn.return_value = mock_conn
        mock_cursor.fetchall.return_value = [{
            'id': 1, 'action_type': 'CREATE', 'resource': 'Order',
            'description': "Created Manual Order #1001", 'meta_data': None,
            'actor': "admin@shop.test", 'created_at': datetime(2026, 3, 2, 14, 5),
        }]

        logs = ActivityLogRepository().find_recent(limit=50, action_type="create")

        assert logs[0].meta_data == {}
        assert mock_cursor.execute.call_args[0][1] == ["CREATE", 50]
