"""
Unit tests for the manual-order cart
"""
from decimal import Decimal

import pytest

from shopdesk.core.errors import NotFoundError, ValidationError
from shopdesk.domain.cart import Cart, CartEntry
from shopdesk.domain.product import VariantDetail
from shopdesk.domain.stock import StockLine


def variant(variant_id=1, stock=2, price="499.00", sale_price=None):
    return VariantDetail(
        id=variant_id,
        product_id=10,
        stock_quantity=stock,
        sku=f"linen-kurta-navy-{variant_id}",
        product_name="Linen Kurta",
        color_name="Navy",
        size_name="M",
        price=Decimal(price),
        sale_price=Decimal(sale_price) if sale_price else None,
        is_on_sale=sale_price is not None,
    )


class TestCart:

    def test_add_uses_sale_price_when_on_sale(self):
        cart = Cart()
        entry = cart.add(variant(sale_price="399.00"))

        assert entry.unit_price == Decimal("399.00")
        assert entry.stock_ceiling == 2

    def test_adding_same_variant_bumps_quantity(self):
        cart = Cart()
        cart.add(variant())
        cart.add(variant())

        assert len(cart) == 1
        assert cart.entries[0].quantity == 2
        assert cart.total == Decimal("998.00")

    def test_add_out_of_stock_variant_rejected(self):
        with pytest.raises(ValidationError, match="Out of stock"):
            Cart().add(variant(stock=0))

    def test_add_past_ceiling_rejected(self):
        cart = Cart()
        cart.add(variant(stock=1))
        with pytest.raises(ValidationError, match="Max stock reached"):
            cart.add(variant(stock=1))

    def test_update_quantity_ignores_out_of_range_changes(self):
        cart = Cart()
        cart.add(variant(stock=3))

        assert cart.update_quantity(1, -1).quantity == 1
        assert cart.update_quantity(1, 2).quantity == 3
        assert cart.update_quantity(1, 1).quantity == 3

    def test_update_missing_entry(self):
        with pytest.raises(NotFoundError):
            Cart().update_quantity(99, 1)

    def test_remove_and_clear(self):
        cart = Cart()
        cart.add(variant(1))
        cart.add(variant(2))
        cart.remove(1)
        assert [e.variant_id for e in cart] == [2]

        cart.clear()
        assert cart.is_empty

    def test_stock_lines(self):
        cart = Cart()
        cart.add(variant(1))
        cart.add(variant(1))
        assert cart.stock_lines() == [StockLine(variant_id=1, quantity=2)]

    def test_constructor_merges_repeated_variants(self):
        submitted = [
            CartEntry(variant_id=1, quantity=1, unit_price=Decimal("499.00")),
            CartEntry(variant_id=1, quantity=2, unit_price=Decimal("450.00")),
        ]

        cart = Cart(submitted)

        assert len(cart) == 1
        assert cart.entries[0].quantity == 3
        assert cart.entries[0].unit_price == Decimal("499.00")
        assert submitted[0].quantity == 1
