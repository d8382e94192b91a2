"""
Unit tests for the order status workflow and order models

Author: TM3
Date: 2026-03-02
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from shopdesk.core.errors import ValidationError
from shopdesk.domain.order import (
    OrderStatus,
    ShippingAddress,
    TERMINAL_STATUSES,
    TRANSITIONS,
    allowed_transitions,
    append_note,
    can_transition,
    parse_status,
)


class TestTransitionTable:
    """The workflow table is total and closed"""

    def test_every_status_has_an_entry(self):
        assert set(TRANSITIONS) == set(OrderStatus)

    def test_targets_are_known_statuses(self):
        for targets in TRANSITIONS.values():
            assert targets <= set(OrderStatus)

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

    @pytest.mark.parametrize("status", [
        OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED
    ])
    def test_cancel_reachable_from_every_open_status(self, status):
        assert can_transition(status, OrderStatus.CANCELLED)

    def test_happy_path(self):
        path = ["pending", "confirmed", "processing", "shipped", "delivered"]
        for current, nxt in zip(path, path[1:]):
            assert can_transition(current, nxt)

    def test_cannot_skip_steps_or_go_back(self):
        assert not can_transition("confirmed", "shipped")
        assert not can_transition("shipped", "processing")
        assert not can_transition("delivered", "cancelled")
        assert not can_transition("cancelled", "confirmed")

    def test_allowed_transitions_puts_cancel_last(self):
        assert allowed_transitions("processing") == [OrderStatus.SHIPPED, OrderStatus.CANCELLED]
        assert allowed_transitions("delivered") == []


class TestParseStatus:

    def test_accepts_mixed_case(self):
        assert parse_status(" Shipped ") == OrderStatus.SHIPPED

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError, match="Unknown order status"):
            parse_status("returned")


class TestAppendNote:

    AT = datetime(2026, 3, 2, 14, 5, tzinfo=timezone.utc)

    def test_first_note(self):
        assert append_note(None, " call before delivery ", at=self.AT) == \
            "[2026-03-02 14:05 UTC] call before delivery"

    def test_keeps_prior_content(self):
        notes = append_note("[2026-03-01 09:00 UTC] gift wrap", "customer refused parcel",
                            OrderStatus.SHIPPED, OrderStatus.CANCELLED, at=self.AT)
        assert notes == (
            "[2026-03-01 09:00 UTC] gift wrap\n"
            "[2026-03-02 14:05 UTC] shipped → cancelled: customer refused parcel"
        )


class TestOrderModel:

    def test_address_accepts_zip_alias(self):
        address = ShippingAddress(street="12 MG Road", city="Pune", zip="411001")
        assert address.postal_code == "411001"
        assert address.one_line() == "12 MG Road, Pune, 411001, India"

    def test_computed_fields(self, make_order):
        order = make_order(status=OrderStatus.SHIPPED, notes="[x] first\n[y] second")

        assert order.item_count == 1
        assert order.total_quantity == 2
        assert order.is_terminal is False
        assert order.note_entries == ["[x] first", "[y] second"]
        assert order.items[0].label == "2 x Linen Kurta (Navy/M)"
        assert order.items[0].subtotal == Decimal("998.00")

    def test_to_dict_lists_allowed_transitions(self, make_order):
        data = make_order(status=OrderStatus.SHIPPED).to_dict()

        assert data['status'] == "shipped"
        assert data['allowed_transitions'] == ["delivered", "cancelled"]
        assert data['total_amount'] == 998.0
        assert data['items'][0]['price_at_purchase'] == 499.0
