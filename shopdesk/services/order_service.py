"""
Order Service
Order creation and the order status workflow

Handles:
- Manual order creation (order + items + stock reservation in one transaction)
- Status transitions validated against the workflow table
- Cancellation with stock restoration, exactly once per order
- Order queries for the admin UI

Author: TM3
Date: 2026-03-02
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from shopdesk.core.database import transaction
from shopdesk.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from shopdesk.domain.cart import Cart, CartEntry
from shopdesk.domain.order import (
    Order,
    OrderCreate,
    OrderStatus,
    STOCK_RESTORING_STATUSES,
    TRANSITIONS,
    allowed_transitions,
    append_note,
    parse_status,
)
from shopdesk.domain.stock import quantize_money
from shopdesk.repositories.order_repository import OrderRepository
from shopdesk.services.audit_service import AuditService
from shopdesk.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

# Operator-placed (phone/WhatsApp) orders skip 'pending'
MANUAL_ORDER_STATUS = OrderStatus.CONFIRMED


def order_total(entries: Iterable[CartEntry]) -> Decimal:
    """Sum of unit price x quantity over the cart, in cents"""
    total = sum((quantize_money(e.unit_price) * e.quantity for e in entries), Decimal("0"))
    return quantize_money(total)


def validate_new_order(payload: OrderCreate) -> None:
    """
    Preconditions for creating an order

    Raises:
        ValidationError: empty cart, missing customer fields, bad quantities or prices
    """
    if not payload.items:
        raise ValidationError("Cart is empty")

    if not payload.customer_name.strip() or not payload.customer_phone.strip():
        raise ValidationError("Customer Name & Phone required")

    for entry in payload.items:
        if isinstance(entry.quantity, bool) or entry.quantity < 1:
            raise ValidationError(f"Quantity for variant {entry.variant_id} must be at least 1")
        if entry.unit_price < 0:
            raise ValidationError(f"Price for variant {entry.variant_id} cannot be negative")


class OrderService:
    """Service for the order lifecycle"""

    def __init__(
        self,
        orders: Optional[OrderRepository] = None,
        inventory: Optional[InventoryService] = None,
        audit: Optional[AuditService] = None,
        transaction_factory: Optional[Callable] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.orders = orders or OrderRepository()
        self.inventory = inventory or InventoryService()
        self.audit = audit or AuditService()
        self._transaction = transaction_factory or transaction
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(
        self,
        payload: OrderCreate,
        actor: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> Order:
        """
        Create a manual order and reserve its stock

        Repeated variants in the payload are merged into one line.

        Steps (one transaction):
        1. Insert the order as 'confirmed' with its computed total
        2. Reserve stock for every item (unknown variants fail here)
        3. Insert the items with their purchase price

        If any step fails nothing is persisted and the error propagates.

        Raises:
            ValidationError: bad payload
            InsufficientStockError: a variant does not have enough stock
            NotFoundError: a variant does not exist
            StoreError: database failure
        """
        validate_new_order(payload)

        cart = Cart(payload.items)
        total = order_total(cart)
        notes = None
        if payload.notes and payload.notes.strip():
            notes = append_note(None, payload.notes, at=self._clock())

        with self._transaction("create order") as cursor:
            header = self.orders.insert_order(
                cursor,
                customer_name=payload.customer_name.strip(),
                customer_phone=payload.customer_phone.strip(),
                shipping_address=payload.shipping_address.model_dump(),
                payment_method=payload.payment_method,
                status=MANUAL_ORDER_STATUS,
                total_amount=total,
                notes=notes,
                user_id=user_id
            )
            self.inventory.reserve_stock(cart.stock_lines(), cursor)
            self.orders.insert_items(
                cursor,
                header['id'],
                [(e.variant_id, e.quantity, quantize_money(e.unit_price)) for e in cart]
            )
            order = self.orders.get_by_id(cursor, header['id'])

        logger.info(f"Created order #{order.order_number} (id={order.id}) total={order.total_amount}")
        self.audit.log_action(
            'CREATE', 'Order',
            f"Created Manual Order #{order.order_number}",
            {'total': order.total_amount, 'items': len(cart)},
            actor=actor
        )
        return order

    def transition_order(
        self,
        order_id: int,
        target_status,
        note: Optional[str] = None,
        actor: Optional[str] = None
    ) -> Order:
        """
        Move an order to a new status

        Cancelling restores the order's stock in the same transaction as the
        status write, so either both happen or neither does.

        Raises:
            ValidationError: unknown status
            NotFoundError: order does not exist
            InvalidTransitionError: target not allowed from the current status
            StoreError: database failure
        """
        target = parse_status(target_status)

        with self._transaction("transition order") as cursor:
            order = self.orders.get_by_id(cursor, order_id, for_update=True)
            if order is None:
                raise NotFoundError("Order", order_id)

            current = order.status
            if target not in TRANSITIONS[current]:
                raise InvalidTransitionError(current.value, target.value)

            restoring = target in STOCK_RESTORING_STATUSES
            if restoring:
                if order.stock_restored:
                    raise InvalidTransitionError(current.value, target.value)
                if order.items:
                    self.inventory.restore_stock(order.stock_lines(), cursor)

            notes = order.notes
            if note and note.strip():
                notes = append_note(order.notes, note, current, target, at=self._clock())

            updated_at = self.orders.update_status(
                cursor, order_id,
                expected_status=current,
                new_status=target,
                notes=notes,
                mark_stock_restored=restoring
            )
            if updated_at is None:
                # Row changed under us despite the lock (e.g. status edited outside this service)
                raise InvalidTransitionError(current.value, target.value)

        order = order.model_copy(update={
            'status': target,
            'notes': notes,
            'stock_restored': order.stock_restored or restoring,
            'updated_at': updated_at,
        })

        logger.info(f"Order #{order.order_number} moved {current.value} -> {target.value}")
        self.audit.log_action(
            'UPDATE', 'Order',
            f"Order #{order.order_number} marked as {target.value.upper()}",
            {'from': current.value, 'to': target.value, 'note': note, 'stock_restored': restoring},
            actor=actor
        )
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> Order:
        order = self.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def list_orders(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Order], int]:
        status_value = parse_status(status).value if status and status != 'all' else None
        search = search.strip() if search else None
        return self.orders.find_all(status=status_value, search=search or None, limit=limit, offset=offset)

    def allowed_actions(self, order: Order) -> List[OrderStatus]:
        return allowed_transitions(order.status)

    def get_stats(self) -> Dict[str, Any]:
        return self.orders.get_stats()
