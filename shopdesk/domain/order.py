"""
Order Domain Models

Represents order-related entities and the order status workflow.
These are the single source of truth for order data structure.

Author: TM3
Date: 2026-03-02
"""
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from shopdesk.core.errors import ValidationError
from shopdesk.domain.cart import CartEntry
from shopdesk.domain.stock import StockLine, quantize_money


class OrderStatus(str, Enum):
    """Order lifecycle states"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# ================================================================================
# STATUS WORKFLOW
# ================================================================================
# pending -> confirmed -> processing -> shipped -> delivered
# cancelled is reachable from every non-terminal state.
# delivered and cancelled are terminal.
# ================================================================================

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in TRANSITIONS.items() if not targets)

# Statuses whose entry moves stock back into inventory
STOCK_RESTORING_STATUSES = frozenset({OrderStatus.CANCELLED})

_STATUS_ORDER = list(OrderStatus)


def parse_status(value) -> OrderStatus:
    """Coerce a raw status string into OrderStatus or raise ValidationError"""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Unknown order status '{value}'. Valid statuses: {valid}")


def can_transition(from_status, to_status) -> bool:
    return parse_status(to_status) in TRANSITIONS[parse_status(from_status)]


def allowed_transitions(status) -> List[OrderStatus]:
    """Next statuses for an order, happy-path step first and cancel last"""
    return sorted(TRANSITIONS[parse_status(status)], key=_STATUS_ORDER.index)


def append_note(
    existing: Optional[str],
    note: str,
    from_status: Optional[OrderStatus] = None,
    to_status: Optional[OrderStatus] = None,
    at: Optional[datetime] = None,
) -> str:
    """
    Append a timestamped entry to an order's notes

    Notes are an append-only audit trail: prior content is always kept.

    Example:
        [2026-03-02 14:05 UTC] shipped → cancelled: customer refused parcel
    """
    at = at or datetime.now(timezone.utc)
    stamp = at.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")

    if from_status is not None and to_status is not None:
        entry = f"[{stamp}] {OrderStatus(from_status).value} → {OrderStatus(to_status).value}: {note.strip()}"
    else:
        entry = f"[{stamp}] {note.strip()}"

    if existing:
        return f"{existing.rstrip()}\n{entry}"
    return entry


class ShippingAddress(BaseModel):
    """Structured shipping address stored as JSON on the order"""

    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = Field("", alias="zip")
    country: str = "India"

    model_config = ConfigDict(populate_by_name=True)

    def one_line(self) -> str:
        parts = [self.street, self.city, self.state, self.postal_code, self.country]
        return ", ".join(p for p in parts if p)


class OrderItem(BaseModel):
    """
    Order Item domain model - represents a line item in an order

    Fields:
        id: Internal order item ID
        order_id: Parent order ID
        variant_id: Variant that was sold
        quantity: Number of units ordered
        price_at_purchase: Unit price captured when the order was created

        # From catalog (optional, from JOIN)
        product_name: Product name
        color_name: Variant color
        size_name: Variant size
        sku: Variant SKU
    """

    id: int = Field(..., description="Order item ID")
    order_id: int = Field(..., description="Parent order ID")
    variant_id: int = Field(..., description="Variant ID")
    quantity: int = Field(..., description="Quantity ordered", ge=1)
    price_at_purchase: Decimal = Field(..., description="Unit price at order time", ge=0)

    product_name: Optional[str] = Field(None, description="Product name (from JOIN)")
    color_name: Optional[str] = Field(None, description="Color name (from JOIN)")
    size_name: Optional[str] = Field(None, description="Size name (from JOIN)")
    sku: Optional[str] = Field(None, description="Variant SKU (from JOIN)")

    model_config = ConfigDict(from_attributes=True)

    @property
    def subtotal(self) -> Decimal:
        return quantize_money(self.price_at_purchase * self.quantity)

    @property
    def label(self) -> str:
        """Fulfillment line, e.g. '2 x Linen Kurta (Navy/M)'"""
        name = self.product_name or f"Variant #{self.variant_id}"
        variant = "/".join(p for p in (self.color_name, self.size_name) if p)
        return f"{self.quantity} x {name} ({variant})" if variant else f"{self.quantity} x {name}"

    def to_stock_line(self) -> StockLine:
        return StockLine(variant_id=self.variant_id, quantity=self.quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data["price_at_purchase"] = float(self.price_at_purchase)
        data["subtotal"] = float(self.subtotal)
        data["label"] = self.label
        return data


class Order(BaseModel):
    """
    Order domain model - represents a customer order

    Fields:
        id: Internal order ID (primary key)
        order_number: Human-readable sequential number, assigned by the database
        customer_name / customer_phone: Who placed the order
        shipping_address: Structured address
        payment_method: upi, cod, card, bank_transfer, ...
        status: Current lifecycle status
        total_amount: Sum of line items, computed once at creation
        notes: Append-only audit trail of operator annotations
        stock_restored: Set when a cancellation has put stock back
        items: Order line items
    """

    id: int = Field(..., description="Internal order ID")
    order_number: int = Field(..., description="Sequential order number")
    customer_name: str = Field(..., description="Customer name")
    customer_phone: str = Field(..., description="Customer phone")
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)
    payment_method: Optional[str] = Field(None, description="Payment method")
    status: OrderStatus = Field(..., description="Order status")
    total_amount: Decimal = Field(..., description="Order total", ge=0)
    notes: Optional[str] = Field(None, description="Operator notes")
    stock_restored: bool = Field(False, description="Stock returned to inventory")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    items: List[OrderItem] = Field(default_factory=list, description="Order items")

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def note_entries(self) -> List[str]:
        """Every entry of the notes trail, oldest first"""
        if not self.notes:
            return []
        return [line for line in self.notes.splitlines() if line.strip()]

    def stock_lines(self) -> List[StockLine]:
        return [item.to_stock_line() for item in self.items]

    def to_dict(self) -> dict:
        """Convert to dictionary with computed fields"""
        data = self.model_dump(mode="json")
        data["total_amount"] = float(self.total_amount)
        data["item_count"] = self.item_count
        data["total_quantity"] = self.total_quantity
        data["is_terminal"] = self.is_terminal
        data["allowed_transitions"] = [s.value for s in allowed_transitions(self.status)]
        data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderCreate(BaseModel):
    """Payload for creating a manual (operator-placed) order"""
    customer_name: str = ""
    customer_phone: str = ""
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)
    payment_method: str = "upi"
    notes: Optional[str] = None
    items: List[CartEntry] = Field(default_factory=list)


class TransitionRequest(BaseModel):
    """Payload for a status change"""
    status: str
    note: Optional[str] = None

