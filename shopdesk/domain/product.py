"""
Product Domain Models

Represents products and their color/size variants.
Stock is tracked per variant; pricing and discount flags live on the product.

Author: TM3
Date: 2026-03-02
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from shopdesk.core.errors import ValidationError
from shopdesk.domain.stock import quantize_money

HUNDRED = Decimal("100")


def validate_percent(percent) -> Decimal:
    """Discount percentages must lie strictly between 0 and 100"""
    try:
        value = Decimal(str(percent))
    except (ArithmeticError, ValueError):
        raise ValidationError(f"Invalid percentage: {percent}")
    if not value.is_finite() or value <= 0 or value >= HUNDRED:
        raise ValidationError(f"Invalid percentage: {percent}. Must be between 0 and 100 (exclusive)")
    return value


def discounted_price(price, percent) -> Decimal:
    """
    Sale price after a percentage discount, rounded to cents

    Matches ROUND(price * (1 - percent / 100), 2) in Postgres.

    Example:
        discounted_price(1000, 20) -> Decimal('800.00')
    """
    pct = validate_percent(percent)
    return quantize_money(Decimal(str(price)) * (1 - pct / HUNDRED))


class Product(BaseModel):
    """
    Product domain model

    Fields:
        id: Internal product ID (primary key)
        name: Product name
        price: Base price
        sale_price: Discounted price while is_on_sale is set
        is_on_sale: Discount active flag
        is_active: Whether product is listed in the store
        category_id: Category reference
        cost_price: Purchase/cost price (margin reporting)
    """

    id: int = Field(..., description="Internal product ID")
    name: str = Field(..., description="Product name")
    price: Decimal = Field(..., description="Base price", ge=0)
    sale_price: Optional[Decimal] = Field(None, description="Sale price", ge=0)
    is_on_sale: bool = Field(False, description="Discount active")
    is_active: bool = Field(True, description="Listed in store")
    category_id: Optional[int] = Field(None, description="Category ID")
    cost_price: Optional[Decimal] = Field(None, description="Cost price", ge=0)

    model_config = ConfigDict(from_attributes=True)

    @property
    def effective_price(self) -> Decimal:
        """Price a customer pays right now"""
        if self.is_on_sale and self.sale_price is not None:
            return self.sale_price
        return self.price

    @property
    def margin(self) -> Optional[Decimal]:
        if self.cost_price is None:
            return None
        return quantize_money(self.effective_price - self.cost_price)

    @property
    def discount_percent(self) -> Optional[Decimal]:
        """Discount implied by the current sale price"""
        if not self.is_on_sale or self.sale_price is None or not self.price:
            return None
        return quantize_money(HUNDRED - (self.sale_price / self.price) * HUNDRED)


class Variant(BaseModel):
    """A color x size combination of a product, the unit stock is tracked at"""

    id: int = Field(..., description="Variant ID")
    product_id: int = Field(..., description="Parent product ID")
    color_id: Optional[int] = Field(None, description="Color ID")
    size_id: Optional[int] = Field(None, description="Size ID")
    stock_quantity: int = Field(0, description="Units in stock", ge=0)
    sku: Optional[str] = Field(None, description="Store-wide SKU")

    model_config = ConfigDict(from_attributes=True)


class VariantDetail(Variant):
    """Variant joined with its product, color and size for display and pricing"""

    product_name: Optional[str] = None
    color_name: Optional[str] = None
    size_name: Optional[str] = None
    price: Decimal = Decimal("0")
    sale_price: Optional[Decimal] = None
    is_on_sale: bool = False

    @property
    def unit_price(self) -> Decimal:
        if self.is_on_sale and self.sale_price is not None:
            return self.sale_price
        return self.price

    def to_dict(self) -> dict:
        data = self.model_dump()
        for field in ("price", "sale_price"):
            if data.get(field) is not None:
                data[field] = float(data[field])
        data["unit_price"] = float(self.unit_price)
        return data


class InventoryMatch(BaseModel):
    """A product found by inventory search, with its variants"""

    product: Product
    variants: List[VariantDetail] = Field(default_factory=list)

    @property
    def in_stock(self) -> bool:
        return any(v.stock_quantity > 0 for v in self.variants)

    def to_dict(self) -> dict:
        data = self.product.model_dump(mode="json")
        data["effective_price"] = float(self.product.effective_price)
        data["in_stock"] = self.in_stock
        data["variants"] = [v.to_dict() for v in self.variants]
        return data
