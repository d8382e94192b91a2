"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.

Author: TM3
Date: 2026-03-02
"""
from shopdesk.domain.product import Product, Variant, VariantDetail
from shopdesk.domain.cart import Cart, CartEntry
from shopdesk.domain.order import Order, OrderItem, OrderStatus, ShippingAddress
from shopdesk.domain.manifest import Manifest, ManifestEntry

__all__ = [
    'Product', 'Variant', 'VariantDetail',
    'Cart', 'CartEntry',
    'Order', 'OrderItem', 'OrderStatus', 'ShippingAddress',
    'Manifest', 'ManifestEntry',
]
