"""
FastAPI dependencies that build services per request

Tests swap these out with app.dependency_overrides.
"""
from shopdesk.services.audit_service import AuditService
from shopdesk.services.discount_service import DiscountService
from shopdesk.services.inventory_service import InventoryService
from shopdesk.services.manifest_service import ManifestService
from shopdesk.services.order_service import OrderService
from shopdesk.repositories.product_repository import ProductRepository


def get_order_service() -> OrderService:
    return OrderService()


def get_manifest_service() -> ManifestService:
    return ManifestService()


def get_discount_service() -> DiscountService:
    return DiscountService()


def get_inventory_service() -> InventoryService:
    return InventoryService()


def get_audit_service() -> AuditService:
    return AuditService()


def get_product_repository() -> ProductRepository:
    return ProductRepository()
