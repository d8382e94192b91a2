"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic.

Author: TM3
Date: 2026-03-02
"""
from shopdesk.repositories.product_repository import ProductRepository
from shopdesk.repositories.variant_repository import VariantRepository
from shopdesk.repositories.order_repository import OrderRepository
from shopdesk.repositories.activity_log_repository import ActivityLogRepository

__all__ = [
    'ProductRepository',
    'VariantRepository',
    'OrderRepository',
    'ActivityLogRepository'
]
