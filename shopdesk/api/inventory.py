"""
Inventory API Endpoints
Product/variant search for the order form and the low-stock widget
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from shopdesk.api.dependencies import get_inventory_service
from shopdesk.services.inventory_service import InventoryService

router = APIRouter()


@router.get("/search")
async def search_inventory(
    q: str = Query("", description="Product name or SKU (at least 2 characters)"),
    limit: int = Query(10, ge=1, le=50),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Search products with their variants and live stock

    Used by the manual order form to add items to the cart.
    """
    matches = service.search(q, limit=limit)
    return {
        "status": "success",
        "count": len(matches),
        "data": [match.to_dict() for match in matches]
    }


@router.get("/low-stock")
async def get_low_stock(
    threshold: Optional[int] = Query(None, ge=0, description="Defaults to LOW_STOCK_THRESHOLD"),
    limit: int = Query(5, ge=1, le=100),
    service: InventoryService = Depends(get_inventory_service)
):
    """Variants below the stock threshold, lowest first"""
    variants = service.low_stock(threshold=threshold, limit=limit)
    return {
        "status": "success",
        "count": len(variants),
        "data": [variant.to_dict() for variant in variants]
    }
