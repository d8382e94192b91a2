"""
Products API Endpoints
SKU helpers used by the product editor
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from shopdesk.api.dependencies import get_product_repository
from shopdesk.domain.catalog import generate_sku
from shopdesk.repositories.product_repository import ProductRepository

router = APIRouter()


class SkuConflictRequest(BaseModel):
    skus: List[str]
    exclude_product_id: Optional[int] = None


@router.get("/sku")
async def get_generated_sku(
    product_name: str = Query(...),
    color: str = Query(...),
    size: str = Query(...)
):
    """Suggested SKU for a product/color/size combination"""
    return {
        "status": "success",
        "data": {"sku": generate_sku(product_name, color, size)}
    }


@router.post("/sku/conflicts")
async def check_sku_conflicts(
    request: SkuConflictRequest,
    products: ProductRepository = Depends(get_product_repository)
):
    """
    SKUs already used by other products

    An empty list means every SKU is free to use.
    """
    skus = [sku.strip() for sku in request.skus if sku and sku.strip()]
    conflicts = products.find_sku_conflicts(skus, request.exclude_product_id)
    return {
        "status": "success",
        "count": len(conflicts),
        "data": conflicts
    }
