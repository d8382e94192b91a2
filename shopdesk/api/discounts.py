"""
Discounts API Endpoints
Category-wide sales and the emergency "clear all" reset

Author: TM3
Date: 2026-03-02
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from shopdesk.api.dependencies import get_discount_service
from shopdesk.core.auth import TokenUser, actor_of, get_current_user_optional
from shopdesk.services.discount_service import DiscountService

router = APIRouter()


class DiscountRequest(BaseModel):
    percent: Decimal = Field(..., description="Discount percentage, strictly between 0 and 100")


@router.get("/active")
async def get_active_sales(service: DiscountService = Depends(get_discount_service)):
    """Categories currently on sale, with product count and average discount"""
    sales = service.list_active_sales()
    return {
        "status": "success",
        "count": len(sales),
        "data": sales
    }


@router.post("/categories/{category_id}")
async def apply_category_discount(
    category_id: int,
    request: DiscountRequest,
    service: DiscountService = Depends(get_discount_service),
    user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    """Put every active product of the category on sale"""
    affected = service.apply_category_discount(category_id, request.percent, actor=actor_of(user))
    return {
        "status": "success",
        "message": f"Sale Applied! {affected} product(s) updated.",
        "data": {"category_id": category_id, "percent": float(request.percent), "affected": affected}
    }


@router.delete("/categories/{category_id}")
async def clear_category_discount(
    category_id: int,
    service: DiscountService = Depends(get_discount_service),
    user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    """Take the whole category off sale"""
    affected = service.clear_category_discount(category_id, actor=actor_of(user))
    return {
        "status": "success",
        "message": "Sale removed",
        "data": {"category_id": category_id, "affected": affected}
    }


@router.delete("")
async def clear_all_discounts(
    service: DiscountService = Depends(get_discount_service),
    user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    """Emergency reset: remove every discount in the store"""
    affected = service.clear_all_discounts(actor=actor_of(user))
    return {
        "status": "success",
        "message": "All discounts removed",
        "data": {"affected": affected}
    }
