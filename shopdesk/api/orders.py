"""
Orders API Endpoints
Order creation, status workflow and fulfillment manifests

Author: TM3
Date: 2026-03-02
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, StreamingResponse
from pydantic import BaseModel

from shopdesk.api.dependencies import get_manifest_service, get_order_service
from shopdesk.core.auth import TokenUser, actor_of, get_current_user_optional
from shopdesk.domain.order import OrderCreate, TransitionRequest
from shopdesk.services.manifest_service import ManifestService, export_workbook, render_text
from shopdesk.services.order_service import OrderService

router = APIRouter()


class ManifestRequest(BaseModel):
    order_ids: List[int] = []


@router.get("/")
async def get_orders(
    status: Optional[str] = Query(None, description="Filter by order status ('all' for no filter)"),
    search: Optional[str] = Query(None, description="Search by customer name, phone or order number"),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: OrderService = Depends(get_order_service)
):
    """
    Get orders, newest first, with optional filters

    Returns orders with their items and the actions allowed on each
    """
    orders, total = service.list_orders(status=status, search=search, limit=limit, offset=offset)

    return {
        "status": "success",
        "total": total,
        "limit": limit,
        "offset": offset,
        "count": len(orders),
        "data": [order.to_dict() for order in orders]
    }


@router.get("/stats")
async def get_order_stats(service: OrderService = Depends(get_order_service)):
    """
    Get order statistics

    Returns:
    - Total orders
    - Revenue (cancelled orders excluded)
    - Pending orders
    - Orders by status
    """
    return {
        "status": "success",
        "data": service.get_stats()
    }


@router.post("/", status_code=201)
async def create_order(
    payload: OrderCreate,
    service: OrderService = Depends(get_order_service),
    user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    """
    Create a manual (phone/WhatsApp) order

    The order starts as 'confirmed' and its stock is reserved immediately.
    """
    order = service.create_order(payload, actor=actor_of(user), user_id=user.id if user else None)

    return {
        "status": "success",
        "message": f"Order #{order.order_number} Created!",
        "data": order.to_dict()
    }


@router.post("/manifest")
async def build_manifest(
    request: ManifestRequest,
    service: ManifestService = Depends(get_manifest_service)
):
    """Fulfillment manifest for the selected orders (JSON)"""
    manifest = service.build_manifest(request.order_ids)
    return {
        "status": "success",
        "data": manifest.to_dict()
    }


@router.post("/manifest/text", response_class=PlainTextResponse)
async def build_manifest_text(
    request: ManifestRequest,
    service: ManifestService = Depends(get_manifest_service)
):
    """Fulfillment manifest as a printable text sheet"""
    return render_text(service.build_manifest(request.order_ids))


@router.post("/manifest/xlsx")
async def build_manifest_xlsx(
    request: ManifestRequest,
    service: ManifestService = Depends(get_manifest_service)
):
    """Fulfillment manifest as an Excel download"""
    manifest = service.build_manifest(request.order_ids)
    excel_file = export_workbook(manifest)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"Manifest_{timestamp}.xlsx"

    return StreamingResponse(
        excel_file,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": f"attachment; filename={filename}"
        }
    )


@router.get("/{order_id}")
async def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    """Get one order with its items and allowed next statuses"""
    order = service.get_order(order_id)
    return {
        "status": "success",
        "data": order.to_dict()
    }


@router.post("/{order_id}/transition")
async def transition_order(
    order_id: int,
    request: TransitionRequest,
    service: OrderService = Depends(get_order_service),
    user: Optional[TokenUser] = Depends(get_current_user_optional)
):
    """
    Move an order to a new status

    Cancelling puts the order's stock back. Delivered and cancelled orders
    accept no further changes.
    """
    order = service.transition_order(order_id, request.status, note=request.note, actor=actor_of(user))
    return {
        "status": "success",
        "message": f"Order marked as {order.status.value.upper()}",
        "data": order.to_dict()
    }
