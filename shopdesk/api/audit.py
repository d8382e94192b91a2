"""
Audit API Endpoints
Admin activity log (who did what, when)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from shopdesk.api.dependencies import get_audit_service
from shopdesk.services.audit_service import AuditService

router = APIRouter()


@router.get("/logs")
async def get_activity_logs(
    limit: Optional[int] = Query(None, ge=1, le=5000),
    action_type: Optional[str] = Query(None, description="CREATE, UPDATE, DELETE, ..."),
    service: AuditService = Depends(get_audit_service)
):
    """Most recent admin actions, newest first"""
    logs = service.recent_logs(limit=limit, action_type=action_type.upper() if action_type else None)
    return {
        "status": "success",
        "count": len(logs),
        "data": [log.model_dump(mode="json") for log in logs]
    }
