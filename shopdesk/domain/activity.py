"""
Activity log entry (admin audit trail)
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ConfigDict


class ActivityLog(BaseModel):
    """One row of activity_logs, written by the log_admin_action RPC"""

    id: int
    action_type: str = Field(..., description="CREATE, UPDATE, DELETE, LOGIN, ...")
    resource: str = Field(..., description="Order, Sale, Coupon, Product, ...")
    description: str
    meta_data: Dict[str, Any] = Field(default_factory=dict)
    actor: Optional[str] = Field(None, description="Email or id of the admin who acted")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
