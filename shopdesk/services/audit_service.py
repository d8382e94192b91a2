"""
Audit logging for admin actions

Entries are written through the log_admin_action RPC. Logging is
best-effort: a failed write is reported in the application log and never
blocks or rolls back the operation being audited.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder

from shopdesk.core.config import settings
from shopdesk.core.database import get_supabase
from shopdesk.domain.activity import ActivityLog
from shopdesk.repositories.activity_log_repository import ActivityLogRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Writes and reads the admin activity log"""

    def __init__(self, logs: Optional[ActivityLogRepository] = None):
        self.logs = logs or ActivityLogRepository()

    def log_action(
        self,
        action_type: str,
        resource: str,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
        actor: Optional[str] = None
    ) -> bool:
        """
        Record an admin action

        Args:
            action_type: CREATE, UPDATE, DELETE, ...
            resource: Order, Sale, Product, ...
            description: Human readable summary
            metadata: Extra JSON-serializable context
            actor: Email/id of the operator (None lets the database use auth.uid())

        Returns:
            True if the entry was written, False if logging failed
        """
        payload = {
            'action_type': action_type,
            'resource': resource,
            'description': description,
            'meta_data': jsonable_encoder(metadata or {}),
            'actor': actor,
        }

        try:
            get_supabase().rpc('log_admin_action', payload).execute()
            return True
        except Exception as e:
            logger.warning(f"Audit log failed for {action_type} {resource} ({description}): {e}")
            return False

    def recent_logs(self, limit: Optional[int] = None, action_type: Optional[str] = None) -> List[ActivityLog]:
        return self.logs.find_recent(limit=limit or settings.ACTIVITY_LOG_LIMIT, action_type=action_type)
