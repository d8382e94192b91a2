"""
Activity Log Repository - reads the admin audit trail

Writes go through the log_admin_action RPC (see AuditService); this
repository only reads.
"""
from typing import List, Optional

from shopdesk.core.database import read_cursor
from shopdesk.domain.activity import ActivityLog


class ActivityLogRepository:

    def find_recent(self, limit: int = 500, action_type: Optional[str] = None) -> List[ActivityLog]:
        """Newest entries first, optionally only one action type"""
        conditions = []
        params = []

        if action_type:
            conditions.append("action_type = %s")
            params.append(action_type.upper())

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        with read_cursor("find activity logs") as cursor:
            cursor.execute(f"""
                SELECT id, action_type, resource, description, meta_data, actor, created_at
                FROM activity_logs
                WHERE {where_clause}
                ORDER BY created_at DESC
                LIMIT %s
            """, params + [limit])
            return [ActivityLog(**{**row, 'meta_data': row.get('meta_data') or {}}) for row in cursor.fetchall()]
