import logging
from datetime import datetime, timezone
from supabase import Client
from toolhub.modules.audit.schemas import AuditLogCreate, AuditLogFilters, AuditLogResponse
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class AuditService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_audit_log(self, params: AuditLogCreate) -> bool:
        """Record an audit entry. Failures are logged and reported, never raised into the caller's flow."""
        try:
            self.supabase.table("audit_logs").insert({
                "user_id": params.user_id,
                "action": params.action.value,
                "entity_type": params.entity_type.value,
                "entity_id": params.entity_id,
                "details": params.details or {},
                "created_at": datetime.now(timezone.utc).isoformat()
            }).execute()
            logger.info(f"Audit log created: {params.action.value} {params.entity_type.value} {params.entity_id}")
            return True
        except Exception as e:
            logger.error(f"Audit log error: {e}")
            return False

    def fetch_audit_logs(self, filters: Optional[AuditLogFilters] = None, limit: int = 100) -> List[AuditLogResponse]:
        try:
            query = self.supabase.table("audit_logs")\
                .select("*, user:users(name, email, role)")
            if filters:
                if filters.action:
                    query = query.eq("action", filters.action.value)
                if filters.entity_type:
                    query = query.eq("entity_type", filters.entity_type.value)
                if filters.user_id:
                    query = query.eq("user_id", filters.user_id)
                if filters.start_date:
                    query = query.gte("created_at", filters.start_date.isoformat())
                if filters.end_date:
                    query = query.lte("created_at", filters.end_date.isoformat())
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [AuditLogResponse(**row) for row in result.data]
        except Exception as e:
            logger.error(f"Error fetching audit logs: {e}")
            raise HTTPException(status_code=500, detail=str(e))
