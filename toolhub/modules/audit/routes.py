from fastapi import APIRouter, Depends, Query
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.audit.schemas import AuditAction, AuditEntityType, AuditLogFilters, AuditLogResponse
from toolhub.modules.audit.service import AuditService
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional
from datetime import datetime

router = APIRouter(prefix="/audit-logs", tags=["audit"])


def get_audit_service(supabase: Client = Depends(get_supabase)) -> AuditService:
    return AuditService(supabase)


@router.get("", response_model=List[AuditLogResponse])
async def list_audit_logs(
    action: Optional[AuditAction] = None,
    entity_type: Optional[AuditEntityType] = None,
    user_id: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=500),
    current_user: UserProfile = Depends(require_permission("audit_logs:read")),
    service: AuditService = Depends(get_audit_service)
):
    """Audit trail, newest first (Admin only)"""
    filters = AuditLogFilters(
        action=action,
        entity_type=entity_type,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
    )
    return service.fetch_audit_logs(filters, limit=limit)
