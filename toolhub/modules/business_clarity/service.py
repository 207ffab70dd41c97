import logging
from datetime import datetime, timezone
from supabase import Client
from toolhub.modules.audit.schemas import AuditAction, AuditEntityType, AuditLogCreate
from toolhub.modules.audit.service import AuditService
from toolhub.modules.business_clarity.schemas import BusinessClarityResponse, BusinessClarityUpdate
from toolhub.modules.tools.service import ToolService
from toolhub.modules.users.schemas import UserProfile
from typing import Any, Dict, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class BusinessClarityService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.tools = ToolService(supabase)
        self.audit = AuditService(supabase)

    def _find_row(self, tool_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("tool_business_clarity")\
                .select("*")\
                .eq("tool_id", tool_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return result.data[0] if result.data else None

    def get_clarity(self, tool_id: str, viewer: UserProfile) -> Optional[BusinessClarityResponse]:
        """Business context for a tool, or None when nobody has written it yet"""
        self.tools.get_tool(tool_id, viewer)
        row = self._find_row(tool_id)
        return BusinessClarityResponse(**row) if row else None

    def save_clarity(self, tool_id: str, data: BusinessClarityUpdate, actor: UserProfile) -> BusinessClarityResponse:
        """Create or update the tool's single clarity row. Only fields sent are changed."""
        tool = self.tools.get_tool(tool_id, actor)
        if not self.tools.can_edit(tool, actor):
            raise HTTPException(status_code=403, detail="Only the tool owner or an Admin can edit business clarity")

        changes = data.model_dump(exclude_unset=True)
        now = datetime.now(timezone.utc).isoformat()
        existing = self._find_row(tool_id)
        try:
            if existing:
                result = self.supabase.table("tool_business_clarity")\
                    .update({**changes, "updated_by": actor.id, "updated_at": now})\
                    .eq("tool_id", tool_id)\
                    .execute()
            else:
                result = self.supabase.table("tool_business_clarity").insert({
                    **changes,
                    "tool_id": tool_id,
                    "updated_by": actor.id,
                    "created_at": now,
                    "updated_at": now
                }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save business clarity")
            saved = BusinessClarityResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Business clarity for tool {tool_id} saved by {actor.email}")
        self.audit.create_audit_log(AuditLogCreate(
            user_id=actor.id,
            action=AuditAction.UPDATE if existing else AuditAction.CREATE,
            entity_type=AuditEntityType.BUSINESS_CLARITY,
            entity_id=tool_id,
            details={"fields": sorted(changes)}
        ))
        return saved
