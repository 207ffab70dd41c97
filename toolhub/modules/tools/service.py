import logging
from datetime import datetime, timezone
from supabase import Client
from toolhub.config.permissions_config import Role
from toolhub.modules.audit.schemas import AuditAction, AuditEntityType, AuditLogCreate
from toolhub.modules.audit.service import AuditService
from toolhub.modules.notifications.schemas import NotificationCreate, NotificationType
from toolhub.modules.notifications.service import NotificationService
from toolhub.modules.tools.schemas import ApprovalStatus, ToolCreate, ToolUpdate, ToolResponse
from toolhub.modules.users.schemas import UserProfile
from toolhub.modules.users.service import UserService
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ToolService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.notifications = NotificationService(supabase)
        self.audit = AuditService(supabase)

    def _fetch_row(self, tool_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("tools")\
                .select("*")\
                .eq("id", tool_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Tool not found")
        return result.data[0]

    @staticmethod
    def can_view(tool: ToolResponse, viewer: UserProfile) -> bool:
        if viewer.role is Role.ADMIN:
            return True
        if viewer.role is Role.OWNER:
            return tool.owner_id == viewer.id or tool.approval_status is ApprovalStatus.APPROVED
        if viewer.role is Role.OBSERVER:
            return tool.approval_status is ApprovalStatus.APPROVED
        raise ValueError(f"Unhandled role: {viewer.role}")

    @staticmethod
    def can_edit(tool: ToolResponse, actor: UserProfile) -> bool:
        if actor.role is Role.ADMIN:
            return True
        if actor.role is Role.OWNER:
            return tool.owner_id == actor.id
        if actor.role is Role.OBSERVER:
            return False
        raise ValueError(f"Unhandled role: {actor.role}")

    def create_tool(self, tool_data: ToolCreate, actor: UserProfile) -> ToolResponse:
        """Submit a tool for approval"""
        if actor.role is Role.ADMIN:
            owner_id = tool_data.owner_id or actor.id
        elif actor.role is Role.OWNER:
            owner_id = actor.id
        elif actor.role is Role.OBSERVER:
            raise HTTPException(status_code=403, detail="Observers cannot create tools")
        else:
            raise ValueError(f"Unhandled role: {actor.role}")

        if not tool_data.name.strip():
            raise HTTPException(status_code=400, detail="Tool name is required")

        try:
            result = self.supabase.table("tools").insert({
                "name": tool_data.name.strip(),
                "description": tool_data.description,
                "url": tool_data.url,
                "owner_id": owner_id,
                "created_by": actor.id,
                "approval_status": ApprovalStatus.PENDING.value,
                "created_at": datetime.now(timezone.utc).isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create tool")
            tool = ToolResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Tool {tool.id} submitted by {actor.email}")
        self.audit.create_audit_log(AuditLogCreate(
            user_id=actor.id,
            action=AuditAction.CREATE,
            entity_type=AuditEntityType.TOOL,
            entity_id=tool.id,
            details={"name": tool.name}
        ))
        self._notify_admins_of_submission(tool, actor)
        return tool

    def _notify_admins_of_submission(self, tool: ToolResponse, actor: UserProfile) -> None:
        try:
            admins = UserService(self.supabase).list_users_by_role(Role.ADMIN)
        except HTTPException as e:
            logger.warning(f"Could not load admins to notify about tool {tool.id}: {e.detail}")
            return
        for admin in admins:
            if admin.id == actor.id:
                continue
            self.notifications.notify_quietly(NotificationCreate(
                user_id=admin.id,
                type=NotificationType.TOOL_ADDED,
                title="New Tool Submitted",
                message=f"{actor.name} submitted {tool.name} for approval",
                related_id=tool.id,
                related_type="tool"
            ))

    def list_tools(self, viewer: UserProfile, status: Optional[ApprovalStatus] = None) -> List[ToolResponse]:
        """Tools visible to the viewer, newest first"""
        try:
            if viewer.role is Role.ADMIN:
                query = self.supabase.table("tools").select("*")
                if status:
                    query = query.eq("approval_status", status.value)
                rows = query.order("created_at", desc=True).execute().data
            elif viewer.role is Role.OWNER:
                own = self.supabase.table("tools")\
                    .select("*")\
                    .eq("owner_id", viewer.id)\
                    .execute().data
                approved = self.supabase.table("tools")\
                    .select("*")\
                    .eq("approval_status", ApprovalStatus.APPROVED.value)\
                    .execute().data
                merged = {row["id"]: row for row in (own or []) + (approved or [])}
                rows = sorted(merged.values(), key=lambda row: str(row.get("created_at") or ""), reverse=True)
                if status:
                    rows = [row for row in rows if row.get("approval_status") == status.value]
            elif viewer.role is Role.OBSERVER:
                if status and status is not ApprovalStatus.APPROVED:
                    return []
                rows = self.supabase.table("tools")\
                    .select("*")\
                    .eq("approval_status", ApprovalStatus.APPROVED.value)\
                    .order("created_at", desc=True)\
                    .execute().data
            else:
                raise ValueError(f"Unhandled role: {viewer.role}")
            return [ToolResponse(**row) for row in rows or []]
        except HTTPException:
            raise
        except ValueError:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_tool(self, tool_id: str, viewer: UserProfile) -> ToolResponse:
        tool = ToolResponse(**self._fetch_row(tool_id))
        if not self.can_view(tool, viewer):
            # Hidden tools look the same as missing ones
            raise HTTPException(status_code=404, detail="Tool not found")
        return tool

    def update_tool(self, tool_id: str, tool_data: ToolUpdate, actor: UserProfile) -> ToolResponse:
        tool = self.get_tool(tool_id, actor)
        if not self.can_edit(tool, actor):
            raise HTTPException(status_code=403, detail="Only the tool owner or an Admin can edit this tool")

        update_data: Dict[str, Any] = {}
        if tool_data.name is not None:
            if not tool_data.name.strip():
                raise HTTPException(status_code=400, detail="Tool name is required")
            update_data["name"] = tool_data.name.strip()
        if tool_data.description is not None:
            update_data["description"] = tool_data.description
        if tool_data.url is not None:
            update_data["url"] = tool_data.url
        if not update_data:
            return tool
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            result = self.supabase.table("tools")\
                .update(update_data)\
                .eq("id", tool_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Tool not found")
            updated = ToolResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        self.audit.create_audit_log(AuditLogCreate(
            user_id=actor.id,
            action=AuditAction.UPDATE,
            entity_type=AuditEntityType.TOOL,
            entity_id=tool_id,
            details={k: v for k, v in update_data.items() if k != "updated_at"}
        ))
        return updated

    def set_approval_status(
        self,
        tool_id: str,
        status: ApprovalStatus,
        actor: UserProfile,
        reason: Optional[str] = None
    ) -> ToolResponse:
        """Approve or reject a tool (Admin only) and tell its owner"""
        if actor.role is not Role.ADMIN:
            raise HTTPException(status_code=403, detail="Only Admins can approve or reject tools")
        if status is ApprovalStatus.PENDING:
            raise HTTPException(status_code=400, detail="A decision must be approved or rejected")

        self._fetch_row(tool_id)
        try:
            result = self.supabase.table("tools")\
                .update({
                    "approval_status": status.value,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", tool_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Tool not found")
            tool = ToolResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        approved = status is ApprovalStatus.APPROVED
        logger.info(f"Tool {tool_id} {status.value} by {actor.email}")
        self.audit.create_audit_log(AuditLogCreate(
            user_id=actor.id,
            action=AuditAction.APPROVE if approved else AuditAction.REJECT,
            entity_type=AuditEntityType.TOOL,
            entity_id=tool_id,
            details={"name": tool.name, "reason": reason} if reason else {"name": tool.name}
        ))
        if tool.owner_id:
            message = f"{tool.name} has been {'approved' if approved else 'rejected'}"
            if reason:
                message = f"{message}: {reason}"
            self.notifications.notify_quietly(NotificationCreate(
                user_id=tool.owner_id,
                type=NotificationType.TOOL_APPROVED if approved else NotificationType.TOOL_REJECTED,
                title="Tool Approved" if approved else "Tool Rejected",
                message=message,
                related_id=tool_id,
                related_type="tool"
            ))
        return tool

    def delete_tool(self, tool_id: str, actor: UserProfile) -> bool:
        if actor.role is not Role.ADMIN:
            raise HTTPException(status_code=403, detail="Only Admins can delete tools")
        tool = self._fetch_row(tool_id)
        try:
            result = self.supabase.table("tools")\
                .delete()\
                .eq("id", tool_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        self.audit.create_audit_log(AuditLogCreate(
            user_id=actor.id,
            action=AuditAction.DELETE,
            entity_type=AuditEntityType.TOOL,
            entity_id=tool_id,
            details={"name": tool.get("name")}
        ))
        return len(result.data or []) > 0
