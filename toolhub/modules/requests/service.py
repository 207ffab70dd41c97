import logging
from datetime import datetime, timezone
from supabase import Client
from toolhub.config.permissions_config import Role
from toolhub.modules.audit.schemas import AuditAction, AuditEntityType, AuditLogCreate
from toolhub.modules.audit.service import AuditService
from toolhub.modules.notifications.schemas import NotificationCreate, NotificationType
from toolhub.modules.notifications.service import NotificationService
from toolhub.modules.requests.schemas import RequestCreate, RequestResponse, RequestStatus
from toolhub.modules.users.schemas import UserProfile
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    RequestStatus.PENDING: "Pending",
    RequestStatus.IN_PROGRESS: "In Progress",
    RequestStatus.COMPLETED: "Completed",
}


class RequestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.notifications = NotificationService(supabase)
        self.audit = AuditService(supabase)

    def _owned_tool_ids(self, owner_id: str) -> List[str]:
        result = self.supabase.table("tools")\
            .select("id")\
            .eq("owner_id", owner_id)\
            .execute()
        return [row["id"] for row in result.data or []]

    def _fetch_rows(self, request_ids: List[str]) -> List[Dict[str, Any]]:
        try:
            result = self.supabase.table("requests")\
                .select("*")\
                .in_("id", request_ids)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        rows = result.data or []
        missing = set(request_ids) - {row["id"] for row in rows}
        if missing:
            raise HTTPException(status_code=404, detail=f"Request(s) not found: {', '.join(sorted(missing))}")
        return rows

    def _ensure_can_mutate(self, actor: UserProfile, rows: List[Dict[str, Any]]) -> None:
        """Admins mutate any request; Owners only requests against their own tools; Observers none."""
        if actor.role is Role.ADMIN:
            return
        if actor.role is Role.OWNER:
            owned = set(self._owned_tool_ids(actor.id))
            foreign = [row["id"] for row in rows if row.get("tool_id") not in owned]
            if foreign:
                raise HTTPException(
                    status_code=403,
                    detail="Owners can only change requests for their own tools"
                )
            return
        if actor.role is Role.OBSERVER:
            raise HTTPException(status_code=403, detail="Observers cannot change requests")
        raise ValueError(f"Unhandled role: {actor.role}")

    def create_request(self, request_data: RequestCreate, actor: UserProfile) -> RequestResponse:
        tool_result = self.supabase.table("tools")\
            .select("id, name, owner_id, approval_status")\
            .eq("id", request_data.tool_id)\
            .limit(1)\
            .execute()
        if not tool_result.data:
            raise HTTPException(status_code=404, detail="Tool not found")
        tool = tool_result.data[0]

        try:
            result = self.supabase.table("requests").insert({
                "tool_id": request_data.tool_id,
                "title": request_data.title,
                "description": request_data.description,
                "status": RequestStatus.PENDING.value,
                "created_by": actor.id,
                "created_at": datetime.now(timezone.utc).isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create request")
            created = RequestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        self.audit.create_audit_log(AuditLogCreate(
            user_id=actor.id,
            action=AuditAction.CREATE,
            entity_type=AuditEntityType.REQUEST,
            entity_id=created.id,
            details={"title": created.title, "tool_id": created.tool_id}
        ))
        if tool.get("owner_id") and tool["owner_id"] != actor.id:
            self.notifications.notify_quietly(NotificationCreate(
                user_id=tool["owner_id"],
                type=NotificationType.REQUEST_ASSIGNED,
                title="New Request",
                message=f"{actor.name} requested \"{created.title}\" on {tool.get('name', 'your tool')}",
                related_id=created.id,
                related_type="request"
            ))
        return created

    def list_requests(
        self,
        viewer: UserProfile,
        tool_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        mine: bool = False
    ) -> List[RequestResponse]:
        """List requests, newest first. `mine` means requests on my tools for Owners, my own requests otherwise."""
        try:
            query = self.supabase.table("requests").select("*")
            if mine:
                if viewer.role is Role.OWNER:
                    tool_ids = self._owned_tool_ids(viewer.id)
                    if not tool_ids:
                        return []
                    query = query.in_("tool_id", tool_ids)
                elif viewer.role in (Role.ADMIN, Role.OBSERVER):
                    query = query.eq("created_by", viewer.id)
                else:
                    raise ValueError(f"Unhandled role: {viewer.role}")
            if tool_id:
                query = query.eq("tool_id", tool_id)
            if status:
                query = query.eq("status", status.value)
            result = query.order("created_at", desc=True).execute()
            return [RequestResponse(**row) for row in result.data or []]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_status(self, request_id: str, status: RequestStatus, actor: UserProfile) -> RequestResponse:
        updated = self.bulk_update_status([request_id], status, actor)
        return updated[0]

    def bulk_update_status(self, request_ids: List[str], status: RequestStatus, actor: UserProfile) -> List[RequestResponse]:
        """Move every listed request to `status` in one statement"""
        if not request_ids:
            raise HTTPException(status_code=400, detail="No requests selected")
        ids = list(dict.fromkeys(request_ids))
        rows = self._fetch_rows(ids)
        self._ensure_can_mutate(actor, rows)

        try:
            result = self.supabase.table("requests")\
                .update({
                    "status": status.value,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .in_("id", ids)\
                .execute()
            updated = [RequestResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"{actor.email} moved {len(updated)} request(s) to {status.value}")
        for request in updated:
            self.audit.create_audit_log(AuditLogCreate(
                user_id=actor.id,
                action=AuditAction.UPDATE,
                entity_type=AuditEntityType.REQUEST,
                entity_id=request.id,
                details={"status": status.value}
            ))
            if request.created_by and request.created_by != actor.id:
                self.notifications.notify_quietly(NotificationCreate(
                    user_id=request.created_by,
                    type=NotificationType.REQUEST_UPDATED,
                    title="Request Updated",
                    message=f"\"{request.title}\" is now {STATUS_LABELS[status]}",
                    related_id=request.id,
                    related_type="request"
                ))
        return updated

    def delete_request(self, request_id: str, actor: UserProfile) -> int:
        return self.bulk_delete([request_id], actor)

    def bulk_delete(self, request_ids: List[str], actor: UserProfile) -> int:
        if not request_ids:
            raise HTTPException(status_code=400, detail="No requests selected")
        ids = list(dict.fromkeys(request_ids))
        rows = self._fetch_rows(ids)
        self._ensure_can_mutate(actor, rows)

        try:
            result = self.supabase.table("requests")\
                .delete()\
                .in_("id", ids)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        deleted = result.data or []
        logger.info(f"{actor.email} deleted {len(deleted)} request(s)")
        for row in rows:
            self.audit.create_audit_log(AuditLogCreate(
                user_id=actor.id,
                action=AuditAction.DELETE,
                entity_type=AuditEntityType.REQUEST,
                entity_id=row["id"],
                details={"title": row.get("title")}
            ))
        return len(deleted)
