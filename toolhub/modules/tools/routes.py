from fastapi import APIRouter, Depends, HTTPException
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.tools.schemas import ApprovalStatus, ToolCreate, ToolUpdate, ToolDecision, ToolResponse
from toolhub.modules.tools.service import ToolService
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import require_permission
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/tools", tags=["tools"])


def get_tool_service(supabase: Client = Depends(get_supabase)) -> ToolService:
    return ToolService(supabase)


@router.get("", response_model=List[ToolResponse])
async def list_tools(
    status: Optional[ApprovalStatus] = None,
    current_user: UserProfile = Depends(require_permission("tools:read")),
    service: ToolService = Depends(get_tool_service)
):
    """List tools visible to the caller's role"""
    return service.list_tools(current_user, status)


@router.post("", response_model=ToolResponse, status_code=201)
async def create_tool(
    tool_data: ToolCreate,
    current_user: UserProfile = Depends(require_permission("tools:create")),
    service: ToolService = Depends(get_tool_service)
):
    """Submit a new tool; it starts out pending approval"""
    return service.create_tool(tool_data, current_user)


@router.get("/{tool_id}", response_model=ToolResponse)
async def get_tool(
    tool_id: str,
    current_user: UserProfile = Depends(require_permission("tools:read")),
    service: ToolService = Depends(get_tool_service)
):
    return service.get_tool(tool_id, current_user)


@router.put("/{tool_id}", response_model=ToolResponse)
async def update_tool(
    tool_id: str,
    tool_data: ToolUpdate,
    current_user: UserProfile = Depends(require_permission("tools:update")),
    service: ToolService = Depends(get_tool_service)
):
    """Edit a tool (owner or Admin)"""
    return service.update_tool(tool_id, tool_data, current_user)


@router.post("/{tool_id}/approve", response_model=ToolResponse)
async def approve_tool(
    tool_id: str,
    decision: Optional[ToolDecision] = None,
    current_user: UserProfile = Depends(require_permission("tools:approve")),
    service: ToolService = Depends(get_tool_service)
):
    reason = decision.reason if decision else None
    return service.set_approval_status(tool_id, ApprovalStatus.APPROVED, current_user, reason)


@router.post("/{tool_id}/reject", response_model=ToolResponse)
async def reject_tool(
    tool_id: str,
    decision: Optional[ToolDecision] = None,
    current_user: UserProfile = Depends(require_permission("tools:approve")),
    service: ToolService = Depends(get_tool_service)
):
    reason = decision.reason if decision else None
    return service.set_approval_status(tool_id, ApprovalStatus.REJECTED, current_user, reason)


@router.delete("/{tool_id}", status_code=204)
async def delete_tool(
    tool_id: str,
    current_user: UserProfile = Depends(require_permission("tools:delete")),
    service: ToolService = Depends(get_tool_service)
):
    if not service.delete_tool(tool_id, current_user):
        raise HTTPException(status_code=404, detail="Tool not found")
    return None
