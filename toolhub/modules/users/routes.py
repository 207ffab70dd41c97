from fastapi import APIRouter, Depends, HTTPException, Query
from toolhub.modules.users.schemas import (
    UserProfile, RoleUpdate, InviteRequest, InviteResponse, PasswordResetRequest
)
from toolhub.modules.users.service import UserService
from toolhub.modules.audit.schemas import AuditAction, AuditEntityType, AuditLogCreate
from toolhub.modules.audit.service import AuditService
from toolhub.modules.audit.routes import get_audit_service
from toolhub.core.dependencies import require_permission, get_user_service, get_access_token
from typing import List, Optional

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserProfile])
async def list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: UserProfile = Depends(require_permission("users:read")),
    service: UserService = Depends(get_user_service)
):
    """List all users, newest first (Admin only)"""
    return service.list_users(limit=limit, offset=offset)


@router.get("/{user_id}", response_model=UserProfile)
async def get_user(
    user_id: str,
    current_user: UserProfile = Depends(require_permission("users:read")),
    service: UserService = Depends(get_user_service)
):
    return service.get_user_by_id(user_id)


@router.put("/{user_id}/role", response_model=UserProfile)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    current_user: UserProfile = Depends(require_permission("users:update")),
    service: UserService = Depends(get_user_service),
    audit: AuditService = Depends(get_audit_service)
):
    """Change a user's role (Admin only)"""
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Admins cannot change their own role")
    updated = service.update_role(user_id, body.role)
    audit.create_audit_log(AuditLogCreate(
        user_id=current_user.id,
        action=AuditAction.UPDATE,
        entity_type=AuditEntityType.USER,
        entity_id=user_id,
        details={"role": body.role.value}
    ))
    return updated


@router.post("/invite", response_model=InviteResponse, status_code=201)
async def invite_user(
    body: InviteRequest,
    current_user: UserProfile = Depends(require_permission("users:invite")),
    token: Optional[str] = Depends(get_access_token),
    service: UserService = Depends(get_user_service),
    audit: AuditService = Depends(get_audit_service)
):
    """Send an invitation email through the invite-user edge function"""
    response = service.invite_user(body, token)
    audit.create_audit_log(AuditLogCreate(
        user_id=current_user.id,
        action=AuditAction.CREATE,
        entity_type=AuditEntityType.USER,
        entity_id=response.user_id or response.email,
        details={"email": response.email, "role": body.role.value, "invited": True}
    ))
    return response


@router.post("/{user_id}/reset-password", response_model=UserProfile)
async def reset_user_password(
    user_id: str,
    body: PasswordResetRequest,
    current_user: UserProfile = Depends(require_permission("users:reset_password")),
    service: UserService = Depends(get_user_service),
    audit: AuditService = Depends(get_audit_service)
):
    """Set a temporary password; the user must change it at next login"""
    updated = service.reset_password(user_id, body.new_password)
    audit.create_audit_log(AuditLogCreate(
        user_id=current_user.id,
        action=AuditAction.UPDATE,
        entity_type=AuditEntityType.USER,
        entity_id=user_id,
        details={"password_reset": True}
    ))
    return updated
