from fastapi import APIRouter, Depends
from toolhub.modules.auth.identity import IdentityGateway
from toolhub.modules.auth.schemas import PasswordUpdateRequest, IdentityResponse
from toolhub.modules.auth.service import AuthService
from toolhub.modules.users.schemas import UserProfile, ProfileUpdate
from toolhub.modules.users.service import UserService
from toolhub.core.dependencies import get_auth_service, get_identity, get_user_service, require_route_access
from toolhub.config.permissions_config import role_permissions

# Reachable while MFA enrollment is still pending (see MFA_ENROLLMENT_API_PATHS)
router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=IdentityResponse)
async def get_profile(
    current_user: UserProfile = Depends(require_route_access),
    identity: IdentityGateway = Depends(get_identity)
):
    return IdentityResponse(
        current_user=current_user,
        loading=False,
        is_mfa_enabled=identity.is_mfa_enabled,
        permissions=sorted(role_permissions(current_user.role)),
    )


@router.put("", response_model=UserProfile)
async def update_profile(
    profile: ProfileUpdate,
    current_user: UserProfile = Depends(require_route_access),
    service: UserService = Depends(get_user_service)
):
    return service.update_profile(current_user.id, profile)


@router.post("/password", status_code=200)
async def change_password(
    body: PasswordUpdateRequest,
    current_user: UserProfile = Depends(require_route_access),
    service: AuthService = Depends(get_auth_service)
):
    """Change own password; clears the must_change_password flag"""
    service.update_password(current_user.id, body.new_password)
    return {"message": "Password updated successfully"}
