from fastapi import APIRouter, Depends, HTTPException, Query
from toolhub.modules.auth.schemas import LoginRequest, TokenResponse, IdentityResponse, RouteDecisionResponse
from toolhub.modules.auth.identity import IdentityGateway
from toolhub.modules.auth.service import AuthService
from toolhub.core.dependencies import get_auth_service, get_access_token, get_identity
from toolhub.core.route_guard import evaluate_route
from toolhub.config.permissions_config import get_permission_matrix, role_permissions
from typing import Optional

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token. needs_password_reset tells the client to force a password change."""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: Optional[str] = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service),
    identity: IdentityGateway = Depends(get_identity)
):
    """Logout and invalidate token"""
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    service.logout(token)
    identity.sign_out()
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=IdentityResponse)
async def get_me(identity: IdentityGateway = Depends(get_identity)):
    """Settled identity for the caller and their role's permissions (for frontend UI)."""
    snapshot = identity.snapshot()
    permissions = sorted(role_permissions(snapshot.current_user.role)) if snapshot.current_user else []
    return IdentityResponse(
        current_user=snapshot.current_user,
        loading=snapshot.loading,
        is_mfa_enabled=snapshot.is_mfa_enabled,
        permissions=permissions,
    )


@router.get("/route-check", response_model=RouteDecisionResponse)
async def route_check(
    path: str = Query(..., description="Client route the user is navigating to"),
    identity: IdentityGateway = Depends(get_identity)
):
    """Route guard decision for a client-side navigation"""
    decision = evaluate_route(identity.snapshot(), path)
    return RouteDecisionResponse(
        state=decision.state.value,
        outcome=decision.outcome.value,
        location=decision.location,
        navigation_state=decision.navigation_state,
    )


@router.get("/permissions")
async def get_permissions():
    """Full permission catalogue and the permissions each role holds"""
    return get_permission_matrix()
