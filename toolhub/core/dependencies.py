"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from toolhub.core.route_guard import GuardOutcome, evaluate_route
from toolhub.database.supabase_client import get_supabase, get_service_supabase, get_session_supabase, SupabaseClient
from toolhub.config.permissions_config import has_permission
from toolhub.modules.auth.identity import IdentityGateway
from toolhub.modules.auth.service import AuthService
from toolhub.modules.users.schemas import UserProfile
from toolhub.modules.users.service import UserService
from supabase import Client
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# API routes a signed-in user needs before MFA is enrolled: the profile itself,
# a forced password change and the TOTP enrollment ceremony. Exact matches only.
MFA_ENROLLMENT_API_PATHS = frozenset({
    "/profile",
    "/profile/password",
    "/profile/mfa/factors",
    "/profile/mfa/enroll",
    "/profile/mfa/verify",
    "/profile/mfa/unenroll",
})

security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache (identity gateway, resolved profile)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_admin_client() -> Optional[Client]:
    """Service-role client, or None when the key is not configured."""
    if not SupabaseClient.has_service_client():
        return None
    return get_service_supabase()


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    admin_client: Optional[Client] = Depends(get_admin_client)
) -> AuthService:
    return AuthService(supabase, admin_client)


def get_user_service(
    supabase: Client = Depends(get_supabase),
    admin_client: Optional[Client] = Depends(get_admin_client)
) -> UserService:
    return UserService(supabase, admin_client)


def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_session_client(
    token: Optional[str] = Depends(get_access_token)
) -> Optional[Client]:
    """Client bound to the caller's session, or None for anonymous requests."""
    if not token:
        return None
    try:
        return get_session_supabase(token)
    except Exception as e:
        logger.info(f"Could not bind session client: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"}
        )


def get_identity(
    request: Request,
    token: Optional[str] = Depends(get_access_token),
    auth_service: AuthService = Depends(get_auth_service),
    user_service: UserService = Depends(get_user_service)
) -> IdentityGateway:
    """One identity lookup per request; later dependencies reuse the settled gateway."""
    cache = _get_request_cache(request)
    if "identity" not in cache:
        gateway = IdentityGateway(auth_service, user_service)
        gateway.initialize(token)
        cache["identity"] = gateway
    return cache["identity"]


def route_path(request: Request) -> str:
    """Request path relative to the API prefix, which is what the guard reasons about."""
    path = request.url.path
    if path.startswith(API_PREFIX):
        path = path[len(API_PREFIX):] or "/"
    return path


def require_route_access(
    request: Request,
    identity: IdentityGateway = Depends(get_identity)
) -> UserProfile:
    """Apply the route guard to an API request and return the signed-in profile."""
    path = route_path(request)
    decision = evaluate_route(identity.snapshot(), path)
    if decision.outcome is GuardOutcome.RENDER:
        return identity.current_user
    if decision.outcome is GuardOutcome.REDIRECT_LOGIN:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Authentication required", "redirect": decision.location, **decision.navigation_state},
            headers={"WWW-Authenticate": "Bearer"}
        )
    if decision.outcome is GuardOutcome.REDIRECT_PROFILE:
        if path in MFA_ENROLLMENT_API_PATHS:
            return identity.current_user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"message": "Multi-factor authentication enrollment required", "redirect": decision.location, **decision.navigation_state}
        )
    # SPINNER cannot happen once initialize() has run
    raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Identity not resolved")


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(
        current_user: UserProfile = Depends(require_route_access)
    ) -> UserProfile:
        """Dependency to check if user's role grants the required permission"""
        if not has_permission(current_user.role, required_permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return current_user
    return check_permission
