from fastapi import APIRouter, Depends, HTTPException
from toolhub.database.supabase_client import get_supabase
from toolhub.modules.mfa.schemas import MfaEnrollment, MfaStatus, MfaUnenrollRequest, MfaVerifyRequest, MfaVerifyResponse
from toolhub.modules.mfa.service import MfaService
from toolhub.modules.users.schemas import UserProfile
from toolhub.core.dependencies import get_session_client, require_route_access
from supabase import Client
from typing import Optional

# Every path here is listed in MFA_ENROLLMENT_API_PATHS
router = APIRouter(prefix="/profile/mfa", tags=["mfa"])


def get_mfa_service(
    session_client: Optional[Client] = Depends(get_session_client),
    supabase: Client = Depends(get_supabase)
) -> MfaService:
    if session_client is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return MfaService(session_client, supabase)


@router.get("/factors", response_model=MfaStatus)
async def list_factors(
    current_user: UserProfile = Depends(require_route_access),
    service: MfaService = Depends(get_mfa_service)
):
    return service.get_status()


@router.post("/enroll", response_model=MfaEnrollment, status_code=201)
async def enroll(
    current_user: UserProfile = Depends(require_route_access),
    service: MfaService = Depends(get_mfa_service)
):
    """Start TOTP enrollment; returns the QR code and secret for the authenticator app"""
    return service.enroll(current_user)


@router.post("/verify", response_model=MfaVerifyResponse)
async def verify(
    body: MfaVerifyRequest,
    current_user: UserProfile = Depends(require_route_access),
    service: MfaService = Depends(get_mfa_service)
):
    """Confirm the first code from the authenticator app, which enables MFA"""
    return service.verify(current_user, body.factor_id, body.code)


@router.post("/unenroll", response_model=MfaStatus)
async def unenroll(
    body: MfaUnenrollRequest,
    current_user: UserProfile = Depends(require_route_access),
    service: MfaService = Depends(get_mfa_service)
):
    """Disable MFA. The route guard will send the user back to /profile afterwards."""
    return service.unenroll(current_user, body.factor_id)
