"""
TOTP enrollment for the signed-in user.

Enroll, verify and unenroll run through auth.mfa on a client bound to the
caller's session. Whenever the verified-factor set changes, every cached
identity for the user is evicted so the route guard sees the new state on
the very next request.
"""

import logging
from supabase import Client
from toolhub.config import settings
from toolhub.modules.audit.schemas import AuditAction, AuditEntityType, AuditLogCreate
from toolhub.modules.audit.service import AuditService
from toolhub.modules.auth.service import evict_cached_user, factor_value
from toolhub.modules.mfa.schemas import MfaEnrollment, MfaFactor, MfaStatus, MfaVerifyResponse
from toolhub.modules.users.schemas import UserProfile
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class MfaService:
    def __init__(self, session_client: Client, supabase: Client):
        self.session_client = session_client
        self.audit = AuditService(supabase)

    def list_factors(self) -> List[MfaFactor]:
        try:
            response = self.session_client.auth.mfa.list_factors()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to list MFA factors: {str(e)}")
        return [
            MfaFactor(
                id=factor_value(factor, "id"),
                factor_type=factor_value(factor, "factor_type"),
                status=factor_value(factor, "status"),
                friendly_name=factor_value(factor, "friendly_name"),
            )
            for factor in (response.all or [])
        ]

    def get_status(self) -> MfaStatus:
        factors = self.list_factors()
        enabled = any(f.factor_type == "totp" and f.status == "verified" for f in factors)
        return MfaStatus(is_mfa_enabled=enabled, factors=factors)

    def enroll(self, user: UserProfile) -> MfaEnrollment:
        """Start TOTP enrollment. The factor stays unverified until verify() succeeds."""
        if self.get_status().is_mfa_enabled:
            raise HTTPException(status_code=409, detail="MFA is already enabled")
        try:
            response = self.session_client.auth.mfa.enroll({
                "factor_type": "totp",
                "issuer": settings.mfa_issuer,
                "friendly_name": user.email or "User",
            })
        except Exception as e:
            logger.warning(f"MFA enrollment failed for {user.id}: {e}")
            raise HTTPException(status_code=400, detail=f"Enrollment failed: {str(e)}")
        return MfaEnrollment(
            factor_id=response.id,
            qr_code=response.totp.qr_code,
            secret=response.totp.secret,
            uri=getattr(response.totp, "uri", None),
        )

    def verify(self, user: UserProfile, factor_id: str, code: str) -> MfaVerifyResponse:
        try:
            response = self.session_client.auth.mfa.challenge_and_verify({
                "factor_id": factor_id,
                "code": code,
            })
        except Exception as e:
            logger.info(f"MFA verification rejected for {user.id}: {e}")
            raise HTTPException(status_code=400, detail=f"Verification failed: {str(e)}")

        evict_cached_user(user.id)
        self._audit(user, {"mfa_enabled": True, "factor_id": factor_id})
        logger.info(f"MFA enabled for user {user.id}")
        return MfaVerifyResponse(is_mfa_enabled=True, access_token=getattr(response, "access_token", None))

    def unenroll(self, user: UserProfile, factor_id: Optional[str] = None) -> MfaStatus:
        if factor_id is None:
            totp = [f for f in self.list_factors() if f.factor_type == "totp"]
            if not totp:
                raise HTTPException(status_code=404, detail="No TOTP factor enrolled")
            factor_id = totp[0].id
        try:
            self.session_client.auth.mfa.unenroll({"factor_id": factor_id})
        except Exception as e:
            raise HTTPException(status_code=400, detail=f"Error disabling MFA: {str(e)}")

        evict_cached_user(user.id)
        self._audit(user, {"mfa_enabled": False, "factor_id": factor_id})
        logger.info(f"MFA factor {factor_id} removed for user {user.id}")
        return self.get_status()

    def _audit(self, user: UserProfile, details: dict) -> None:
        self.audit.create_audit_log(AuditLogCreate(
            user_id=user.id,
            action=AuditAction.UPDATE,
            entity_type=AuditEntityType.USER,
            entity_id=user.id,
            details=details,
        ))
