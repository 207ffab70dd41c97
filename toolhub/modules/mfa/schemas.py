from pydantic import BaseModel, Field
from typing import List, Optional


class MfaFactor(BaseModel):
    id: str
    factor_type: str
    status: str
    friendly_name: Optional[str] = None


class MfaStatus(BaseModel):
    is_mfa_enabled: bool
    factors: List[MfaFactor] = []


class MfaEnrollment(BaseModel):
    """Secret material for the authenticator app. Shown once, never stored by ToolHub."""
    factor_id: str
    qr_code: str
    secret: str
    uri: Optional[str] = None


class MfaVerifyRequest(BaseModel):
    factor_id: str
    code: str = Field(..., pattern=r"^\d{6}$")


class MfaVerifyResponse(BaseModel):
    is_mfa_enabled: bool
    access_token: Optional[str] = None  # upgraded (aal2) session token


class MfaUnenrollRequest(BaseModel):
    factor_id: Optional[str] = None  # defaults to the first TOTP factor
