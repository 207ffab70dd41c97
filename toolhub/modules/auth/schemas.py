from pydantic import BaseModel, EmailStr
from typing import Any, Dict, List, Optional
from toolhub.modules.users.schemas import UserProfile


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    needs_password_reset: bool = False


class PasswordUpdateRequest(BaseModel):
    new_password: str


class IdentityResponse(BaseModel):
    current_user: Optional[UserProfile] = None
    loading: bool
    is_mfa_enabled: bool
    permissions: List[str] = []


class RouteDecisionResponse(BaseModel):
    state: str
    outcome: str
    location: Optional[str] = None
    navigation_state: Dict[str, Any] = {}
