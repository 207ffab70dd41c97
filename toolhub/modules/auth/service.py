import hashlib
import logging
import time
from supabase import Client
from toolhub.modules.auth.schemas import LoginRequest, TokenResponse
from toolhub.modules.users.service import UserService, normalize_email
from fastapi import HTTPException
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


def evict_cached_user(user_id: str) -> int:
    """Drop every cached token entry for a user, so a changed MFA state is seen on the next lookup."""
    stale = [key for key, (user_data, _) in _AUTH_USER_CACHE.items() if user_data.get("id") == user_id]
    for key in stale:
        _AUTH_USER_CACHE.pop(key, None)
    return len(stale)


def factor_value(factor: Any, field: str) -> Any:
    """Read a factor field from either an SDK model or a plain dict."""
    if isinstance(factor, dict):
        return factor.get(field)
    return getattr(factor, field, None)


def has_verified_totp(user: Any) -> bool:
    """True when the auth user has at least one verified TOTP factor."""
    for factor in getattr(user, "factors", None) or []:
        if factor_value(factor, "factor_type") == "totp" and factor_value(factor, "status") == "verified":
            return True
    return False


class AuthService:
    def __init__(self, supabase: Client, service_client: Optional[Client] = None):
        self.supabase = supabase
        self.service_client = service_client

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth and load the ToolHub profile"""
        email = normalize_email(login_data.email)
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": login_data.password  # Password is case-sensitive
            })
        except Exception as e:
            error_message = str(e)
            logger.warning(f"Login failed for {email}: {error_message}")
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")

        profile = UserService(self.supabase).find_user_by_id(auth_response.user.id)
        if profile is None:
            # Auth user exists but has no public.users row
            logger.error(f"Auth user {auth_response.user.id} has no profile row")
            self._sign_out_quietly()
            raise HTTPException(
                status_code=401,
                detail="User profile not found. Please contact administrator."
            )

        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or email,
            needs_password_reset=profile.must_change_password
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "is_mfa_enabled": has_verified_totp(user),
                "created_at": user.created_at,
                "updated_at": user.updated_at
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def _sign_out_quietly(self) -> None:
        try:
            self.supabase.auth.sign_out()
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase Auth tokens are stateless JWTs, so logout is mainly client-side
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Logout failed: {e}")
            return False

    def update_password(self, user_id: str, new_password: str) -> None:
        """Change the caller's password and clear the must_change_password flag"""
        if not self.service_client:
            raise HTTPException(
                status_code=500,
                detail="Service role key not configured. Cannot update password."
            )
        if len(new_password) < 8:
            raise HTTPException(status_code=400, detail="Password must be at least 8 characters")
        try:
            response = self.service_client.auth.admin.update_user_by_id(
                user_id,
                {"password": new_password}
            )
            if not response or not response.user:
                raise HTTPException(status_code=404, detail="User not found")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update password: {str(e)}")

        users = UserService(self.supabase)
        try:
            users.set_must_change_password(user_id, False)
        except HTTPException as e:
            raise HTTPException(
                status_code=500,
                detail=f"Password updated but failed to update profile: {e.detail}"
            )
