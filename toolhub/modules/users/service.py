import json
import logging
from datetime import datetime, timezone
from supabase import Client
from toolhub.config import settings
from toolhub.config.permissions_config import Role
from toolhub.modules.users.schemas import (
    UserProfile, ProfileUpdate, InviteRequest, InviteResponse
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _decode_function_response(response: Any) -> Dict[str, Any]:
    """Edge function responses arrive as bytes, str or an already decoded dict."""
    if response is None:
        return {}
    if isinstance(response, dict):
        return response
    if isinstance(response, (bytes, bytearray)):
        response = response.decode("utf-8")
    if isinstance(response, str):
        if not response.strip():
            return {}
        try:
            decoded = json.loads(response)
        except ValueError:
            return {"message": response}
        return decoded if isinstance(decoded, dict) else {"message": str(decoded)}
    return {"message": str(response)}


class UserService:
    def __init__(self, supabase: Client, service_client: Optional[Client] = None):
        self.supabase = supabase
        self.service_client = service_client

    def _admin(self) -> Client:
        if self.service_client is None:
            raise HTTPException(
                status_code=500,
                detail="Service role key not configured. Cannot perform user administration."
            )
        return self.service_client

    def get_user_by_id(self, user_id: str) -> UserProfile:
        """Get user profile by ID"""
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserProfile(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def find_user_by_id(self, user_id: str) -> Optional[UserProfile]:
        try:
            return self.get_user_by_id(user_id)
        except HTTPException as e:
            if e.status_code == 404:
                return None
            raise

    def get_user_by_email(self, email: str) -> Optional[UserProfile]:
        """Get user profile by email (case-insensitive)"""
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("email", normalize_email(email))\
                .limit(1)\
                .execute()

            if not result.data:
                return None

            return UserProfile(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_users(self, limit: int = 100, offset: int = 0) -> List[UserProfile]:
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [UserProfile(**user) for user in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_users_by_role(self, role: Role) -> List[UserProfile]:
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("role", role.value)\
                .execute()
            return [UserProfile(**user) for user in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _update(self, user_id: str, update_data: Dict[str, Any]) -> UserProfile:
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserProfile(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_profile(self, user_id: str, profile: ProfileUpdate) -> UserProfile:
        update_data = {}
        if profile.name is not None:
            if not profile.name.strip():
                raise HTTPException(status_code=400, detail="Name must not be empty")
            update_data["name"] = profile.name.strip()
        if not update_data:
            return self.get_user_by_id(user_id)
        return self._update(user_id, update_data)

    def update_role(self, user_id: str, role: Role) -> UserProfile:
        logger.info(f"Changing role of user {user_id} to {role.value}")
        return self._update(user_id, {"role": role.value})

    def set_must_change_password(self, user_id: str, value: bool) -> UserProfile:
        return self._update(user_id, {"must_change_password": value})

    def reset_password(self, user_id: str, new_password: str) -> UserProfile:
        """Set a new auth password and force the user to change it on next login"""
        admin = self._admin()
        try:
            response = admin.auth.admin.update_user_by_id(user_id, {"password": new_password})
            if not response or not response.user:
                raise HTTPException(status_code=404, detail="User not found")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to reset password: {str(e)}")
        logger.info(f"Password reset for user {user_id}")
        return self.set_must_change_password(user_id, True)

    def invite_user(self, invite: InviteRequest, access_token: str) -> InviteResponse:
        """Invoke the invite-user edge function, which sends the invitation email"""
        body = {
            "email": normalize_email(invite.email),
            "name": invite.name,
            "role": invite.role.value,
        }
        try:
            response = self.supabase.functions.invoke(
                settings.invite_function_name,
                invoke_options={
                    "body": body,
                    "headers": {"Authorization": f"Bearer {access_token}"},
                },
            )
        except Exception as e:
            logger.error(f"Error invoking {settings.invite_function_name}: {e}")
            raise HTTPException(status_code=502, detail=f"Invitation failed: {str(e)}")

        payload = _decode_function_response(response)
        if payload.get("error"):
            raise HTTPException(status_code=400, detail=str(payload["error"]))

        invited = payload.get("user") or {}
        logger.info(f"Invitation sent to {body['email']} as {body['role']}")
        return InviteResponse(
            message=payload.get("message", "User invited successfully"),
            user_id=invited.get("id"),
            email=body["email"],
        )
