"""
Send an invitation through the invite-user edge function as an Admin.

    LOGIN_EMAIL=... LOGIN_PASSWORD=... INVITE_EMAIL=... INVITE_NAME=... INVITE_ROLE=Owner \
        python -m toolhub.scripts.send_invite
"""

import sys
import logging
from fastapi import HTTPException
from pydantic import ValidationError
from toolhub.config.permissions_config import Role
from toolhub.modules.auth.schemas import LoginRequest
from toolhub.modules.auth.service import AuthService
from toolhub.modules.users.schemas import InviteRequest
from toolhub.modules.users.service import UserService
from toolhub.scripts.script_env import load_settings, anon_client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    script_settings = load_settings(
        "supabase_url", "supabase_key", "login_email", "login_password",
        "invite_email", "invite_name", "invite_role"
    )
    try:
        invite = InviteRequest(
            email=script_settings.invite_email,
            name=script_settings.invite_name,
            role=script_settings.invite_role,
        )
    except ValidationError as e:
        logger.error(f"Invalid invitation: {e}")
        sys.exit(1)

    supabase = anon_client(script_settings)
    users = UserService(supabase)
    try:
        token = AuthService(supabase).login(
            LoginRequest(email=script_settings.login_email, password=script_settings.login_password)
        )
        inviter = users.get_user_by_id(token.user_id)
        if inviter.role is not Role.ADMIN:
            logger.error(f"{inviter.email} is {inviter.role.value}; only Admins can send invitations")
            sys.exit(1)
        response = users.invite_user(invite, token.access_token)
    except HTTPException as e:
        logger.error(f"Invitation failed ({e.status_code}): {e.detail}")
        sys.exit(1)

    logger.info(f"{response.message}: {response.email} (user id {response.user_id})")


if __name__ == "__main__":
    main()
