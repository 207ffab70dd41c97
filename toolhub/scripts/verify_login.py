"""
Sign in as a user and fetch their profile with that session.
Useful for checking credentials and row level security after seeding.

    LOGIN_EMAIL=... LOGIN_PASSWORD=... python -m toolhub.scripts.verify_login
"""

import sys
import logging
from fastapi import HTTPException
from toolhub.modules.auth.schemas import LoginRequest
from toolhub.modules.auth.service import AuthService
from toolhub.modules.users.service import UserService
from toolhub.scripts.script_env import load_settings, anon_client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    script_settings = load_settings("supabase_url", "supabase_key", "login_email", "login_password")
    supabase = anon_client(script_settings)

    try:
        token = AuthService(supabase).login(
            LoginRequest(email=script_settings.login_email, password=script_settings.login_password)
        )
        profile = UserService(supabase).get_user_by_id(token.user_id)
    except HTTPException as e:
        logger.error(f"Login check failed ({e.status_code}): {e.detail}")
        sys.exit(1)

    logger.info(f"Signed in as {token.email} ({token.user_id})")
    print(f"Name: {profile.name}")
    print(f"Role: {profile.role.value}")
    print(f"Must change password: {profile.must_change_password}")


if __name__ == "__main__":
    main()
