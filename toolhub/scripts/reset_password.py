"""
Reset a user's password with the service role key.
The user is forced to pick a new password at next login.

    TARGET_EMAIL=... NEW_PASSWORD=... python -m toolhub.scripts.reset_password
"""

import sys
import logging
from fastapi import HTTPException
from toolhub.modules.users.service import UserService
from toolhub.scripts.script_env import load_settings, service_client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    script_settings = load_settings(
        "supabase_url", "supabase_service_role_key", "target_email", "new_password"
    )
    client = service_client(script_settings)
    users = UserService(client, client)

    try:
        user = users.get_user_by_email(script_settings.target_email)
        if user is None:
            logger.error(f"No user found with email {script_settings.target_email}")
            sys.exit(1)
        users.reset_password(user.id, script_settings.new_password)
    except HTTPException as e:
        logger.error(f"Password reset failed ({e.status_code}): {e.detail}")
        sys.exit(1)

    logger.info(f"Password reset for {user.email}; must_change_password is set")


if __name__ == "__main__":
    main()
