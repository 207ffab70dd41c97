"""
Show a user's role and what it allows, or list all users when TARGET_EMAIL is unset.

    TARGET_EMAIL=someone@example.com python -m toolhub.scripts.check_user_role
"""

import sys
import logging
from typing import List
from toolhub.config.permissions_config import ROLE_CAPABILITIES, Role, parse_role
from toolhub.modules.users.service import UserService
from toolhub.scripts.script_env import load_settings, anon_client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def role_analysis(role_value: str) -> List[str]:
    """Capability lines for a stored role value. Unknown roles are reported, not guessed."""
    try:
        role = parse_role(role_value)
    except ValueError:
        return [f"Unknown role '{role_value}'. Expected one of: {', '.join(r.value for r in Role)}"]
    return [f"Role: {role.value}"] + [f"  - {line}" for line in ROLE_CAPABILITIES[role]]


def main():
    script_settings = load_settings("supabase_url", "supabase_key")
    service = UserService(anon_client(script_settings))

    try:
        if not script_settings.target_email:
            users = service.list_users(limit=1000)
            logger.info(f"Total users: {len(users)}")
            for user in users:
                print(f"{user.email}  {user.name}  {user.role.value}")
            return

        user = service.get_user_by_email(script_settings.target_email)
    except Exception as e:
        logger.error(f"Error reading users: {e}")
        sys.exit(1)

    if user is None:
        logger.error(f"No user found with email {script_settings.target_email}")
        sys.exit(1)

    print(f"User: {user.name} <{user.email}> ({user.id})")
    for line in role_analysis(user.role.value):
        print(line)


if __name__ == "__main__":
    main()
