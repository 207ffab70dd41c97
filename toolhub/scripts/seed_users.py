"""
Seed Users Script
Creates auth users (email already confirmed) and their profile rows from a JSON file.
Users that already exist are skipped, so the script can be re-run safely.

    SEED_USERS_FILE=users.json SEED_DEFAULT_PASSWORD=... python -m toolhub.scripts.seed_users
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List
from pydantic import ValidationError
from supabase import Client
from toolhub.modules.users.schemas import NewUser
from toolhub.modules.users.service import normalize_email
from toolhub.scripts.script_env import load_settings, service_client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ALREADY_EXISTS_MARKERS = ("already registered", "already been registered", "already exists")


def is_already_exists_error(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in ALREADY_EXISTS_MARKERS)


def load_seed_file(path: str) -> List[Any]:
    entries = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(entries, list):
        raise ValueError(f"{path} must contain a JSON list of users")
    return entries


def create_user(supabase: Client, user: NewUser, password: str) -> str:
    """Create the auth user and its profile row. Returns the new user id."""
    email = normalize_email(user.email)
    response = supabase.auth.admin.create_user({
        "email": email,
        "password": password,
        "email_confirm": True,
        "user_metadata": {"name": user.name, "role": user.role.value},
    })
    user_id = response.user.id
    supabase.table("users").insert({
        "id": user_id,
        "email": email,
        "name": user.name,
        "role": user.role.value,
        "must_change_password": True,
    }).execute()
    return user_id


def seed_users(supabase: Client, entries: List[Any], password: str) -> Dict[str, int]:
    """Process entries one by one; one bad entry never stops the rest."""
    report = {"success": 0, "skipped": 0, "errors": 0, "total": len(entries)}

    for index, entry in enumerate(entries):
        try:
            user = NewUser.model_validate(entry)
        except ValidationError as e:
            logger.error(f"Entry {index} is malformed: {e}")
            report["errors"] += 1
            continue

        try:
            user_id = create_user(supabase, user, password)
            report["success"] += 1
            logger.info(f"Created {user.email} ({user.role.value}) with id {user_id}")
        except Exception as e:
            if is_already_exists_error(e):
                report["skipped"] += 1
                logger.info(f"Skipped {user.email}: already registered")
            else:
                report["errors"] += 1
                logger.error(f"Error creating {user.email}: {e}")

    return report


def main():
    script_settings = load_settings(
        "supabase_url", "supabase_service_role_key", "seed_users_file", "seed_default_password"
    )
    logger.info("Starting user seeding...")
    entries = load_seed_file(script_settings.seed_users_file)
    report = seed_users(service_client(script_settings), entries, script_settings.seed_default_password)
    logger.info(
        f"Seeding completed: {report['success']} created, {report['skipped']} skipped, "
        f"{report['errors']} errors, {report['total']} total"
    )
    return report


if __name__ == "__main__":
    main()
