"""
Shared configuration for the administrative scripts.
Every input comes from the environment (or .env); nothing is hard-coded.
"""

import sys
import logging
from supabase import create_client, Client, ClientOptions
from toolhub.config import ScriptSettings

logger = logging.getLogger(__name__)


def load_settings(*required: str) -> ScriptSettings:
    """Load script settings and exit with status 1 if any required value is missing."""
    script_settings = ScriptSettings()
    missing = [name.upper() for name in required if not getattr(script_settings, name)]
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        sys.exit(1)
    return script_settings


def anon_client(script_settings: ScriptSettings) -> Client:
    return create_client(script_settings.supabase_url, script_settings.supabase_key)


def service_client(script_settings: ScriptSettings) -> Client:
    return create_client(
        script_settings.supabase_url,
        script_settings.supabase_service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
