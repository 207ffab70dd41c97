from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon key
    supabase_service_role_key: Optional[str] = None  # Required for admin operations (user creation, password reset)

    # Notifications
    notification_fetch_limit: int = 50
    notification_display_limit: int = 5  # bell menu shows this many most recent

    # Edge functions
    invite_function_name: str = "invite-user"

    # MFA
    mfa_issuer: str = "ApplyWizz ToolHub"  # shown in the authenticator app

    # App
    app_name: str = "toolhub-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


class ScriptSettings(BaseSettings):
    """Inputs for the administrative scripts. Never hard-code these in the scripts."""
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None

    seed_users_file: Optional[str] = None  # JSON list of {email, name, role}
    seed_default_password: Optional[str] = None
    target_email: Optional[str] = None
    login_email: Optional[str] = None
    login_password: Optional[str] = None
    new_password: Optional[str] = None
    invite_email: Optional[str] = None
    invite_name: Optional[str] = None
    invite_role: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
