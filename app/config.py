"""
Application configuration.

All settings are loaded from environment variables (or a local .env file).
The session secret has no default: if it is missing, the app fails to start
with a clear error. The admin token is optional on purpose: when it is unset
the listing endpoint reports a misconfiguration instead of refusing to boot.

Usage:
    from app.config import settings
    print(settings.redis_url)
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Session / Security ---
    session_secret_key: str = Field(description="Secret key for encrypting session cookies")
    session_max_age_seconds: int = Field(
        default=3600,
        description="Idle time after which an in-memory letter session is dropped",
    )

    # --- App ---
    app_name: str = Field(default="Legacy Letter")
    app_env: Literal["development", "staging", "production"] = Field(default="development")
    log_level: str = Field(default="info")

    # --- Email intent service ---
    admin_token: Optional[str] = Field(
        default=None,
        description="Shared secret required by GET /api/email-intent/list",
    )
    redis_url: str = Field(default="redis://localhost:6379/0")
    email_intent_store: Literal["redis", "memory"] = Field(
        default="redis",
        description="Backend for the email intent set. 'memory' is for local runs and tests.",
    )
    email_intent_set_key: str = Field(default="legacy:email_intents:set")

    # --- Analytics ---
    tracking_url: str = Field(
        default="",
        description="Collection endpoint for the analytics beacon. Empty disables tracking.",
    )

    # --- Letter form ---
    prompt_config_path: Optional[str] = Field(
        default=None,
        description="Optional YAML file replacing the built-in prompt set",
    )
    details_step: Literal["none", "leading", "trailing"] = Field(
        default="none",
        description="Where the optional 'about you' step appears, if at all",
    )
    show_preview: bool = Field(default=True)
    letter_timezone: str = Field(default="UTC")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
