"""
Configuration module for the matchmaking service.

Loads environment variables and provides configuration singletons.
Uses pydantic for validation.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables.

    All values come from .env file or system environment.
    Type hints provide validation (pydantic converts types automatically).
    """

    # ============================================================
    # STORAGE CONFIGURATION
    # ============================================================
    STORE_BACKEND: Literal["firestore", "memory"] = "firestore"
    """Where profiles and swipes live. 'memory' is for local dev and tests."""

    FIREBASE_PROJECT_ID: Optional[str] = None
    """Firebase project ID. Required when STORE_BACKEND=firestore."""

    GOOGLE_APPLICATION_CREDENTIALS: str = "/config/serviceAccountKey.json"
    """Path to Firebase service account JSON file."""

    SEED_PROFILES: int = 0
    """Number of demo profiles generated at startup (memory backend only)."""

    # ============================================================
    # MATCHING CONFIGURATION
    # ============================================================
    POPULARITY_THRESHOLD: int = 50
    """A profile is 'popular' once its like count exceeds this value."""

    DEFAULT_PAGE_SIZE: int = 20
    """Page size used when the caller does not pass one."""

    MAX_PAGE_SIZE: int = 100
    """Upper bound for page_size on every listing."""

    # ============================================================
    # NOTIFICATION CONFIGURATION
    # ============================================================
    NOTIFICATION_WEBHOOK_URL: Optional[str] = None
    """Endpoint that delivers admin emails. Unset = log notifications only."""

    ADMIN_EMAIL: Optional[str] = None
    """Recipient of popular-profile alerts. Unset = alerts are not delivered."""

    NOTIFICATION_WEBHOOK_TOKEN: Optional[str] = None
    """Bearer token for the mail gateway. Never the inbound SERVICE_TOKEN."""

    NOTIFICATION_TIMEOUT: float = 10.0
    """Seconds to wait for the notification webhook."""

    NOTIFICATION_WORKERS: int = 2
    """Background threads used to deliver notifications."""

    # ============================================================
    # LANGSMITH CONFIGURATION (OPTIONAL - FOR DEBUGGING)
    # ============================================================
    LANGSMITH_API_KEY: Optional[str] = None
    """LangSmith API key for tracing graphs. Leave empty if not using."""

    LANGSMITH_ENABLED: bool = False
    """Enable LangSmith tracing. Set to True only if LANGSMITH_API_KEY is set."""

    # ============================================================
    # SECURITY CONFIGURATION
    # ============================================================
    SERVICE_TOKEN: str = ""
    """Shared secret for authenticating requests from the API gateway."""

    # ============================================================
    # SERVER CONFIGURATION
    # ============================================================
    PORT: int = 8000
    """Port to run FastAPI server on. Default: 8000."""

    HOST: str = "0.0.0.0"
    """Host to bind to. 0.0.0.0 = accessible from network."""

    DEBUG: bool = False
    """Enable debug logging. Set True for development, False for production."""

    # Unknown env vars are ignored; names are case-sensitive.
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# ============================================================
# SINGLETON INSTANCE
# ============================================================
# Load config once at startup, reuse throughout app
config = Config()


# ============================================================
# VALIDATION AT STARTUP
# ============================================================
def validate_config() -> dict:
    """
    Validate that required config values are set.

    Called at app startup to fail fast if config is incomplete.

    Returns:
        dict: Status of each configured concern

    Raises:
        ValueError: If required config is missing or inconsistent
    """
    errors = []

    if config.STORE_BACKEND == "firestore" and not config.FIREBASE_PROJECT_ID:
        errors.append("FIREBASE_PROJECT_ID is required when STORE_BACKEND=firestore")

    if config.POPULARITY_THRESHOLD < 0:
        errors.append("POPULARITY_THRESHOLD must be >= 0")

    if config.MAX_PAGE_SIZE < 1:
        errors.append("MAX_PAGE_SIZE must be >= 1")
    elif not 1 <= config.DEFAULT_PAGE_SIZE <= config.MAX_PAGE_SIZE:
        errors.append("DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE")

    # If LangSmith enabled, must have API key
    if config.LANGSMITH_ENABLED and not config.LANGSMITH_API_KEY:
        errors.append("LANGSMITH_ENABLED=True but LANGSMITH_API_KEY not set")

    if errors:
        raise ValueError("Configuration errors:\n" + "\n".join([f"  - {e}" for e in errors]))

    return {
        "store": f"✓ {config.STORE_BACKEND}",
        "firebase": "✓ Configured" if config.FIREBASE_PROJECT_ID else "✗ Not set",
        "notifications": "✓ Webhook" if config.NOTIFICATION_WEBHOOK_URL else "✗ Log only",
        "admin_email": "✓ Configured" if config.ADMIN_EMAIL else "✗ Not set",
        "service_token": "✓ Required" if config.SERVICE_TOKEN else "✗ Open (no SERVICE_TOKEN)",
        "langsmith": "✓ Configured" if config.LANGSMITH_ENABLED else "✗ Disabled",
    }


if __name__ == "__main__":
    # python -m matchmaker.config
    import sys

    try:
        status = validate_config()
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    width = max(len(key) for key in status)
    for key, value in status.items():
        print(f"{key.ljust(width)}  {value}")
