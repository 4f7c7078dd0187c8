"""Application configuration."""

import os
from functools import lru_cache


def read_secret(name: str, default: str = "") -> str:
    """Read secret from Docker secrets or environment variable."""
    secret_path = f"/run/secrets/{name}"
    if os.path.exists(secret_path):
        with open(secret_path) as f:
            return f.read().strip()
    return os.getenv(name.upper(), default)


class Settings:
    """Application settings."""

    # Environment
    TESTING: bool = os.getenv("TESTING", "").lower() in ("1", "true", "yes")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Webhook source (the only accepted /webhook/{provider} path segment)
    WEBHOOK_PROVIDER: str = os.getenv("WEBHOOK_PROVIDER", "polar")
    POLAR_WEBHOOK_SECRET: str = read_secret("polar_webhook_secret", "")

    # License signing
    ED25519_PRIVATE_KEY: str = read_secret("ed25519_private_key", "")
    LICENSE_TIER: str = os.getenv("LICENSE_TIER", "pro")

    # Email delivery (Resend)
    RESEND_API_KEY: str = read_secret("resend_api_key", "")
    RESEND_API_URL: str = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "MarkRight <license@complitask.com>")
    EMAIL_SUBJECT: str = os.getenv("EMAIL_SUBJECT", "Your MarkRight Pro License Key")
    EMAIL_TIMEOUT_SECONDS: int = int(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))


@lru_cache
def get_settings() -> Settings:
    return Settings()
