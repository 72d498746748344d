"""Verification configuration management."""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from pathlib import Path

# Load .env file before reading config
try:
    from dotenv import load_dotenv

    # Try loading from project root
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        load_dotenv(override=True)
except ImportError:
    pass


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


_DEFAULT_RATE_LIMIT_SECRET = secrets.token_urlsafe(32)


@dataclass(frozen=True)
class VerificationConfig:
    """Configuration values for email verification flows.

    Defaults come from the environment; components receive an instance so
    tests can build their own with overrides.
    """

    AUTH_CODE_EXPIRATION_MILLIS: int = int(os.getenv("AUTH_CODE_EXPIRATION_MILLIS", "300000"))
    CODE_ENCRYPTION_KEY: str | None = os.getenv("CODE_ENCRYPTION_KEY")
    CODE_ENCRYPTION_METHOD: str = os.getenv("CODE_ENCRYPTION_METHOD", "A256GCM")
    # Source behaviour lets a confirmed, unexpired record be confirmed again
    ALLOW_RECONFIRMATION: bool = _parse_bool(os.getenv("ALLOW_RECONFIRMATION"), True)

    REQUEST_COUNT_COOKIE_NAME: str = os.getenv("REQUEST_COUNT_COOKIE_NAME", "requestCount")
    MAX_REQUESTS: int = int(os.getenv("MAX_REQUESTS", "5"))
    REQUEST_COUNT_WINDOW_MINUTES: int = int(os.getenv("REQUEST_COUNT_WINDOW_MINUTES", "30"))
    RATE_LIMIT_SECRET: str = os.getenv("RATE_LIMIT_SECRET", _DEFAULT_RATE_LIMIT_SECRET)
    RATE_LIMIT_ALGORITHM: str = os.getenv("RATE_LIMIT_ALGORITHM", "HS256")

    COOKIE_SECURE: bool = _parse_bool(os.getenv("COOKIE_SECURE"), False)
    COOKIE_HTTP_ONLY: bool = _parse_bool(os.getenv("COOKIE_HTTP_ONLY"), True)
    COOKIE_SAMESITE: str = os.getenv("COOKIE_SAME_SITE", "lax")
    COOKIE_DOMAIN: str | None = os.getenv("COOKIE_DOMAIN")

    EMAIL_PROVIDER: str = os.getenv("EMAIL_PROVIDER", "console")
    EMAIL_FROM_NAME: str = os.getenv("EMAIL_FROM_NAME", "4Q")
    EMAIL_FROM_ADDRESS: str = os.getenv("EMAIL_FROM_ADDRESS", "no-reply@example.com")
    EMAIL_SUBJECT: str = os.getenv("EMAIL_SUBJECT", "Your email verification code")
    RESEND_API_KEY: str | None = os.getenv("RESEND_API_KEY")
    AWS_SES_REGION: str = os.getenv("AWS_SES_REGION", "ap-southeast-2")

    # Verification store: "postgres" (production) or "memory" (testing)
    VERIFICATION_STORE: str = os.getenv("VERIFICATION_STORE", "postgres")

    SENTRY_DSN: str | None = os.getenv("SENTRY_DSN")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "dev")

    @property
    def request_count_max_age(self) -> int:
        return self.REQUEST_COUNT_WINDOW_MINUTES * 60

    @property
    def email_sender_address(self) -> str:
        return f"{self.EMAIL_FROM_NAME} <{self.EMAIL_FROM_ADDRESS}>"
