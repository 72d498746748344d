"""Verification dependency helpers."""

from __future__ import annotations

from typing import Any

from fastapi import Response

from verification.config import VerificationConfig
from verification.rate_limit import CookieRateLimiter
from verification.records import RateLimitTicket
from verification.security import CodeCipher, StaticKeyProvider
from verification.services.email_service import build_email_sender
from verification.services.error_reporter import build_error_reporter
from verification.services.verification_service import VerificationService
from verification.stores.memory_store import MemoryUserStore, MemoryVerificationStore
from verification.stores.postgres_store import PostgresUserStore, PostgresVerificationStore


_config = VerificationConfig()

_memory_verification_store = MemoryVerificationStore()
_memory_user_store = MemoryUserStore()

_postgres_verification_store: PostgresVerificationStore | None = None
_postgres_user_store: PostgresUserStore | None = None

_email_sender: Any = None
_error_reporter: Any = None


def get_config() -> VerificationConfig:
    return _config


def _get_stores() -> tuple[Any, Any]:
    """Get verification stores based on VERIFICATION_STORE config."""
    if _config.VERIFICATION_STORE == "postgres":
        global _postgres_verification_store, _postgres_user_store
        if _postgres_verification_store is None:
            _postgres_verification_store = PostgresVerificationStore()
            _postgres_user_store = PostgresUserStore()
        return _postgres_verification_store, _postgres_user_store
    # Fallback to memory store for development/testing
    return _memory_verification_store, _memory_user_store


def _get_collaborators() -> tuple[Any, Any]:
    """Email sender and error reporter, built once per process."""
    global _email_sender, _error_reporter
    if _email_sender is None:
        _email_sender = build_email_sender(_config)
        _error_reporter = build_error_reporter(_config)
    return _email_sender, _error_reporter


def get_verification_service() -> VerificationService:
    verifications, users = _get_stores()
    email_sender, error_reporter = _get_collaborators()
    cipher = CodeCipher(
        key_provider=StaticKeyProvider(_config.CODE_ENCRYPTION_KEY),
        error_reporter=error_reporter,
        encryption=_config.CODE_ENCRYPTION_METHOD,
    )
    return VerificationService(
        verification_store=verifications,
        user_store=users,
        email_sender=email_sender,
        cipher=cipher,
        rate_limiter=CookieRateLimiter(_config),
        config=_config,
    )


def set_request_count_cookie(
    response: Response,
    ticket: RateLimitTicket,
    config: VerificationConfig | None = None,
) -> None:
    config = config or _config
    response.set_cookie(
        key=config.REQUEST_COUNT_COOKIE_NAME,
        value=ticket.token,
        max_age=ticket.max_age,
        path="/",
        httponly=config.COOKIE_HTTP_ONLY,
        secure=config.COOKIE_SECURE,
        samesite=config.COOKIE_SAMESITE,
        domain=config.COOKIE_DOMAIN,
    )
