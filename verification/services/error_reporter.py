"""Error tracking sinks."""

from __future__ import annotations

import logging
from typing import Any

import sentry_sdk

from verification.config import VerificationConfig

logger = logging.getLogger(__name__)


class LoggingErrorReporter:
    """Used when Sentry is not configured; callers log the failure themselves."""

    def capture_exception(self, exc: BaseException, context: dict[str, Any] | None = None) -> None:
        logger.debug(f"[ErrorReporter] {type(exc).__name__}: {exc} context={context or {}}")


class SentryErrorReporter:
    def capture_exception(self, exc: BaseException, context: dict[str, Any] | None = None) -> None:
        sentry_sdk.capture_exception(exc, extras=context or {})


def init_error_tracking(config: VerificationConfig) -> bool:
    """Initialise Sentry when SENTRY_DSN is set. Returns whether it is active."""
    if not config.SENTRY_DSN:
        logger.info("SENTRY_DSN not set, error tracking uses the log only")
        return False
    sentry_sdk.init(dsn=config.SENTRY_DSN, environment=config.ENVIRONMENT)
    logger.info(f"Sentry error tracking enabled for environment {config.ENVIRONMENT}")
    return True


def build_error_reporter(config: VerificationConfig):
    if config.SENTRY_DSN:
        return SentryErrorReporter()
    return LoggingErrorReporter()
