"""Cookie-carried resend rate limiter."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from verification.config import VerificationConfig
from verification.exceptions import TooManyRequestsError
from verification.records import RateLimitTicket

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CookieRateLimiter:
    """
    Stateless resend counter.

    The count lives in a signed, expiring token that the client returns on
    every request. Unreadable or expired tokens count as no token at all:
    the token only throttles sends, it never authorizes anything.
    """

    def __init__(self, config: VerificationConfig, clock: Callable[[], datetime] = _utcnow) -> None:
        self._config = config
        self._clock = clock

    def consume(self, token: str | None) -> RateLimitTicket:
        previous = self._read_count(token)
        if previous is None:
            count = 1
        elif previous >= self._config.MAX_REQUESTS:
            logger.info(f"[RateLimit] Resend ceiling reached ({previous}/{self._config.MAX_REQUESTS})")
            raise TooManyRequestsError()
        else:
            count = previous + 1

        return RateLimitTicket(
            token=self._issue(count),
            count=count,
            max_age=self._config.request_count_max_age,
        )

    def _issue(self, count: int) -> str:
        now = self._clock()
        expire = now + timedelta(minutes=self._config.REQUEST_COUNT_WINDOW_MINUTES)
        payload = {"count": count, "iat": now, "exp": expire}
        return jwt.encode(payload, self._config.RATE_LIMIT_SECRET, algorithm=self._config.RATE_LIMIT_ALGORITHM)

    def _read_count(self, token: str | None) -> int | None:
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._config.RATE_LIMIT_SECRET,
                algorithms=[self._config.RATE_LIMIT_ALGORITHM],
            )
        except JWTError as exc:
            logger.debug(f"[RateLimit] Ignoring unreadable request counter: {exc}")
            return None

        count = payload.get("count")
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            logger.debug("[RateLimit] Ignoring request counter without a valid count")
            return None
        return count
