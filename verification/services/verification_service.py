"""Core email verification service."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from verification.config import VerificationConfig
from verification.exceptions import DuplicateEmailError, InvalidEmailError
from verification.interfaces.email_sender import EmailSender
from verification.interfaces.user_store import UserStore
from verification.interfaces.verification_store import VerificationStore
from verification.rate_limit import CookieRateLimiter
from verification.records import RateLimitTicket, VerificationRecord
from verification.security import CodeCipher, generate_verification_code

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationService:
    """
    Issues and confirms email verification codes.

    A record moves Sent -> Confirmed when the right code arrives inside the
    expiration window. Issuing a new code for the same email always puts the
    record back to Sent, whatever state it was in.
    """

    def __init__(
        self,
        verification_store: VerificationStore,
        user_store: UserStore,
        email_sender: EmailSender,
        cipher: CodeCipher,
        rate_limiter: CookieRateLimiter,
        config: VerificationConfig,
        clock: Callable[[], datetime] = _utcnow,
        code_generator: Callable[[], str] = generate_verification_code,
        log: logging.Logger | None = None,
    ) -> None:
        self._verifications = verification_store
        self._users = user_store
        self._email_sender = email_sender
        self._cipher = cipher
        self._rate_limiter = rate_limiter
        self._config = config
        self._clock = clock
        self._generate_code = code_generator
        self._logger = log or logger

    def _is_expired(self, created_at: datetime, now: datetime) -> bool:
        return (now - created_at) > timedelta(milliseconds=self._config.AUTH_CODE_EXPIRATION_MILLIS)

    async def issue_and_send(self, email: str, request_count_token: str | None = None) -> RateLimitTicket:
        """Send a fresh code to ``email``; returns the next request counter."""
        ticket = self._rate_limiter.consume(request_count_token)

        code = self._generate_code()
        encrypted_code = self._cipher.encrypt(code)
        now = self._clock()

        async with self._verifications.transaction() as unit:
            record = await unit.find_by_email(email, for_update=True)
            if record:
                record.encrypted_code = encrypted_code
                record.created_at = now
                record.sent_at = now
                record.confirmed = False
                record.confirmed_at = None
            else:
                record = VerificationRecord(
                    email=email,
                    encrypted_code=encrypted_code,
                    created_at=now,
                    sent_at=now,
                )
            await unit.save(record)

        # Record stays persisted even if delivery fails
        await self._email_sender.send(
            to=email,
            subject=self._config.EMAIL_SUBJECT,
            body=f"Your email verification code is: {code}",
            sender=self._config.email_sender_address,
        )
        self._logger.info(f"[Verification] Code sent to {email} (request {ticket.count}/{self._config.MAX_REQUESTS})")
        return ticket

    async def verify_for_signup(self, email: str, code: str) -> bool:
        """Check a code for an email that must not have an account yet."""
        if await self._users.exists_by_email(email):
            raise DuplicateEmailError()
        return await self.confirm_code(email, code)

    async def verify_for_reset(self, email: str, code: str) -> bool:
        """Check a code for an email that must already have an account."""
        if not await self._users.exists_by_email(email):
            raise InvalidEmailError()
        return await self.confirm_code(email, code)

    async def confirm_code(self, email: str, code: str) -> bool:
        async with self._verifications.transaction() as unit:
            record = await unit.find_by_email(email, for_update=True)
            if not record:
                self._logger.info(f"[Verification] No code issued for {email}")
                return False

            now = self._clock()
            if self._is_expired(record.created_at, now):
                self._logger.info(f"[Verification] Code for {email} expired")
                return False

            if record.confirmed and not self._config.ALLOW_RECONFIRMATION:
                self._logger.info(f"[Verification] Code for {email} already confirmed")
                return False

            # CryptoError propagates: a broken ciphertext is not a wrong code
            stored_code = self._cipher.decrypt(record.encrypted_code)
            if not secrets.compare_digest(stored_code.encode("utf-8"), code.encode("utf-8")):
                self._logger.info(f"[Verification] Wrong code submitted for {email}")
                return False

            record.confirmed = True
            record.confirmed_at = now
            await unit.save(record)

        self._logger.info(f"[Verification] Email {email} confirmed")
        return True
