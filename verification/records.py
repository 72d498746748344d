"""Verification record and rate-limit ticket types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class VerificationRecord:
    """Latest verification code issued to an email address."""

    email: str
    encrypted_code: str
    created_at: datetime
    sent_at: datetime
    confirmed: bool = False
    confirmed_at: datetime | None = None
    id: int | None = None


@dataclass(frozen=True)
class RateLimitTicket:
    """Counter token to hand back to the client after a successful send."""

    token: str
    count: int
    max_age: int
