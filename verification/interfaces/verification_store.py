"""Verification store interface."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from verification.records import VerificationRecord


class VerificationUnit(Protocol):
    """Store operations bound to one open transaction."""

    async def find_by_email(self, email: str, for_update: bool = False) -> VerificationRecord | None:
        ...

    async def save(self, record: VerificationRecord) -> VerificationRecord:
        ...


class VerificationStore(Protocol):
    async def find_by_email(self, email: str) -> VerificationRecord | None:
        ...

    async def save(self, record: VerificationRecord) -> VerificationRecord:
        ...

    def transaction(self) -> AbstractAsyncContextManager[VerificationUnit]:
        ...
