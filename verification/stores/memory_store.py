"""In-memory verification stores."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace

from verification.records import VerificationRecord


class _MemoryVerificationUnit:
    """Transaction view over the record map; writes apply on commit."""

    def __init__(self, records: dict[str, VerificationRecord], next_id: int) -> None:
        self._records = records
        self._pending: dict[str, VerificationRecord] = {}
        self.next_id = next_id

    async def find_by_email(self, email: str, for_update: bool = False) -> VerificationRecord | None:
        key = email.lower()
        record = self._pending.get(key) or self._records.get(key)
        return replace(record) if record else None

    async def save(self, record: VerificationRecord) -> VerificationRecord:
        key = record.email.lower()
        payload = replace(record, email=key)
        if payload.id is None:
            existing = self._pending.get(key) or self._records.get(key)
            if existing:
                payload.id = existing.id
            else:
                payload.id = self.next_id
                self.next_id += 1
        self._pending[key] = payload
        return replace(payload)

    def commit(self) -> None:
        self._records.update(self._pending)
        self._pending.clear()


class MemoryVerificationStore:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._records: dict[str, VerificationRecord] = {}
        self._next_id = 1

    async def find_by_email(self, email: str) -> VerificationRecord | None:
        async with self.transaction() as unit:
            return await unit.find_by_email(email)

    async def save(self, record: VerificationRecord) -> VerificationRecord:
        async with self.transaction() as unit:
            return await unit.save(record)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_MemoryVerificationUnit]:
        async with self._lock:
            unit = _MemoryVerificationUnit(self._records, self._next_id)
            yield unit
            unit.commit()
            self._next_id = unit.next_id

    def count(self) -> int:
        return len(self._records)


class MemoryUserStore:
    def __init__(self, emails: list[str] | None = None) -> None:
        self._lock = asyncio.Lock()
        self._emails: set[str] = {email.lower() for email in emails or []}

    async def exists_by_email(self, email: str) -> bool:
        async with self._lock:
            return email.lower() in self._emails

    async def add_user(self, email: str) -> None:
        async with self._lock:
            self._emails.add(email.lower())
