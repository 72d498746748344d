"""PostgreSQL verification stores using SQLAlchemy."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.engine import SessionLocal
from db.models.user import User
from db.models.verification import EmailVerification
from verification.records import VerificationRecord


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_record(row: EmailVerification) -> VerificationRecord:
    return VerificationRecord(
        id=row.id,
        email=row.email,
        encrypted_code=row.secret_code,
        created_at=_as_utc(row.created_at),
        sent_at=_as_utc(row.sent_at),
        confirmed=bool(row.confirmation),
        confirmed_at=_as_utc(row.confirmed_at),
    )


class _PostgresVerificationUnit:
    """Store operations inside one session and transaction."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def _select(self, email: str, for_update: bool = False) -> EmailVerification | None:
        stmt = select(EmailVerification).where(EmailVerification.email == email.lower())
        if for_update:
            stmt = stmt.with_for_update()
        return self._db.execute(stmt).scalar_one_or_none()

    async def find_by_email(self, email: str, for_update: bool = False) -> VerificationRecord | None:
        row = self._select(email, for_update=for_update)
        if not row:
            return None
        return _to_record(row)

    async def save(self, record: VerificationRecord) -> VerificationRecord:
        # Keyed by email so a resend overwrites the existing row
        row = self._select(record.email)
        if row is None:
            row = EmailVerification(email=record.email.lower())
            self._db.add(row)
        row.secret_code = record.encrypted_code
        row.created_at = record.created_at
        row.sent_at = record.sent_at
        row.confirmation = record.confirmed
        row.confirmed_at = record.confirmed_at
        self._db.flush()
        return _to_record(row)


class PostgresVerificationStore:
    """Verification record store backed by PostgreSQL."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    async def find_by_email(self, email: str) -> VerificationRecord | None:
        async with self.transaction() as unit:
            return await unit.find_by_email(email)

    async def save(self, record: VerificationRecord) -> VerificationRecord:
        async with self.transaction() as unit:
            return await unit.save(record)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_PostgresVerificationUnit]:
        with self._session_factory() as db, db.begin():
            yield _PostgresVerificationUnit(db)


class PostgresUserStore:
    """Account lookups against the users table."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    async def exists_by_email(self, email: str) -> bool:
        with self._session_factory() as db:
            user_id = db.execute(
                select(User.id).where(User.email == email.lower()).limit(1)
            ).scalar_one_or_none()
            return user_id is not None
