"""
SQLAlchemy engine and session factory.

Usage:
    from db.engine import SessionLocal

    with SessionLocal() as db, db.begin():
        record = db.execute(select(EmailVerification)).scalars().first()
"""

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import Config


def _engine_options(url: str) -> dict[str, Any]:
    # SQLite (local development) has no server-side pool to size
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "echo": Config.DB_ECHO}
    return {
        "pool_pre_ping": True,  # Verify connections before use
        "pool_size": Config.DB_POOL_SIZE,
        "max_overflow": 20,
        "echo": Config.DB_ECHO,
    }


engine = create_engine(Config.DATABASE_URL, **_engine_options(Config.DATABASE_URL))

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Base class for all models
Base = declarative_base()


def get_engine() -> Engine:
    """Get the SQLAlchemy engine."""
    return engine
