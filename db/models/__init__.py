"""
SQLAlchemy models for the verification database.

All models inherit from db.engine.Base for Alembic migrations.
"""

from db.models.user import User
from db.models.verification import EmailVerification

__all__ = [
    "User",
    "EmailVerification",
]
