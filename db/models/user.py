"""
User model.

Only the columns the verification flow reads live here; account
management owns the rest of the table.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime

from db.engine import Base


class User(Base):
    """Registered account, looked up by email."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
