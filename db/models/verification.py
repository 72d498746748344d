"""
Email verification model.

One row per email address; a resend overwrites the row in place.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    Text,
)

from db.engine import Base


class EmailVerification(Base):
    """Encrypted verification code issued to an email address."""
    __tablename__ = "email_verifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    secret_code = Column(Text, nullable=False)  # JWE ciphertext
    created_at = Column(DateTime(timezone=True), nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=False)
    confirmation = Column(Boolean, nullable=False, default=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<EmailVerification(id={self.id}, email={self.email}, confirmation={self.confirmation})>"
