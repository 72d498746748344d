"""
Database module for the verification service.

Provides SQLAlchemy models and the engine/session factory used by the SQL stores.
"""

from db.engine import get_engine, SessionLocal, Base

__all__ = ["get_engine", "SessionLocal", "Base"]
