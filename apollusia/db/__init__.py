"""Database package."""
from apollusia.db.session import engine, SessionLocal, get_db
from apollusia.db.base import Base

__all__ = ["engine", "SessionLocal", "get_db", "Base"]
