"""Database package."""
from app.db.session import engine, SessionLocal, create_db_engine
from app.db.base import Base

__all__ = ["engine", "SessionLocal", "create_db_engine", "Base"]
