"""Database session management."""
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def create_db_engine(database_url: str, statement_timeout: Optional[float] = None) -> Engine:
    """
    Create an engine; pool sizing only applies to server databases.

    ``statement_timeout`` (seconds, default STORE_TIMEOUT_SECONDS) bounds work
    on the database side: PostgreSQL cancels longer statements and SQLite
    stops waiting for a locked database.
    """
    if statement_timeout is None:
        statement_timeout = settings.STORE_TIMEOUT_SECONDS

    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": statement_timeout},
            echo=False,
        )

    connect_args = {}
    if database_url.startswith("postgresql"):
        connect_args["options"] = f"-c statement_timeout={int(statement_timeout * 1000)}"

    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,        # Configurable via DB_POOL_SIZE env var
        max_overflow=settings.DB_MAX_OVERFLOW    # Configurable via DB_MAX_OVERFLOW env var
    )


DATABASE_URL = settings.get_database_url()

engine = create_db_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
