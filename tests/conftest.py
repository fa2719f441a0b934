"""Shared test fixtures and configuration."""
import os
import uuid

# Point the application at SQLite before anything imports the engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./polly-test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_store
from app.core.rate_limit import limiter
from app.core.security import create_user_token
from app.db import Base, create_db_engine
from app.main import app
from app.store import MemoryPollStore, SqlPollStore


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    if "rate_limit" in request.keywords:
        # Start from a clean window and leave one behind
        limiter.reset()
        yield
        limiter.reset()
    else:
        limiter.enabled = False
        yield
        limiter.enabled = True


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite database file for each test.

    A file rather than :memory: so that threadpool sessions share the data.
    """
    engine = create_db_engine(f"sqlite:///{tmp_path / 'polly.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def sql_store(db_engine):
    """SqlPollStore over the per-test database."""
    session_factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=db_engine)
    return SqlPollStore(session_factory, timeout=5.0)


@pytest.fixture(scope="function")
def memory_store():
    return MemoryPollStore()


@pytest.fixture(scope="function")
def client(sql_store):
    """Create a test client backed by the per-test database."""
    app.dependency_overrides[get_store] = lambda: sql_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def other_user_id():
    return uuid.uuid4()


@pytest.fixture
def auth_headers(user_id):
    """Bearer header for ``user_id``."""
    return {"Authorization": f"Bearer {create_user_token(user_id)}"}


@pytest.fixture
def other_auth_headers(other_user_id):
    return {"Authorization": f"Bearer {create_user_token(other_user_id)}"}
