# tests/conftest.py

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# must be set before app.db.session / app.backend.core.config are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import create_engine  # noqa: E402

from app.backend.backends.local import LocalBackend  # noqa: E402
from app.backend.backends.sql import SqlBackend  # noqa: E402
from app.db.local_store import LocalKeyValueStore  # noqa: E402
from app.db.session import create_all_tables  # noqa: E402


@pytest.fixture()
def sql_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def kv_store() -> LocalKeyValueStore:
    return LocalKeyValueStore(None, namespace="test")


@pytest.fixture(params=["sql", "local"])
def backend(request, sql_engine, kv_store):
    """Every store-level test runs against both persistence backends."""
    if request.param == "sql":
        return SqlBackend(sql_engine)
    return LocalBackend(kv_store)


@pytest.fixture()
def api_client(backend):
    from fastapi.testclient import TestClient

    from app.backend.dependencies.stores import get_backend
    from app.backend.main import app

    app.dependency_overrides[get_backend] = lambda: backend
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
