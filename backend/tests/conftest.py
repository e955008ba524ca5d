from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlmodel import Session

from querystore.api.deps import get_registry
from querystore.core.db import init_db
from querystore.core.pool import DatabaseRegistry
from querystore.main import app

TENANT_ROWS: dict[str, list[dict]] = {
    "d1": [
        {"id": 1, "name": "alice", "created": "2024-01-05"},
        {"id": 2, "name": "bob", "created": "2024-02-10"},
        {"id": 3, "name": "carol", "created": "2024-03-15"},
    ],
    "d2": [
        {"id": 1, "name": "dave", "created": "2024-01-20"},
    ],
}


def _seed_tenant(path: Path, name: str) -> str:
    url = f"sqlite:///{path}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(
            text("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, created TEXT)")
        )
        conn.execute(
            text("INSERT INTO users (id, name, created) VALUES (:id, :name, :created)"),
            TENANT_ROWS[name],
        )
        conn.execute(text("CREATE TABLE t (col TEXT)"))
        conn.execute(text("INSERT INTO t (col) VALUES (:col)"), [{"col": "abc"}, {"col": name}])
    engine.dispose()
    return url


@pytest.fixture
def tenant_urls(tmp_path: Path) -> dict[str, str]:
    """Two SQLite tenant databases, ``d1`` and ``d2``, seeded with users and t."""
    return {name: _seed_tenant(tmp_path / f"{name}.db", name) for name in TENANT_ROWS}


@pytest.fixture
def registry(tmp_path: Path, tenant_urls: dict[str, str]) -> Generator[DatabaseRegistry, None, None]:
    reg = DatabaseRegistry(f"sqlite:///{tmp_path / 'store.db'}", tenant_urls)
    init_db(reg.store_engine)
    yield reg
    reg.dispose()


@pytest.fixture
def db(registry: DatabaseRegistry) -> Generator[Session, None, None]:
    with Session(registry.store_engine) as session:
        yield session


@pytest.fixture
def client(registry: DatabaseRegistry) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_registry] = lambda: registry
    # Not used as a context manager: the lifespan (settings-based registry) is skipped.
    yield TestClient(app)
    app.dependency_overrides.clear()
