"""
Shared pytest configuration.

Puts the project root on sys.path and points settings at an in-memory SQLite
database before any `gateway_admin` module is imported.
"""

import os
import sys
from pathlib import Path

import pytest

# Ensure project root is importable for test modules.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("AUTO_APPLY_DB_MIGRATIONS", "false")

from tests.utils import (  # noqa: E402
    InMemoryConfigStore,
    build_inmemory_engine,
    install_inmemory_store,
)


@pytest.fixture()
def sqlite_store():
    from gateway_admin.repositories import SqlAlchemyConfigStore

    store = SqlAlchemyConfigStore(build_inmemory_engine())
    try:
        yield store
    finally:
        store.close()


@pytest.fixture()
def memory_store() -> InMemoryConfigStore:
    return InMemoryConfigStore()


@pytest.fixture()
def app_with_inmemory_store():
    from gateway_admin.routes import create_app

    app = create_app()
    store = install_inmemory_store(app)
    try:
        yield app, store
    finally:
        app.dependency_overrides.clear()
        store.close()
