from __future__ import annotations

from fastapi import Header

from .db import get_engine
from .repositories import ConfigStore, SqlAlchemyConfigStore

_store: SqlAlchemyConfigStore | None = None


def get_config_store() -> ConfigStore:
    """
    FastAPI dependency that provides the process-wide config store.

    The store owns the pooled engine; callers never see the raw connection
    handle. Tests override this dependency with their own store.
    """
    global _store
    if _store is None:
        _store = SqlAlchemyConfigStore(get_engine())
    return _store


def close_config_store() -> None:
    global _store
    if _store is not None:
        _store.close()
        _store = None


def get_operator(x_operator: str | None = Header(default=None)) -> str | None:
    """Operator identity for the audit trail; best-effort, empty means unknown."""
    if x_operator is None:
        return None
    return x_operator.strip() or None


__all__ = ["close_config_store", "get_config_store", "get_operator"]
