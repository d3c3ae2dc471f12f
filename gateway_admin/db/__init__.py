from .session import build_engine, build_session_factory, enable_sqlite_foreign_keys, get_engine

__all__ = ["build_engine", "build_session_factory", "enable_sqlite_foreign_keys", "get_engine"]
