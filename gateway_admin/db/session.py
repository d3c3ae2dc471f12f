from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from gateway_admin.settings import settings


def enable_sqlite_foreign_keys(engine: Engine) -> Engine:
    """SQLite 默认不校验外键，每个新连接上打开 PRAGMA foreign_keys。"""

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - trivial
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def build_engine(database_url: str | None = None) -> Engine:
    """Create the pooled engine backing the config store."""

    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        # SQLite 不支持 QueuePool 的尺寸参数
        engine = create_engine(url, future=True, connect_args={"check_same_thread": False})
        return enable_sqlite_foreign_keys(engine)

    # pool_recycle 控制连接寿命，pre_ping 剔除失活连接
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout_seconds,
        pool_recycle=settings.db_pool_recycle_seconds,
        pool_pre_ping=True,
        future=True,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return build_engine()


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit=False 让提交后的实体在会话关闭后依然可读
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


__all__ = ["build_engine", "build_session_factory", "enable_sqlite_foreign_keys", "get_engine"]
