"""
Startup schema upgrade for the config tables.

Only Postgres deployments are upgraded automatically; SQLite is used by the
test suite, which builds the schema with ``Base.metadata.create_all``.
"""

from __future__ import annotations

import threading
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy.engine import make_url

from gateway_admin.logging_config import logger
from gateway_admin.settings import settings

PROJECT_ROOT = Path(__file__).resolve().parents[2]

_upgrade_lock = threading.Lock()
_upgraded_urls: set[str] = set()


def should_auto_migrate(database_url: str | None = None) -> bool:
    if not settings.auto_apply_db_migrations:
        return False
    url = make_url(database_url or settings.database_url)
    return url.get_backend_name() == "postgresql"


def build_alembic_config(database_url: str | None = None, project_root: Path = PROJECT_ROOT) -> Config:
    """Alembic config with absolute script/version paths, independent of the cwd."""
    cfg = Config(str(project_root / "alembic.ini"))
    cfg.set_main_option("script_location", str(project_root / "alembic"))
    cfg.set_main_option("version_locations", str(project_root / "alembic" / "versions"))
    cfg.set_main_option("sqlalchemy.url", database_url or settings.database_url)
    return cfg


def head_revision(cfg: Config) -> str | None:
    return ScriptDirectory.from_config(cfg).get_current_head()


def auto_upgrade_database(database_url: str | None = None) -> bool:
    """
    把 config 表结构升级到 head；同一个数据库 URL 在进程内只升级一次。

    返回本次调用是否真正执行了升级。
    """
    url = database_url or settings.database_url
    if not should_auto_migrate(url):
        return False

    with _upgrade_lock:
        if url in _upgraded_urls:
            return False

        if not (PROJECT_ROOT / "alembic.ini").exists():
            logger.warning("alembic.ini not found under %s; skipping schema upgrade", PROJECT_ROOT)
            _upgraded_urls.add(url)
            return False

        cfg = build_alembic_config(url)
        target = head_revision(cfg)
        safe_url = make_url(url).render_as_string(hide_password=True)
        logger.info("Upgrading config schema on %s to %s", safe_url, target)
        try:
            command.upgrade(cfg, "head")
        except Exception:
            logger.exception("Schema upgrade to %s failed on %s", target, safe_url)
            raise
        _upgraded_urls.add(url)
        logger.info("Config schema is at %s", target)
        return True


__all__ = ["auto_upgrade_database", "build_alembic_config", "head_revision", "should_auto_migrate"]
