from __future__ import annotations

import pathlib
import sys

from alembic import context
from alembic.config import Config as AlembicConfig
from sqlalchemy import engine_from_config, pool

BASE_DIR = pathlib.Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))

from gateway_admin.models import Base  # noqa: E402
from gateway_admin.settings import settings  # noqa: E402


target_metadata = Base.metadata


def _configure_alembic() -> AlembicConfig:
    """
    迁移始终连到 settings.database_url；auto_upgrade_database 传入的 URL 优先。
    """
    cfg = context.config
    if not cfg.get_main_option("sqlalchemy.url"):
        cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return cfg


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""

    cfg = _configure_alembic()
    context.configure(
        url=cfg.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""

    cfg = _configure_alembic()
    connectable = engine_from_config(
        cfg.get_section(cfg.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
