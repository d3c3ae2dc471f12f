"""Create backends, routes and config_history tables."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_create_config_tables"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "backends",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("addr", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamp_columns(),
        sa.UniqueConstraint("name", name="uq_backends_name"),
    )

    op.create_table(
        "routes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("http_method", sa.String(length=16), nullable=False),
        sa.Column("http_pattern", sa.String(length=512), nullable=False),
        sa.Column(
            "backend_name",
            sa.String(length=100),
            sa.ForeignKey("backends.name"),
            nullable=False,
        ),
        sa.Column("backend_service", sa.String(length=255), nullable=False),
        sa.Column("backend_method", sa.String(length=255), nullable=False),
        sa.Column("timeout_ms", sa.Integer(), nullable=False, server_default=sa.text("5000")),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamp_columns(),
    )
    op.create_index("ix_routes_method_pattern", "routes", ["http_method", "http_pattern"])
    op.create_index("ix_routes_backend_name", "routes", ["backend_name"])

    op.create_table(
        "config_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("config_type", sa.String(length=16), nullable=False),
        sa.Column("config_id", sa.Integer(), nullable=True),
        sa.Column("operation", sa.String(length=16), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("operator", sa.String(length=128), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_config_history_type_id", "config_history", ["config_type", "config_id"])
    op.create_index("ix_config_history_created_at", "config_history", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_config_history_created_at", table_name="config_history")
    op.drop_index("ix_config_history_type_id", table_name="config_history")
    op.drop_table("config_history")

    op.drop_index("ix_routes_backend_name", table_name="routes")
    op.drop_index("ix_routes_method_pattern", table_name="routes")
    op.drop_table("routes")

    op.drop_table("backends")
