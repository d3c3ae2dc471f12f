from __future__ import annotations

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped

from .base import Base, TimestampMixin

DEFAULT_TIMEOUT_MS = 5000


class GatewayRoute(TimestampMixin, Base):
    """HTTP method + pattern 到后端 RPC 方法的映射。"""

    __tablename__ = "routes"
    __table_args__ = (Index("ix_routes_method_pattern", "http_method", "http_pattern"),)

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    http_method: Mapped[str] = Column(String(16), nullable=False)
    http_pattern: Mapped[str] = Column(String(512), nullable=False)
    backend_name: Mapped[str] = Column(
        String(100),
        ForeignKey("backends.name"),
        nullable=False,
        index=True,
    )
    backend_service: Mapped[str] = Column(String(255), nullable=False)
    backend_method: Mapped[str] = Column(String(255), nullable=False)
    timeout_ms: Mapped[int] = Column(
        Integer,
        nullable=False,
        server_default=text(str(DEFAULT_TIMEOUT_MS)),
        default=DEFAULT_TIMEOUT_MS,
    )
    description: Mapped[str | None] = Column(Text, nullable=True)
    enabled: Mapped[bool] = Column(
        Boolean,
        nullable=False,
        server_default=text("true"),
        default=True,
    )


__all__ = ["DEFAULT_TIMEOUT_MS", "GatewayRoute"]
