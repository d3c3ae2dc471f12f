from __future__ import annotations

from sqlalchemy import Boolean, Column, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped

from .base import Base, TimestampMixin


class GatewayBackend(TimestampMixin, Base):
    """
    上游 gRPC 服务节点。

    name 创建后不可修改，作为对外查找主键；删除为软删除（enabled=false），
    行记录永远保留，路由的外键引用因此不会悬空。
    """

    __tablename__ = "backends"
    __table_args__ = (UniqueConstraint("name", name="uq_backends_name"),)

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = Column(String(100), nullable=False)
    addr: Mapped[str] = Column(String(255), nullable=False, doc="host:port")
    description: Mapped[str | None] = Column(Text, nullable=True)
    enabled: Mapped[bool] = Column(
        Boolean,
        nullable=False,
        server_default=text("true"),
        default=True,
    )


__all__ = ["GatewayBackend"]
