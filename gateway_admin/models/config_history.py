from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped

from .base import Base, utcnow

OPERATOR_MAX_LENGTH = 128


class ConfigHistory(Base):
    """
    配置变更审计记录（append-only）。

    old_value / new_value 保存变更前后实体的 JSON 快照；CREATE 没有 old_value，
    DELETE 没有 new_value。config_id 仅在无法确定目标 id 时为空。
    """

    __tablename__ = "config_history"
    __table_args__ = (
        Index("ix_config_history_type_id", "config_type", "config_id"),
    )

    id: Mapped[int] = Column(Integer, primary_key=True, autoincrement=True)
    config_type: Mapped[str] = Column(String(16), nullable=False)
    config_id: Mapped[int | None] = Column(Integer, nullable=True)
    operation: Mapped[str] = Column(String(16), nullable=False)
    old_value: Mapped[str | None] = Column(Text, nullable=True)
    new_value: Mapped[str | None] = Column(Text, nullable=True)
    operator: Mapped[str | None] = Column(String(OPERATOR_MAX_LENGTH), nullable=True)
    created_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )


__all__ = ["ConfigHistory", "OPERATOR_MAX_LENGTH"]
