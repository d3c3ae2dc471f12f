from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class ConfigHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    config_type: str
    config_id: int | None = None
    operation: str
    old_value: Any | None = None
    new_value: Any | None = None
    operator: str | None = None
    created_at: datetime

    @field_validator("old_value", "new_value", mode="before")
    @classmethod
    def _decode_snapshot(cls, value: Any) -> Any:
        # 快照以 JSON 文本落库，对外返回解析后的对象
        if isinstance(value, (str, bytes)):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value


class ConfigHistoryPage(BaseModel):
    items: list[ConfigHistoryResponse]
    total: int
    limit: int
    offset: int


__all__ = ["ConfigHistoryPage", "ConfigHistoryResponse"]
