from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BackendCreateRequest(BaseModel):
    name: str = Field(default="", description="后端唯一名称，创建后不可修改")
    addr: str = Field(default="", description="host:port")
    description: str | None = None
    enabled: bool = True


class BackendUpdateRequest(BaseModel):
    """
    部分更新请求：未出现在请求体中的字段保持原值。

    使用 model_dump(exclude_unset=True) 区分“未提供”和“显式设为零值”
    （例如 enabled=false）。name 属于身份字段，即便提供也会被忽略。
    """

    name: str | None = None
    addr: str | None = None
    description: str | None = None
    enabled: bool | None = None


class BackendResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    addr: str
    description: str | None = None
    enabled: bool
    created_at: datetime
    updated_at: datetime


__all__ = ["BackendCreateRequest", "BackendResponse", "BackendUpdateRequest"]
