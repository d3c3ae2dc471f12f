from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RouteCreateRequest(BaseModel):
    http_method: str = ""
    http_pattern: str = ""
    backend_name: str = ""
    backend_service: str = ""
    backend_method: str = ""
    timeout_ms: int | None = Field(default=None, description="<=0 或缺省时使用 5000")
    description: str | None = None
    enabled: bool = True


class RouteUpdateRequest(BaseModel):
    http_method: str | None = None
    http_pattern: str | None = None
    backend_name: str | None = None
    backend_service: str | None = None
    backend_method: str | None = None
    timeout_ms: int | None = None
    description: str | None = None
    enabled: bool | None = None


class RouteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    http_method: str
    http_pattern: str
    backend_name: str
    backend_service: str
    backend_method: str
    timeout_ms: int
    description: str | None = None
    enabled: bool
    created_at: datetime
    updated_at: datetime


__all__ = ["RouteCreateRequest", "RouteResponse", "RouteUpdateRequest"]
