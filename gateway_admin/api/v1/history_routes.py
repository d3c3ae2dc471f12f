from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from gateway_admin.deps import get_config_store
from gateway_admin.repositories import ConfigStore
from gateway_admin.schemas import ConfigHistoryPage
from gateway_admin.services import history_service

router = APIRouter(prefix="/api/v1", tags=["history"])


@router.get("/history", response_model=ConfigHistoryPage)
def list_history(
    config_type: str | None = Query(default=None, description="backend / route"),
    config_id: int | None = Query(default=None, ge=0),
    limit: str | None = Query(default=None, description="默认 50；无法解析或超出 1..100 时回退为 50"),
    offset: str | None = Query(default=None, description="默认 0；无法解析或为负数时回退为 0"),
    store: ConfigStore = Depends(get_config_store),
) -> ConfigHistoryPage:
    return history_service.list_history(
        store,
        config_type=config_type or None,
        config_id=config_id,
        limit=limit,
        offset=offset,
    )


__all__ = ["router"]
