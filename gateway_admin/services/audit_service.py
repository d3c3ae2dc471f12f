from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from gateway_admin.logging_config import logger
from gateway_admin.models import CONFIG_TYPE_BACKEND, CONFIG_TYPE_ROUTE, OPERATOR_MAX_LENGTH, ConfigHistory
from gateway_admin.repositories import ConfigStore
from gateway_admin.schemas import BackendResponse, RouteResponse

_SNAPSHOT_SCHEMAS: dict[str, type[BaseModel]] = {
    CONFIG_TYPE_BACKEND: BackendResponse,
    CONFIG_TYPE_ROUTE: RouteResponse,
}


def build_snapshot(config_type: str, entity: Any, **overrides: Any) -> dict[str, Any]:
    """Serialize a stored entity into the JSON-ready view kept in history."""
    schema = _SNAPSHOT_SCHEMAS[config_type]
    data = schema.model_validate(entity).model_dump(mode="json")
    data.update(overrides)
    return data


def record_config_change(
    store: ConfigStore,
    *,
    config_type: str,
    config_id: int | None,
    operation: str,
    old_value: Mapping[str, Any] | None,
    new_value: Mapping[str, Any] | None,
    operator: str | None = None,
) -> bool:
    """
    写入一条配置变更历史（尽力而为）。

    历史写入失败只记录 warning，不会让已经提交的主操作失败，也不重试；
    返回值表示本次是否写入成功。operator 超出列宽时截断到 OPERATOR_MAX_LENGTH。
    """
    try:
        entry = ConfigHistory(
            config_type=config_type,
            config_id=config_id,
            operation=operation,
            old_value=json.dumps(old_value, ensure_ascii=False) if old_value is not None else None,
            new_value=json.dumps(new_value, ensure_ascii=False) if new_value is not None else None,
            operator=operator[:OPERATOR_MAX_LENGTH] if operator else None,
        )
        store.create_history(entry)
    except Exception:
        logger.warning(
            "failed to record config history (%s %s id=%s operator=%s)",
            operation,
            config_type,
            config_id,
            operator,
            exc_info=True,
        )
        return False
    return True


__all__ = ["build_snapshot", "record_config_change"]
