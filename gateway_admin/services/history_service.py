from __future__ import annotations

from gateway_admin.exceptions import ConfigValidationError
from gateway_admin.models import CONFIG_TYPES
from gateway_admin.repositories import ConfigStore
from gateway_admin.schemas import ConfigHistoryPage, ConfigHistoryResponse

DEFAULT_HISTORY_LIMIT = 50
MAX_HISTORY_LIMIT = 100


def _parse_int(value: int | str | None) -> int | None:
    if value is None or isinstance(value, int):
        return value
    try:
        return int(value.strip())
    except ValueError:
        return None


def normalize_pagination(limit: int | str | None, offset: int | str | None) -> tuple[int, int]:
    """
    越界的 limit 回退到默认 50（而不是截断到 100），负 offset 回退到 0。

    查询参数原样传入；无法解析为整数的值按缺省处理，不报错。
    """
    limit = _parse_int(limit)
    offset = _parse_int(offset)
    if limit is None or limit <= 0 or limit > MAX_HISTORY_LIMIT:
        limit = DEFAULT_HISTORY_LIMIT
    if offset is None or offset < 0:
        offset = 0
    return limit, offset


def list_history(
    store: ConfigStore,
    *,
    config_type: str | None = None,
    config_id: int | None = None,
    limit: int | str | None = None,
    offset: int | str | None = None,
) -> ConfigHistoryPage:
    if config_type is not None and config_type not in CONFIG_TYPES:
        raise ConfigValidationError(
            "invalid config_type (must be 'backend' or 'route')",
            field="config_type",
        )
    limit, offset = normalize_pagination(limit, offset)
    rows, total = store.get_history(config_type, config_id, limit=limit, offset=offset)
    return ConfigHistoryPage(
        items=[ConfigHistoryResponse.model_validate(row) for row in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


__all__ = ["DEFAULT_HISTORY_LIMIT", "MAX_HISTORY_LIMIT", "list_history", "normalize_pagination"]
