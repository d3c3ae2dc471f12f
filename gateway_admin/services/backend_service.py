from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gateway_admin.exceptions import ConflictError, NotFoundError
from gateway_admin.logging_config import logger
from gateway_admin.models import (
    CONFIG_TYPE_BACKEND,
    OPERATION_CREATE,
    OPERATION_DELETE,
    OPERATION_UPDATE,
    GatewayBackend,
)
from gateway_admin.repositories import ConfigStore

from .audit_service import build_snapshot, record_config_change
from .merge_policy import (
    BACKEND_CREATE_DEFAULTS,
    BACKEND_CREATE_FIELDS,
    BACKEND_FIELDS,
    BACKEND_MUTABLE_FIELDS,
    entity_fields,
    merge_partial_update,
    validate_backend_fields,
)


def list_backends(store: ConfigStore, *, enabled: bool | None = None) -> list[GatewayBackend]:
    return store.list_backends(enabled)


def get_backend(store: ConfigStore, name: str) -> GatewayBackend:
    backend = store.get_backend_by_name(name)
    if backend is None:
        raise NotFoundError(f"backend {name!r} not found")
    return backend


def create_backend(
    store: ConfigStore,
    payload: Mapping[str, Any],
    *,
    operator: str | None = None,
) -> GatewayBackend:
    """
    创建 Backend：校验 → 唯一性检查 → 写入 → 记录历史。

    payload 中未提供 enabled 时默认启用。
    """
    fields = merge_partial_update(BACKEND_CREATE_DEFAULTS, payload, mutable_fields=BACKEND_CREATE_FIELDS)
    fields = validate_backend_fields(fields)

    if store.get_backend_by_name(fields["name"]) is not None:
        raise ConflictError(f"backend {fields['name']!r} already exists")

    created = store.create_backend(GatewayBackend(**fields))
    logger.info("backend %s created (id=%s operator=%s)", created.name, created.id, operator)

    record_config_change(
        store,
        config_type=CONFIG_TYPE_BACKEND,
        config_id=created.id,
        operation=OPERATION_CREATE,
        old_value=None,
        new_value=build_snapshot(CONFIG_TYPE_BACKEND, created),
        operator=operator,
    )
    return created


def update_backend(
    store: ConfigStore,
    name: str,
    payload: Mapping[str, Any],
    *,
    operator: str | None = None,
) -> GatewayBackend:
    existing = get_backend(store, name)
    old_snapshot = build_snapshot(CONFIG_TYPE_BACKEND, existing)

    merged = merge_partial_update(
        entity_fields(existing, BACKEND_FIELDS),
        payload,
        mutable_fields=BACKEND_MUTABLE_FIELDS,
    )
    merged = validate_backend_fields(merged)

    updated = store.update_backend(name, GatewayBackend(**merged))
    logger.info("backend %s updated (id=%s operator=%s)", name, updated.id, operator)

    record_config_change(
        store,
        config_type=CONFIG_TYPE_BACKEND,
        config_id=updated.id,
        operation=OPERATION_UPDATE,
        old_value=old_snapshot,
        new_value=build_snapshot(CONFIG_TYPE_BACKEND, updated),
        operator=operator,
    )
    return updated


def delete_backend(store: ConfigStore, name: str, *, operator: str | None = None) -> None:
    """软删除：只把 enabled 置为 false，行本身保留。对已禁用的 Backend 重复删除同样成功。"""
    existing = get_backend(store, name)
    store.delete_backend(name)
    logger.info("backend %s disabled (id=%s operator=%s)", name, existing.id, operator)

    record_config_change(
        store,
        config_type=CONFIG_TYPE_BACKEND,
        config_id=existing.id,
        operation=OPERATION_DELETE,
        old_value=build_snapshot(CONFIG_TYPE_BACKEND, existing, enabled=False),
        new_value=None,
        operator=operator,
    )


__all__ = ["create_backend", "delete_backend", "get_backend", "list_backends", "update_backend"]
