from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gateway_admin.exceptions import NotFoundError
from gateway_admin.logging_config import logger
from gateway_admin.models import (
    CONFIG_TYPE_ROUTE,
    OPERATION_CREATE,
    OPERATION_DELETE,
    OPERATION_UPDATE,
    GatewayRoute,
)
from gateway_admin.repositories import ConfigStore

from .audit_service import build_snapshot, record_config_change
from .merge_policy import (
    ROUTE_CREATE_DEFAULTS,
    ROUTE_FIELDS,
    ROUTE_MUTABLE_FIELDS,
    entity_fields,
    merge_partial_update,
    validate_route_fields,
)
from .reference_validator import ensure_backend_available


def list_routes(store: ConfigStore, *, enabled: bool | None = None) -> list[GatewayRoute]:
    return store.list_routes(enabled)


def get_route(store: ConfigStore, route_id: int) -> GatewayRoute:
    route = store.get_route_by_id(route_id)
    if route is None:
        raise NotFoundError(f"route {route_id} not found")
    return route


def create_route(
    store: ConfigStore,
    payload: Mapping[str, Any],
    *,
    operator: str | None = None,
) -> GatewayRoute:
    fields = merge_partial_update(ROUTE_CREATE_DEFAULTS, payload, mutable_fields=ROUTE_MUTABLE_FIELDS)
    fields = validate_route_fields(fields)
    ensure_backend_available(store, fields["backend_name"])

    created = store.create_route(GatewayRoute(**fields))
    logger.info(
        "route %s %s -> %s created (id=%s operator=%s)",
        created.http_method,
        created.http_pattern,
        created.backend_name,
        created.id,
        operator,
    )

    record_config_change(
        store,
        config_type=CONFIG_TYPE_ROUTE,
        config_id=created.id,
        operation=OPERATION_CREATE,
        old_value=None,
        new_value=build_snapshot(CONFIG_TYPE_ROUTE, created),
        operator=operator,
    )
    return created


def update_route(
    store: ConfigStore,
    route_id: int,
    payload: Mapping[str, Any],
    *,
    operator: str | None = None,
) -> GatewayRoute:
    """
    部分更新路由。

    只有 backend_name 发生变化时才重新校验引用；未改动引用时，即便目标 Backend
    已被禁用，其它字段的更新依然允许。
    """
    existing = get_route(store, route_id)
    old_snapshot = build_snapshot(CONFIG_TYPE_ROUTE, existing)

    merged = merge_partial_update(
        entity_fields(existing, ROUTE_FIELDS),
        payload,
        mutable_fields=ROUTE_MUTABLE_FIELDS,
    )
    merged = validate_route_fields(merged)
    if merged["backend_name"] != existing.backend_name:
        ensure_backend_available(store, merged["backend_name"])

    updated = store.update_route(route_id, GatewayRoute(**merged))
    logger.info("route %s updated (operator=%s)", route_id, operator)

    record_config_change(
        store,
        config_type=CONFIG_TYPE_ROUTE,
        config_id=updated.id,
        operation=OPERATION_UPDATE,
        old_value=old_snapshot,
        new_value=build_snapshot(CONFIG_TYPE_ROUTE, updated),
        operator=operator,
    )
    return updated


def delete_route(store: ConfigStore, route_id: int, *, operator: str | None = None) -> None:
    existing = get_route(store, route_id)
    store.delete_route(route_id)
    logger.info("route %s disabled (operator=%s)", route_id, operator)

    record_config_change(
        store,
        config_type=CONFIG_TYPE_ROUTE,
        config_id=existing.id,
        operation=OPERATION_DELETE,
        old_value=build_snapshot(CONFIG_TYPE_ROUTE, existing, enabled=False),
        new_value=None,
        operator=operator,
    )


__all__ = ["create_route", "delete_route", "get_route", "list_routes", "update_route"]
