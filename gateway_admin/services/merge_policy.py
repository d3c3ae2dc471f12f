"""
Presence-aware merge of partial update payloads.

Payloads are plain mappings in which a key is present only when the caller
sent it, so an explicit ``enabled: false`` is distinguishable from an omitted
``enabled``. Identity fields are never listed as mutable and therefore always
come from the existing record.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from gateway_admin.exceptions import ConfigValidationError
from gateway_admin.models import DEFAULT_TIMEOUT_MS, GatewayBackend, GatewayRoute

BACKEND_FIELDS = ("id", "name", "addr", "description", "enabled", "created_at", "updated_at")
BACKEND_MUTABLE_FIELDS = ("addr", "description", "enabled")
BACKEND_CREATE_FIELDS = ("name",) + BACKEND_MUTABLE_FIELDS
BACKEND_REQUIRED_FIELDS = ("name", "addr")
BACKEND_CREATE_DEFAULTS: Mapping[str, Any] = {
    "name": "",
    "addr": "",
    "description": None,
    "enabled": True,
}

ROUTE_FIELDS = (
    "id",
    "http_method",
    "http_pattern",
    "backend_name",
    "backend_service",
    "backend_method",
    "timeout_ms",
    "description",
    "enabled",
    "created_at",
    "updated_at",
)
ROUTE_MUTABLE_FIELDS = (
    "http_method",
    "http_pattern",
    "backend_name",
    "backend_service",
    "backend_method",
    "timeout_ms",
    "description",
    "enabled",
)
ROUTE_REQUIRED_FIELDS = (
    "http_method",
    "http_pattern",
    "backend_name",
    "backend_service",
    "backend_method",
)
ROUTE_CREATE_DEFAULTS: Mapping[str, Any] = {
    "http_method": "",
    "http_pattern": "",
    "backend_name": "",
    "backend_service": "",
    "backend_method": "",
    "timeout_ms": None,
    "description": None,
    "enabled": True,
}

# 32 位有符号整数上限，与 timeout_ms 列的 Integer 类型一致
MAX_TIMEOUT_MS = 2**31 - 1


def _column_lengths(model: Any, fields: Sequence[str]) -> dict[str, int]:
    return {field: model.__table__.c[field].type.length for field in fields}


BACKEND_FIELD_MAX_LENGTHS = _column_lengths(GatewayBackend, BACKEND_REQUIRED_FIELDS)
ROUTE_FIELD_MAX_LENGTHS = _column_lengths(GatewayRoute, ROUTE_REQUIRED_FIELDS)


def entity_fields(entity: Any, fields: Sequence[str]) -> dict[str, Any]:
    """Read the named attributes of a stored entity into a plain dict."""
    return {field: getattr(entity, field) for field in fields}


def merge_partial_update(
    existing: Mapping[str, Any],
    payload: Mapping[str, Any],
    *,
    mutable_fields: Sequence[str],
) -> dict[str, Any]:
    """
    Overlay the mutable keys present in ``payload`` onto ``existing``.

    Keys missing from the payload keep their existing value, keys outside
    ``mutable_fields`` (ids, names, timestamps, unknown keys) are ignored.
    """
    merged = dict(existing)
    for field in mutable_fields:
        if field in payload:
            merged[field] = payload[field]
    return merged


def _require_text(fields: Mapping[str, Any], field: str, max_length: int | None = None) -> None:
    value = fields.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ConfigValidationError(f"{field} is required", field=field)
    if max_length is not None and len(value) > max_length:
        raise ConfigValidationError(
            f"{field} must be at most {max_length} characters",
            field=field,
            details={"max_length": max_length},
        )


def _require_bool(fields: Mapping[str, Any], field: str) -> None:
    if not isinstance(fields.get(field), bool):
        raise ConfigValidationError(f"{field} must be a boolean", field=field)


def validate_backend_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    for field in BACKEND_REQUIRED_FIELDS:
        _require_text(fields, field, BACKEND_FIELD_MAX_LENGTHS[field])
    _require_bool(fields, "enabled")
    return dict(fields)


def validate_route_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """
    校验合并后的路由字段，并把缺省/非正数的 timeout_ms 归一为 5000。

    文本长度与 timeout_ms 的上限和列定义一致，超出时在写库前报 ConfigValidationError。
    """
    for field in ROUTE_REQUIRED_FIELDS:
        _require_text(fields, field, ROUTE_FIELD_MAX_LENGTHS[field])
    _require_bool(fields, "enabled")

    validated = dict(fields)
    timeout_ms = validated.get("timeout_ms")
    if timeout_ms is None or isinstance(timeout_ms, bool):
        validated["timeout_ms"] = DEFAULT_TIMEOUT_MS
    elif not isinstance(timeout_ms, int):
        raise ConfigValidationError("timeout_ms must be an integer", field="timeout_ms")
    elif timeout_ms <= 0:
        validated["timeout_ms"] = DEFAULT_TIMEOUT_MS
    elif timeout_ms > MAX_TIMEOUT_MS:
        raise ConfigValidationError(
            f"timeout_ms must be at most {MAX_TIMEOUT_MS}",
            field="timeout_ms",
            details={"max": MAX_TIMEOUT_MS},
        )
    return validated


__all__ = [
    "BACKEND_CREATE_DEFAULTS",
    "BACKEND_CREATE_FIELDS",
    "BACKEND_FIELD_MAX_LENGTHS",
    "BACKEND_FIELDS",
    "BACKEND_MUTABLE_FIELDS",
    "MAX_TIMEOUT_MS",
    "ROUTE_CREATE_DEFAULTS",
    "ROUTE_FIELD_MAX_LENGTHS",
    "ROUTE_FIELDS",
    "ROUTE_MUTABLE_FIELDS",
    "entity_fields",
    "merge_partial_update",
    "validate_backend_fields",
    "validate_route_fields",
]
