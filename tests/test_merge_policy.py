from __future__ import annotations

import pytest

from gateway_admin.exceptions import ConfigValidationError
from gateway_admin.services.merge_policy import (
    BACKEND_FIELD_MAX_LENGTHS,
    MAX_TIMEOUT_MS,
    ROUTE_FIELD_MAX_LENGTHS,
    BACKEND_CREATE_DEFAULTS,
    BACKEND_CREATE_FIELDS,
    BACKEND_MUTABLE_FIELDS,
    ROUTE_CREATE_DEFAULTS,
    ROUTE_MUTABLE_FIELDS,
    merge_partial_update,
    validate_backend_fields,
    validate_route_fields,
)


def _existing_backend() -> dict:
    return {
        "id": 7,
        "name": "account",
        "addr": "10.0.0.1:9000",
        "description": "accounts",
        "enabled": True,
    }


def test_omitted_fields_keep_existing_values():
    merged = merge_partial_update(
        _existing_backend(),
        {"addr": "10.0.0.2:9000"},
        mutable_fields=BACKEND_MUTABLE_FIELDS,
    )

    assert merged["addr"] == "10.0.0.2:9000"
    assert merged["description"] == "accounts"
    assert merged["enabled"] is True


def test_explicit_false_is_applied():
    merged = merge_partial_update(
        _existing_backend(),
        {"enabled": False},
        mutable_fields=BACKEND_MUTABLE_FIELDS,
    )

    assert merged["enabled"] is False
    assert merged["addr"] == "10.0.0.1:9000"


def test_identity_and_unknown_keys_are_ignored():
    merged = merge_partial_update(
        _existing_backend(),
        {"id": 99, "name": "renamed", "owner": "ops"},
        mutable_fields=BACKEND_MUTABLE_FIELDS,
    )

    assert merged["id"] == 7
    assert merged["name"] == "account"
    assert "owner" not in merged


def test_create_defaults_enable_when_omitted():
    fields = merge_partial_update(
        BACKEND_CREATE_DEFAULTS,
        {"name": "account", "addr": "10.0.0.1:9000"},
        mutable_fields=BACKEND_CREATE_FIELDS,
    )

    assert validate_backend_fields(fields)["enabled"] is True


@pytest.mark.parametrize("field", ["name", "addr"])
@pytest.mark.parametrize("value", ["", "   ", None])
def test_backend_required_fields(field, value):
    fields = {**_existing_backend(), field: value}

    with pytest.raises(ConfigValidationError) as excinfo:
        validate_backend_fields(fields)

    assert excinfo.value.field == field
    assert excinfo.value.details == {"field": field}


def _route_fields(**overrides) -> dict:
    fields = {
        **ROUTE_CREATE_DEFAULTS,
        "http_method": "GET",
        "http_pattern": "/api/users/{id}",
        "backend_name": "account",
        "backend_service": "account.v1.AccountService",
        "backend_method": "GetUser",
    }
    fields.update(overrides)
    return fields


@pytest.mark.parametrize("timeout_ms", [None, 0, -5])
def test_route_timeout_defaults_to_5000(timeout_ms):
    validated = validate_route_fields(_route_fields(timeout_ms=timeout_ms))
    assert validated["timeout_ms"] == 5000


def test_route_positive_timeout_is_kept():
    assert validate_route_fields(_route_fields(timeout_ms=1500))["timeout_ms"] == 1500


def test_route_non_integer_timeout_is_rejected():
    with pytest.raises(ConfigValidationError) as excinfo:
        validate_route_fields(_route_fields(timeout_ms="fast"))
    assert excinfo.value.field == "timeout_ms"


def test_route_missing_backend_method_is_rejected():
    with pytest.raises(ConfigValidationError) as excinfo:
        validate_route_fields(_route_fields(backend_method=" "))
    assert excinfo.value.field == "backend_method"


def test_route_update_merges_only_present_keys():
    existing = validate_route_fields(_route_fields(id=3, timeout_ms=2000, enabled=False))

    merged = merge_partial_update(existing, {"http_pattern": "/api/v2/users/{id}"}, mutable_fields=ROUTE_MUTABLE_FIELDS)

    assert merged["http_pattern"] == "/api/v2/users/{id}"
    assert merged["timeout_ms"] == 2000
    assert merged["enabled"] is False
    assert merged["id"] == 3


def test_field_limits_follow_column_widths():
    assert BACKEND_FIELD_MAX_LENGTHS == {"name": 100, "addr": 255}
    assert ROUTE_FIELD_MAX_LENGTHS == {
        "http_method": 16,
        "http_pattern": 512,
        "backend_name": 100,
        "backend_service": 255,
        "backend_method": 255,
    }


@pytest.mark.parametrize("field", ["name", "addr"])
def test_backend_over_long_field_is_rejected(field):
    limit = BACKEND_FIELD_MAX_LENGTHS[field]
    assert validate_backend_fields({**_existing_backend(), field: "x" * limit})[field] == "x" * limit

    with pytest.raises(ConfigValidationError) as excinfo:
        validate_backend_fields({**_existing_backend(), field: "x" * (limit + 1)})

    assert excinfo.value.details == {"field": field, "max_length": limit}


@pytest.mark.parametrize("field", sorted(ROUTE_FIELD_MAX_LENGTHS))
def test_route_over_long_field_is_rejected(field):
    limit = ROUTE_FIELD_MAX_LENGTHS[field]

    with pytest.raises(ConfigValidationError) as excinfo:
        validate_route_fields(_route_fields(**{field: "x" * (limit + 1)}))

    assert excinfo.value.field == field


def test_route_timeout_upper_bound():
    assert validate_route_fields(_route_fields(timeout_ms=MAX_TIMEOUT_MS))["timeout_ms"] == 2**31 - 1

    with pytest.raises(ConfigValidationError) as excinfo:
        validate_route_fields(_route_fields(timeout_ms=MAX_TIMEOUT_MS + 1))

    assert excinfo.value.field == "timeout_ms"
