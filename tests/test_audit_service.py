from __future__ import annotations

import json
import logging

from gateway_admin.models import GatewayBackend
from gateway_admin.services import backend_service
from gateway_admin.services.audit_service import build_snapshot, record_config_change
from tests.utils import FailingHistoryStore, InMemoryConfigStore


def test_record_config_change_stores_json_snapshots(memory_store: InMemoryConfigStore):
    ok = record_config_change(
        memory_store,
        config_type="backend",
        config_id=1,
        operation="UPDATE",
        old_value={"addr": "a:1", "name": "账户"},
        new_value={"addr": "b:2", "name": "账户"},
        operator="alice",
    )

    assert ok is True
    (entry,) = memory_store.history
    assert entry.operation == "UPDATE"
    assert entry.operator == "alice"
    assert json.loads(entry.old_value) == {"addr": "a:1", "name": "账户"}
    assert "账户" in entry.new_value


def test_missing_snapshot_is_stored_as_null(memory_store: InMemoryConfigStore):
    record_config_change(
        memory_store,
        config_type="route",
        config_id=3,
        operation="CREATE",
        old_value=None,
        new_value={"id": 3},
        operator="",
    )

    (entry,) = memory_store.history
    assert entry.old_value is None
    assert entry.operator is None


def test_history_failure_is_logged_and_swallowed(caplog):
    store = FailingHistoryStore()

    with caplog.at_level(logging.WARNING, logger="gateway_admin"):
        ok = record_config_change(
            store,
            config_type="backend",
            config_id=1,
            operation="CREATE",
            old_value=None,
            new_value={"id": 1},
        )

    assert ok is False
    assert store.history_attempts == 1
    assert any("failed to record config history" in r.getMessage() for r in caplog.records)


def test_primary_mutation_succeeds_when_history_fails():
    store = FailingHistoryStore()

    created = backend_service.create_backend(
        store,
        {"name": "account", "addr": "10.0.0.1:9000"},
        operator="alice",
    )

    assert created.id == 1
    assert store.get_backend_by_name("account") is not None
    assert store.history_attempts == 1

    backend_service.delete_backend(store, "account", operator="alice")
    assert store.get_backend_by_name("account").enabled is False
    assert store.history_attempts == 2


def test_build_snapshot_applies_overrides(memory_store: InMemoryConfigStore):
    backend = memory_store.create_backend(
        GatewayBackend(name="account", addr="10.0.0.1:9000", description=None, enabled=True)
    )

    snapshot = build_snapshot("backend", backend, enabled=False)

    assert snapshot["name"] == "account"
    assert snapshot["enabled"] is False
    assert isinstance(snapshot["created_at"], str)


def test_long_operator_is_truncated_to_column_width(memory_store: InMemoryConfigStore):
    record_config_change(
        memory_store,
        config_type="backend",
        config_id=1,
        operation="CREATE",
        old_value=None,
        new_value={"id": 1},
        operator="ops-" + "x" * 300,
    )

    (entry,) = memory_store.history
    assert len(entry.operator) == 128
    assert entry.operator.startswith("ops-")
