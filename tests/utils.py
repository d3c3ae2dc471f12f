from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from gateway_admin.db import enable_sqlite_foreign_keys
from gateway_admin.deps import get_config_store
from gateway_admin.exceptions import ConflictError, NotFoundError, StorageError
from gateway_admin.models import Base, ConfigHistory, GatewayBackend, GatewayRoute, utcnow
from gateway_admin.repositories import SqlAlchemyConfigStore
from gateway_admin.services.merge_policy import BACKEND_FIELDS, ROUTE_FIELDS, entity_fields


def build_inmemory_engine() -> Engine:
    """
    In-memory SQLite shared by every session (StaticPool) with the schema created.
    """
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    return engine


def install_inmemory_store(app) -> SqlAlchemyConfigStore:
    """
    Attach a SQLAlchemy config store backed by in-memory SQLite to the FastAPI app.
    """
    store = SqlAlchemyConfigStore(build_inmemory_engine())
    app.dependency_overrides[get_config_store] = lambda: store
    return store


def _copy_backend(row: GatewayBackend) -> GatewayBackend:
    return GatewayBackend(**entity_fields(row, BACKEND_FIELDS))


def _copy_route(row: GatewayRoute) -> GatewayRoute:
    return GatewayRoute(**entity_fields(row, ROUTE_FIELDS))


class InMemoryConfigStore:
    """
    Dict-backed ConfigStore used by service tests.

    Returns copies so callers cannot mutate stored state behind the store's back.
    """

    def __init__(self) -> None:
        self._backends: dict[str, GatewayBackend] = {}
        self._routes: dict[int, GatewayRoute] = {}
        self.history: list[ConfigHistory] = []
        self._next_backend_id = 1
        self._next_route_id = 1
        self._next_history_id = 1

    def close(self) -> None:
        return None

    # Backend operations
    def list_backends(self, enabled: bool | None = None) -> list[GatewayBackend]:
        rows = sorted(self._backends.values(), key=lambda b: b.name)
        return [_copy_backend(b) for b in rows if enabled is None or b.enabled == enabled]

    def get_backend_by_name(self, name: str) -> GatewayBackend | None:
        row = self._backends.get(name)
        return _copy_backend(row) if row is not None else None

    def create_backend(self, backend: GatewayBackend) -> GatewayBackend:
        if backend.name in self._backends:
            raise ConflictError(f"backend {backend.name!r} already exists")
        now = utcnow()
        row = GatewayBackend(
            id=self._next_backend_id,
            name=backend.name,
            addr=backend.addr,
            description=backend.description,
            enabled=backend.enabled,
            created_at=now,
            updated_at=now,
        )
        self._next_backend_id += 1
        self._backends[row.name] = row
        return _copy_backend(row)

    def update_backend(self, name: str, backend: GatewayBackend) -> GatewayBackend:
        row = self._backends.get(name)
        if row is None:
            raise NotFoundError(f"backend {name!r} not found")
        row.addr = backend.addr
        row.description = backend.description
        row.enabled = backend.enabled
        row.updated_at = utcnow()
        return _copy_backend(row)

    def delete_backend(self, name: str) -> None:
        row = self._backends.get(name)
        if row is None:
            raise NotFoundError(f"backend {name!r} not found")
        row.enabled = False
        row.updated_at = utcnow()

    # Route operations
    def list_routes(self, enabled: bool | None = None) -> list[GatewayRoute]:
        rows = sorted(self._routes.values(), key=lambda r: (r.http_method, r.http_pattern, r.id))
        return [_copy_route(r) for r in rows if enabled is None or r.enabled == enabled]

    def get_route_by_id(self, route_id: int) -> GatewayRoute | None:
        row = self._routes.get(route_id)
        return _copy_route(row) if row is not None else None

    def create_route(self, route: GatewayRoute) -> GatewayRoute:
        now = utcnow()
        fields = entity_fields(route, ROUTE_FIELDS)
        fields.update(id=self._next_route_id, created_at=now, updated_at=now)
        row = GatewayRoute(**fields)
        self._next_route_id += 1
        self._routes[row.id] = row
        return _copy_route(row)

    def update_route(self, route_id: int, route: GatewayRoute) -> GatewayRoute:
        row = self._routes.get(route_id)
        if row is None:
            raise NotFoundError(f"route {route_id} not found")
        for field in ROUTE_FIELDS:
            if field not in ("id", "created_at", "updated_at"):
                setattr(row, field, getattr(route, field))
        row.updated_at = utcnow()
        return _copy_route(row)

    def delete_route(self, route_id: int) -> None:
        row = self._routes.get(route_id)
        if row is None:
            raise NotFoundError(f"route {route_id} not found")
        row.enabled = False
        row.updated_at = utcnow()

    # History operations
    def create_history(self, entry: ConfigHistory) -> None:
        entry.id = self._next_history_id
        entry.created_at = utcnow()
        self._next_history_id += 1
        self.history.append(entry)

    def get_history(
        self,
        config_type: str | None = None,
        config_id: int | None = None,
        *,
        limit: int,
        offset: int,
    ) -> tuple[list[ConfigHistory], int]:
        rows = [
            h
            for h in self.history
            if (config_type is None or h.config_type == config_type)
            and (config_id is None or h.config_id == config_id)
        ]
        rows.sort(key=lambda h: (h.created_at, h.id), reverse=True)
        return rows[offset : offset + limit], len(rows)


class FailingHistoryStore(InMemoryConfigStore):
    """Primary writes succeed, every history append fails."""

    def __init__(self) -> None:
        super().__init__()
        self.history_attempts = 0

    def create_history(self, entry: ConfigHistory) -> None:
        self.history_attempts += 1
        raise StorageError("history table unavailable")
