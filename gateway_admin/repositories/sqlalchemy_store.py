from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Select, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gateway_admin.db.session import build_session_factory
from gateway_admin.exceptions import ConflictError, InvalidReferenceError, NotFoundError, StorageError
from gateway_admin.logging_config import logger
from gateway_admin.models import ConfigHistory, GatewayBackend, GatewayRoute, utcnow

_BACKEND_MUTABLE_COLUMNS = ("addr", "description", "enabled")
_ROUTE_MUTABLE_COLUMNS = (
    "http_method",
    "http_pattern",
    "backend_name",
    "backend_service",
    "backend_method",
    "timeout_ms",
    "description",
    "enabled",
)


class SqlAlchemyConfigStore:
    """
    基于 SQLAlchemy 连接池的 ConfigStore 实现。

    每次调用都在独立会话内完成并保证关闭；返回的实体已从会话中 expunge，
    调用方可以在会话关闭后安全读取。所有 SQLAlchemyError 统一转换为 StorageError。
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._session_factory = build_session_factory(engine)

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(f"storage operation failed: {exc.__class__.__name__}") from exc
        finally:
            session.close()

    @staticmethod
    def _detach(session: Session, row):
        session.refresh(row)
        session.expunge(row)
        return row

    # --- backends ---

    def list_backends(self, enabled: bool | None = None) -> list[GatewayBackend]:
        stmt: Select[tuple[GatewayBackend]] = select(GatewayBackend)
        if enabled is not None:
            stmt = stmt.where(GatewayBackend.enabled == enabled)
        stmt = stmt.order_by(GatewayBackend.name.asc())
        with self._session() as session:
            rows = list(session.execute(stmt).scalars().all())
            session.expunge_all()
            return rows

    def _find_backend(self, session: Session, name: str) -> GatewayBackend | None:
        stmt: Select[tuple[GatewayBackend]] = select(GatewayBackend).where(GatewayBackend.name == name).limit(1)
        return session.execute(stmt).scalars().first()

    def get_backend_by_name(self, name: str) -> GatewayBackend | None:
        with self._session() as session:
            row = self._find_backend(session, name)
            if row is not None:
                session.expunge(row)
            return row

    def create_backend(self, backend: GatewayBackend) -> GatewayBackend:
        row = GatewayBackend(
            name=backend.name,
            addr=backend.addr,
            description=backend.description,
            enabled=bool(backend.enabled),
        )
        with self._session() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                # 唯一索引兜住“先查后写”之间的并发创建
                session.rollback()
                raise ConflictError(f"backend {backend.name!r} already exists") from exc
            return self._detach(session, row)

    def update_backend(self, name: str, backend: GatewayBackend) -> GatewayBackend:
        with self._session() as session:
            row = self._find_backend(session, name)
            if row is None:
                raise NotFoundError(f"backend {name!r} not found")
            for column in _BACKEND_MUTABLE_COLUMNS:
                setattr(row, column, getattr(backend, column))
            row.updated_at = utcnow()
            session.commit()
            return self._detach(session, row)

    def delete_backend(self, name: str) -> None:
        with self._session() as session:
            row = self._find_backend(session, name)
            if row is None:
                raise NotFoundError(f"backend {name!r} not found")
            row.enabled = False
            # 已禁用的行同样刷新 updated_at
            row.updated_at = utcnow()
            session.commit()

    # --- routes ---

    def list_routes(self, enabled: bool | None = None) -> list[GatewayRoute]:
        stmt: Select[tuple[GatewayRoute]] = select(GatewayRoute)
        if enabled is not None:
            stmt = stmt.where(GatewayRoute.enabled == enabled)
        stmt = stmt.order_by(GatewayRoute.http_method.asc(), GatewayRoute.http_pattern.asc(), GatewayRoute.id.asc())
        with self._session() as session:
            rows = list(session.execute(stmt).scalars().all())
            session.expunge_all()
            return rows

    def get_route_by_id(self, route_id: int) -> GatewayRoute | None:
        with self._session() as session:
            row = session.get(GatewayRoute, route_id)
            if row is not None:
                session.expunge(row)
            return row

    def create_route(self, route: GatewayRoute) -> GatewayRoute:
        row = GatewayRoute(
            **{column: getattr(route, column) for column in _ROUTE_MUTABLE_COLUMNS},
        )
        with self._session() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise InvalidReferenceError(
                    f"backend {route.backend_name!r} not found or disabled"
                ) from exc
            return self._detach(session, row)

    def update_route(self, route_id: int, route: GatewayRoute) -> GatewayRoute:
        with self._session() as session:
            row = session.get(GatewayRoute, route_id)
            if row is None:
                raise NotFoundError(f"route {route_id} not found")
            for column in _ROUTE_MUTABLE_COLUMNS:
                setattr(row, column, getattr(route, column))
            row.updated_at = utcnow()
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise InvalidReferenceError(
                    f"backend {route.backend_name!r} not found or disabled"
                ) from exc
            return self._detach(session, row)

    def delete_route(self, route_id: int) -> None:
        with self._session() as session:
            row = session.get(GatewayRoute, route_id)
            if row is None:
                raise NotFoundError(f"route {route_id} not found")
            row.enabled = False
            row.updated_at = utcnow()
            session.commit()

    # --- history ---

    def create_history(self, entry: ConfigHistory) -> None:
        row = ConfigHistory(
            config_type=entry.config_type,
            config_id=entry.config_id,
            operation=entry.operation,
            old_value=entry.old_value,
            new_value=entry.new_value,
            operator=entry.operator,
        )
        with self._session() as session:
            session.add(row)
            session.commit()
            logger.debug(
                "config history #%s recorded (%s %s id=%s)",
                row.id,
                row.operation,
                row.config_type,
                row.config_id,
            )

    def get_history(
        self,
        config_type: str | None = None,
        config_id: int | None = None,
        *,
        limit: int,
        offset: int,
    ) -> tuple[list[ConfigHistory], int]:
        conditions = []
        if config_type is not None:
            conditions.append(ConfigHistory.config_type == config_type)
        if config_id is not None:
            conditions.append(ConfigHistory.config_id == config_id)

        count_stmt = select(func.count(ConfigHistory.id)).where(*conditions)
        page_stmt: Select[tuple[ConfigHistory]] = (
            select(ConfigHistory)
            .where(*conditions)
            .order_by(ConfigHistory.created_at.desc(), ConfigHistory.id.desc())
            .limit(limit)
            .offset(offset)
        )
        with self._session() as session:
            total = int(session.execute(count_stmt).scalar_one())
            rows = list(session.execute(page_stmt).scalars().all())
            session.expunge_all()
            return rows, total


__all__ = ["SqlAlchemyConfigStore"]
