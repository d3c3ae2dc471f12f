from __future__ import annotations

from typing import Protocol

from gateway_admin.models import ConfigHistory, GatewayBackend, GatewayRoute


class ConfigStore(Protocol):
    """
    Capability set over the durable storage of backends, routes and history.

    Lookups return None for absent rows; mutations raise NotFoundError,
    ConflictError or StorageError from gateway_admin.exceptions.
    """

    # Backend operations
    def list_backends(self, enabled: bool | None = None) -> list[GatewayBackend]:
        """Backends ordered by name ascending, optionally filtered by enabled."""
        ...

    def get_backend_by_name(self, name: str) -> GatewayBackend | None:
        ...

    def create_backend(self, backend: GatewayBackend) -> GatewayBackend:
        """Insert and return the row with id and timestamps assigned."""
        ...

    def update_backend(self, name: str, backend: GatewayBackend) -> GatewayBackend:
        """Overwrite addr/description/enabled; name and id never change."""
        ...

    def delete_backend(self, name: str) -> None:
        """Soft delete: enabled=false, the row stays."""
        ...

    # Route operations
    def list_routes(self, enabled: bool | None = None) -> list[GatewayRoute]:
        """Routes ordered by (http_method, http_pattern) ascending."""
        ...

    def get_route_by_id(self, route_id: int) -> GatewayRoute | None:
        ...

    def create_route(self, route: GatewayRoute) -> GatewayRoute:
        ...

    def update_route(self, route_id: int, route: GatewayRoute) -> GatewayRoute:
        ...

    def delete_route(self, route_id: int) -> None:
        ...

    # History operations
    def create_history(self, entry: ConfigHistory) -> None:
        """Append-only insert."""
        ...

    def get_history(
        self,
        config_type: str | None = None,
        config_id: int | None = None,
        *,
        limit: int,
        offset: int,
    ) -> tuple[list[ConfigHistory], int]:
        """One page newest first, plus the total size of the filtered set."""
        ...


__all__ = ["ConfigStore"]
