from __future__ import annotations

from gateway_admin.exceptions import InvalidReferenceError
from gateway_admin.models import GatewayBackend
from gateway_admin.repositories import ConfigStore


def ensure_backend_available(store: ConfigStore, backend_name: str) -> GatewayBackend:
    """
    确认路由引用的 Backend 存在且处于启用状态。

    注意：这是“先查后写”，与并发禁用 Backend 之间没有原子性保证；
    存储层的外键只能保证存在性，不能保证 enabled。
    """
    backend = store.get_backend_by_name(backend_name)
    if backend is None or not backend.enabled:
        raise InvalidReferenceError(
            f"backend {backend_name!r} not found or disabled",
            details={"backend_name": backend_name},
        )
    return backend


__all__ = ["ensure_backend_available"]
