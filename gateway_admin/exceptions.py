from __future__ import annotations

from typing import Any


class ConfigStoreError(RuntimeError):
    """配置存储相关错误的基类，每个子类对应一种对外结果类别。"""

    error = "internal_error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(ConfigStoreError):
    """目标实体不存在（区别于合法的空结果）。"""

    error = "not_found"


class ConflictError(ConfigStoreError):
    """创建时唯一键冲突。"""

    error = "conflict"


class InvalidReferenceError(ConfigStoreError):
    """Route 引用的 Backend 不存在或已禁用。"""

    error = "invalid_reference"


class ConfigValidationError(ConfigStoreError):
    """必填字段为空或格式不正确。"""

    error = "validation_error"

    def __init__(self, message: str, *, field: str | None = None, details: dict[str, Any] | None = None):
        self.field = field
        if field is not None:
            details = {**(details or {}), "field": field}
        super().__init__(message, details=details)


class StorageError(ConfigStoreError):
    """Underlying storage unavailable or query failed."""

    error = "storage_error"


__all__ = [
    "ConfigStoreError",
    "ConfigValidationError",
    "ConflictError",
    "InvalidReferenceError",
    "NotFoundError",
    "StorageError",
]
