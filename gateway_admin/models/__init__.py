from .backend import GatewayBackend
from .base import Base, TimestampMixin, utcnow
from .config_history import OPERATOR_MAX_LENGTH, ConfigHistory
from .route import DEFAULT_TIMEOUT_MS, GatewayRoute

CONFIG_TYPE_BACKEND = "backend"
CONFIG_TYPE_ROUTE = "route"
CONFIG_TYPES = (CONFIG_TYPE_BACKEND, CONFIG_TYPE_ROUTE)

OPERATION_CREATE = "CREATE"
OPERATION_UPDATE = "UPDATE"
OPERATION_DELETE = "DELETE"

__all__ = [
    "Base",
    "CONFIG_TYPES",
    "CONFIG_TYPE_BACKEND",
    "CONFIG_TYPE_ROUTE",
    "ConfigHistory",
    "DEFAULT_TIMEOUT_MS",
    "GatewayBackend",
    "GatewayRoute",
    "OPERATION_CREATE",
    "OPERATION_DELETE",
    "OPERATION_UPDATE",
    "OPERATOR_MAX_LENGTH",
    "TimestampMixin",
    "utcnow",
]
