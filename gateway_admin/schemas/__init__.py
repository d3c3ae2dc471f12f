from .backend import BackendCreateRequest, BackendResponse, BackendUpdateRequest
from .history import ConfigHistoryPage, ConfigHistoryResponse
from .route import RouteCreateRequest, RouteResponse, RouteUpdateRequest

__all__ = [
    "BackendCreateRequest",
    "BackendResponse",
    "BackendUpdateRequest",
    "ConfigHistoryPage",
    "ConfigHistoryResponse",
    "RouteCreateRequest",
    "RouteResponse",
    "RouteUpdateRequest",
]
