from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from gateway_admin.deps import get_config_store, get_operator
from gateway_admin.repositories import ConfigStore
from gateway_admin.schemas import RouteCreateRequest, RouteResponse, RouteUpdateRequest
from gateway_admin.services import route_service

from .backend_routes import parse_enabled_filter

router = APIRouter(prefix="/api/v1", tags=["routes"])


@router.get("/routes", response_model=list[RouteResponse])
def list_routes(
    enabled: bool | None = Depends(parse_enabled_filter),
    store: ConfigStore = Depends(get_config_store),
) -> list[RouteResponse]:
    routes = route_service.list_routes(store, enabled=enabled)
    return [RouteResponse.model_validate(r) for r in routes]


@router.get("/routes/{route_id}", response_model=RouteResponse)
def get_route(
    route_id: int,
    store: ConfigStore = Depends(get_config_store),
) -> RouteResponse:
    return RouteResponse.model_validate(route_service.get_route(store, route_id))


@router.post("/routes", response_model=RouteResponse, status_code=status.HTTP_201_CREATED)
def create_route(
    payload: RouteCreateRequest,
    store: ConfigStore = Depends(get_config_store),
    operator: str | None = Depends(get_operator),
) -> RouteResponse:
    created = route_service.create_route(
        store,
        payload.model_dump(exclude_unset=True),
        operator=operator,
    )
    return RouteResponse.model_validate(created)


@router.put("/routes/{route_id}", response_model=RouteResponse)
def update_route(
    route_id: int,
    payload: RouteUpdateRequest,
    store: ConfigStore = Depends(get_config_store),
    operator: str | None = Depends(get_operator),
) -> RouteResponse:
    updated = route_service.update_route(
        store,
        route_id,
        payload.model_dump(exclude_unset=True),
        operator=operator,
    )
    return RouteResponse.model_validate(updated)


@router.delete("/routes/{route_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_route(
    route_id: int,
    store: ConfigStore = Depends(get_config_store),
    operator: str | None = Depends(get_operator),
) -> Response:
    route_service.delete_route(store, route_id, operator=operator)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
