from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from gateway_admin.deps import get_config_store, get_operator
from gateway_admin.errors import bad_request
from gateway_admin.repositories import ConfigStore
from gateway_admin.schemas import BackendCreateRequest, BackendResponse, BackendUpdateRequest
from gateway_admin.services import backend_service

router = APIRouter(prefix="/api/v1", tags=["backends"])

# 区分大小写；yes/no/on/off 等写法一律视为非法
_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_enabled_filter(enabled: str | None = Query(default=None)) -> bool | None:
    """`?enabled=true|false`；缺省或空串表示不过滤。"""
    if enabled is None or enabled == "":
        return None
    if enabled in _TRUE_VALUES:
        return True
    if enabled in _FALSE_VALUES:
        return False
    raise bad_request("invalid enabled parameter", details={"enabled": enabled})


@router.get("/backends", response_model=list[BackendResponse])
def list_backends(
    enabled: bool | None = Depends(parse_enabled_filter),
    store: ConfigStore = Depends(get_config_store),
) -> list[BackendResponse]:
    backends = backend_service.list_backends(store, enabled=enabled)
    return [BackendResponse.model_validate(b) for b in backends]


@router.get("/backends/{name}", response_model=BackendResponse)
def get_backend(
    name: str,
    store: ConfigStore = Depends(get_config_store),
) -> BackendResponse:
    return BackendResponse.model_validate(backend_service.get_backend(store, name))


@router.post("/backends", response_model=BackendResponse, status_code=status.HTTP_201_CREATED)
def create_backend(
    payload: BackendCreateRequest,
    store: ConfigStore = Depends(get_config_store),
    operator: str | None = Depends(get_operator),
) -> BackendResponse:
    created = backend_service.create_backend(
        store,
        payload.model_dump(exclude_unset=True),
        operator=operator,
    )
    return BackendResponse.model_validate(created)


@router.put("/backends/{name}", response_model=BackendResponse)
def update_backend(
    name: str,
    payload: BackendUpdateRequest,
    store: ConfigStore = Depends(get_config_store),
    operator: str | None = Depends(get_operator),
) -> BackendResponse:
    # exclude_unset 保留“字段是否出现”的信息，合并策略依赖它区分 enabled 缺省与 false
    updated = backend_service.update_backend(
        store,
        name,
        payload.model_dump(exclude_unset=True),
        operator=operator,
    )
    return BackendResponse.model_validate(updated)


@router.delete("/backends/{name}", status_code=status.HTTP_204_NO_CONTENT)
def delete_backend(
    name: str,
    store: ConfigStore = Depends(get_config_store),
    operator: str | None = Depends(get_operator),
) -> Response:
    backend_service.delete_backend(store, name, operator=operator)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["parse_enabled_filter", "router"]
