import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.v1.backend_routes import router as backend_router
from .api.v1.history_routes import router as history_router
from .api.v1.route_routes import router as route_router
from .deps import close_config_store
from .errors import status_code_for, to_http_error
from .exceptions import ConfigStoreError
from .logging_config import logger


async def handle_config_store_error(request: Request, exc: ConfigStoreError):
    """
    把 service / store 抛出的领域错误映射为唯一的 HTTP 结果。
    """
    if status_code_for(exc) >= 500:
        logger.error(
            "Storage failure on %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
    http_exc = to_http_error(exc)
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


async def handle_unexpected_error(request: Request, exc: Exception):
    """
    全局异常处理器，统一返回结构化错误响应并打印日志。
    """

    error_id = uuid.uuid4().hex
    logger.error(
        "Unhandled error %s %s (error_id=%s)",
        request.method,
        request.url.path,
        error_id,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error_code": "internal_error",
            "message": "服务器内部错误，请稍后再试",
            "error_id": error_id,
        },
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理：
    - startup: 执行数据库迁移（仅在显式启用且为 Postgres 时）
    - shutdown: 释放配置存储持有的连接池
    """
    from .db.migration_runner import auto_upgrade_database

    auto_upgrade_database()

    yield

    close_config_store()
    logger.info("Config store closed.")


def create_app() -> FastAPI:
    from fastapi.middleware.cors import CORSMiddleware

    from .middleware import RequestLoggerMiddleware
    from .settings import settings

    # 解析 CORS 配置
    cors_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",")] if settings.cors_allow_origins else []
    cors_methods = [method.strip() for method in settings.cors_allow_methods.split(",")] if settings.cors_allow_methods != "*" else ["*"]
    cors_headers = [header.strip() for header in settings.cors_allow_headers.split(",")] if settings.cors_allow_headers != "*" else ["*"]

    docs_url = "/docs" if settings.enable_api_docs else None
    redoc_url = "/redoc" if settings.enable_api_docs else None
    openapi_url = "/openapi.json" if settings.enable_api_docs else None

    app = FastAPI(
        title="Gateway Admin",
        version="0.1.0",
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )
    app.add_exception_handler(ConfigStoreError, handle_config_store_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    if not settings.enable_api_docs:
        logger.info(
            "API docs routes are disabled (environment=%s); set ENABLE_API_DOCS=true to enable.",
            settings.environment,
        )

    app.add_middleware(RequestLoggerMiddleware)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=cors_methods,
        allow_headers=cors_headers,
    )

    # 配置管理路由
    app.include_router(backend_router)
    app.include_router(route_router)
    app.include_router(history_router)

    @app.get("/health", tags=["system"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


__all__ = ["create_app", "handle_config_store_error", "handle_unexpected_error", "lifespan"]
