"""
Access logging middleware for the admin API.
"""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from gateway_admin.logging_config import logger


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """记录每个请求的方法、路径、状态码与耗时。"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1fms) operator=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.headers.get("X-Operator") or "-",
        )
        return response
