"""
HTTP middleware for the admin API.
"""

from .request_logger import RequestLoggerMiddleware

__all__ = ["RequestLoggerMiddleware"]
