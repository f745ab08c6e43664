# -*- coding: utf-8 -*-
"""
backend/app/shared/middleware/__init__.py

Middlewares HTTP: request id + 500 en JSON, y log por request.
"""

from .exception_handler import JSONExceptionMiddleware, REQUEST_ID_HEADER, request_id_of
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "JSONExceptionMiddleware",
    "REQUEST_ID_HEADER",
    "RequestLoggingMiddleware",
    "request_id_of",
]
