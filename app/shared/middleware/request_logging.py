# -*- coding: utf-8 -*-
"""
backend/app/shared/middleware/request_logging.py

Una línea de log por request: método, ruta, status, duración e identidad
del usuario (X-User-Id) si viene. /health no se registra.

Autor: CourseMart
Fecha: 2026-03-05
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .exception_handler import request_id_of

logger = logging.getLogger(__name__)

SKIP_PREFIXES = ("/health", "/favicon.ico")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, skip_prefixes: Iterable[str] = SKIP_PREFIXES):
        super().__init__(app)
        self.skip_prefixes = tuple(skip_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path.startswith(self.skip_prefixes):
            return await call_next(request)

        request_id = request_id_of(request)
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            level = logging.WARNING if status >= 500 else logging.INFO
            logger.log(
                level,
                "http_request request_id=%s %s %s status=%d user=%s duration_ms=%.1f",
                request_id,
                request.method,
                path,
                status,
                request.headers.get("x-user-id", "-"),
                elapsed_ms,
            )


__all__ = ["RequestLoggingMiddleware"]

# Fin del archivo backend/app/shared/middleware/request_logging.py
