# -*- coding: utf-8 -*-
"""
backend/app/shared/middleware/exception_handler.py

Última red de seguridad HTTP: cualquier excepción que no sea un
PaymentsError (esos los traduce routes/exception_handlers.py) termina
aquí como 500 con el sobre `{success: false, message, error}`.

El request id se toma de X-Request-ID / X-Correlation-ID o se genera, y
viaja en request.state para que los logs de pagos lo citen.

Autor: CourseMart
Fecha: 2026-03-05
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Mapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.shared.utils.json_response import error_response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_INBOUND_ID_HEADERS = ("x-request-id", "x-correlation-id")


def resolve_request_id(headers: Mapping[str, str]) -> str:
    for name in _INBOUND_ID_HEADERS:
        value = (headers.get(name) or "").strip()
        if value:
            return value[:64]
    return uuid.uuid4().hex[:16]


def request_id_of(request: Request) -> str:
    """Id ya asignado al request, o uno nuevo si el middleware no corrió."""
    current = getattr(request.state, "request_id", None)
    if not current:
        current = resolve_request_id(request.headers)
        request.state.request_id = current
    return current


class JSONExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request_id_of(request)
        try:
            response = await call_next(request)
        except Exception:
            # el estado del pago es desconocido: el cliente debe consultar /details
            logger.exception(
                "unhandled_exception request_id=%s %s %s",
                request_id, request.method, request.url.path,
            )
            return error_response(
                500,
                "Internal server error",
                code="INTERNAL_SERVER_ERROR",
                details={"request_id": request_id},
                headers={REQUEST_ID_HEADER: request_id},
            )
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
        return response


__all__ = ["JSONExceptionMiddleware", "REQUEST_ID_HEADER", "request_id_of", "resolve_request_id"]

# Fin del archivo backend/app/shared/middleware/exception_handler.py
