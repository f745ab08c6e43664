# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/exception_handlers.py

Traducción de errores a respuestas HTTP con el sobre estándar
`{success: false, message, error: {code, state_changed, details}}`.

- PaymentsError        → http_status de la clase
- RequestValidationError → 422 VALIDATION_ERROR
- HTTPException        → su status (auth stub, rutas inexistentes)

Autor: CourseMart
Fecha: 2026-03-15
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.shared.utils.json_response import error_response
from app.modules.payments.errors import PaymentsError

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


async def payments_error_handler(request: Request, exc: PaymentsError):
    level = logging.WARNING if exc.http_status >= 500 else logging.INFO
    logger.log(
        level,
        "payments_error code=%s status=%s path=%s message=%s",
        exc.code, exc.http_status, request.url.path, exc.message,
    )
    return error_response(
        exc.http_status,
        exc.message,
        code=exc.code,
        state_changed=exc.state_changed,
        details=exc.details,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(
        422,
        "Validation error",
        code="VALIDATION_ERROR",
        details={"errors": jsonable_encoder(exc.errors())},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
    return error_response(
        exc.status_code,
        message,
        code=_HTTP_CODES.get(exc.status_code, "HTTP_ERROR"),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PaymentsError, payments_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)


__all__ = ["register_exception_handlers"]

# Fin del archivo backend/app/modules/payments/routes/exception_handlers.py
