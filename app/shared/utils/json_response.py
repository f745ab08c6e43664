# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/json_response.py

Respuestas JSON con charset UTF-8 explícito y sobre estándar
`{success, message, data | error}`.

Este módulo proporciona:
1. UTF8JSONResponse: default_response_class de la app FastAPI
2. success_envelope / error_envelope: construcción del sobre
3. error_response: JSONResponse de error ya envuelta

Autor: CourseMart
Fecha: 2026-03-05
"""

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


class UTF8JSONResponse(JSONResponse):
    """JSONResponse con Content-Type: application/json; charset=utf-8."""
    media_type = "application/json; charset=utf-8"


def success_envelope(data: Any = None, message: str = "OK") -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def error_envelope(
    message: str,
    *,
    code: str,
    state_changed: bool = False,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Sobre de error. `state_changed` distingue "no pasó nada, reintenta la
    misma llamada" de "hubo una transición de estado".
    """
    return {
        "success": False,
        "message": message,
        "error": {
            "code": code,
            "state_changed": state_changed,
            "details": details or {},
        },
    }


def error_response(
    status_code: int,
    message: str,
    *,
    code: str,
    state_changed: bool = False,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> UTF8JSONResponse:
    return UTF8JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            error_envelope(message, code=code, state_changed=state_changed, details=details)
        ),
        headers=headers,
    )


__all__ = [
    "UTF8JSONResponse",
    "success_envelope",
    "error_envelope",
    "error_response",
]

# Fin del archivo backend/app/shared/utils/json_response.py
