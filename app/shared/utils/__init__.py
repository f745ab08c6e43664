# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/__init__.py

Utilidades comunes de respuesta HTTP.

Autor: CourseMart
Fecha: 2026-03-02
"""

from .json_response import UTF8JSONResponse, error_envelope, error_response, success_envelope

__all__ = [
    "UTF8JSONResponse",
    "error_envelope",
    "error_response",
    "success_envelope",
]

# Fin del archivo backend/app/shared/utils/__init__.py
