# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas/common_schemas.py

Esquemas comunes del módulo Payments: base camelCase, sobre de respuesta
y metadatos de paginación.

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Campos snake_case en Python, camelCase en el JSON (entrada y salida)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PageMeta(CamelModel):
    """
    Metadatos de paginación para respuestas con listas.
    """

    page: int = Field(ge=1, description="Página actual (1-based).")
    limit: int = Field(ge=1, description="Límite de registros por página.")
    total: int = Field(ge=0, description="Número total de registros.")
    pages: int = Field(ge=0, description="Número total de páginas.")

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> "PageMeta":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit)


class ApiResponse(BaseModel, Generic[T]):
    """Sobre estándar de éxito: {success, message, data}."""

    success: bool = True
    message: str = "OK"
    data: Optional[T] = None


__all__ = ["ApiResponse", "CamelModel", "PageMeta"]

# Fin del archivo backend/app/modules/payments/schemas/common_schemas.py
