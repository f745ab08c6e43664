# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/currency_enum.py

Monedas de cobro.
Sincronizado con el tipo ENUM de PostgreSQL: currency_enum.

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class Currency(StrEnum):
    INR = "INR"
    USD = "USD"

    __pg_enum_name__ = "currency_enum"

    @classmethod
    def as_pg_enum(
        cls,
        name: str = "currency_enum",
        schema: str | None = "public",
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


__all__ = ["Currency"]

# Fin del archivo backend/app/modules/payments/enums/currency_enum.py
