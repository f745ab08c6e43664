# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/earning_status_enum.py

Estado de la ganancia del instructor por curso y pago.
Sincronizado con el tipo ENUM de PostgreSQL: earning_status_enum.

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class EarningStatus(StrEnum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"
    ON_HOLD = "ON_HOLD"

    __pg_enum_name__ = "earning_status_enum"

    @classmethod
    def as_pg_enum(
        cls,
        name: str = "earning_status_enum",
        schema: str | None = "public",
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


__all__ = ["EarningStatus"]

# Fin del archivo backend/app/modules/payments/enums/earning_status_enum.py
