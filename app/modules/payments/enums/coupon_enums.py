# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/coupon_enums.py

Enums de cupones: tipo de descuento y alcance.
Sincronizados con coupon_type_enum y coupon_applicability_enum.

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class CouponType(StrEnum):
    """PERCENTAGE: value es un %; FIXED_AMOUNT: value es un monto."""

    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"

    __pg_enum_name__ = "coupon_type_enum"

    @classmethod
    def as_pg_enum(cls, name: str = "coupon_type_enum", schema: str | None = "public") -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


class CouponApplicability(StrEnum):
    ALL_COURSES = "ALL_COURSES"
    SPECIFIC_COURSES = "SPECIFIC_COURSES"

    __pg_enum_name__ = "coupon_applicability_enum"

    @classmethod
    def as_pg_enum(
        cls, name: str = "coupon_applicability_enum", schema: str | None = "public"
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


__all__ = ["CouponType", "CouponApplicability"]

# Fin del archivo backend/app/modules/payments/enums/coupon_enums.py
