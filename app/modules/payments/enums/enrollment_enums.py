# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/enrollment_enums.py

Estado y origen de una inscripción.
Sincronizados con enrollment_status_enum y enrollment_source_enum.

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class EnrollmentStatus(StrEnum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"
    REFUNDED = "REFUNDED"
    SUSPENDED = "SUSPENDED"

    __pg_enum_name__ = "enrollment_status_enum"

    @classmethod
    def as_pg_enum(
        cls, name: str = "enrollment_status_enum", schema: str | None = "public"
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


# Estados que cuentan como "ya inscrito" para bloquear una nueva compra
# y como "inscripción vigente" para admitir una solicitud de reembolso.
HOLDING_ENROLLMENT_STATUSES = frozenset(
    {EnrollmentStatus.ACTIVE, EnrollmentStatus.COMPLETED}
)


class EnrollmentSource(StrEnum):
    PURCHASE = "PURCHASE"
    FREE = "FREE"
    ADMIN = "ADMIN"

    __pg_enum_name__ = "enrollment_source_enum"

    @classmethod
    def as_pg_enum(
        cls, name: str = "enrollment_source_enum", schema: str | None = "public"
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


__all__ = ["EnrollmentStatus", "EnrollmentSource", "HOLDING_ENROLLMENT_STATUSES"]

# Fin del archivo backend/app/modules/payments/enums/enrollment_enums.py
