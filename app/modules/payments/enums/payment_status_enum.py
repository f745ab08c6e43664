# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/payment_status_enum.py

Enum de estados del pago y transiciones legales.
Sincronizado con el tipo ENUM de PostgreSQL: payment_status_enum.

    PENDING ──► COMPLETED ──► REFUNDED
       ├──────► FAILED
       └──────► CANCELLED

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class PaymentStatus(StrEnum):
    """Estado del pago en el pipeline de checkout."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    __pg_enum_name__ = "payment_status_enum"

    @classmethod
    def as_pg_enum(
        cls,
        name: str = "payment_status_enum",
        schema: str | None = "public",
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)

    def can_transition_to(self, target: "PaymentStatus") -> bool:
        return target in ALLOWED_TRANSITIONS.get(self, frozenset())

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS.get(self)


ALLOWED_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.CANCELLED}
    ),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
}


__all__ = ["PaymentStatus", "ALLOWED_TRANSITIONS"]

# Fin del archivo backend/app/modules/payments/enums/payment_status_enum.py
