# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/refund_request_status_enum.py

Estado de una solicitud de reembolso y decisión del administrador.
PROCESSING marca la aprobación en curso (reembolso pedido al proveedor).
Sincronizado con el tipo ENUM de PostgreSQL: refund_request_status_enum.

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class RefundRequestStatus(StrEnum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"

    __pg_enum_name__ = "refund_request_status_enum"

    @classmethod
    def as_pg_enum(
        cls, name: str = "refund_request_status_enum", schema: str | None = "public"
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)

    @property
    def is_decidable(self) -> bool:
        """PENDING se decide por primera vez; FAILED admite reintentar la aprobación."""
        return self in (RefundRequestStatus.PENDING, RefundRequestStatus.FAILED)


class RefundDecision(StrEnum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


__all__ = ["RefundRequestStatus", "RefundDecision"]

# Fin del archivo backend/app/modules/payments/enums/refund_request_status_enum.py
