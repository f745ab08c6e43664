# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/payment_method_enum.py

Taxonomía interna de métodos de pago (normalizada desde cada pasarela).
Sincronizado con el tipo ENUM de PostgreSQL: payment_method_enum.

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class PaymentMethod(StrEnum):
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    UPI = "UPI"
    NET_BANKING = "NET_BANKING"
    WALLET = "WALLET"
    EMI = "EMI"
    BANK_TRANSFER = "BANK_TRANSFER"

    __pg_enum_name__ = "payment_method_enum"

    @classmethod
    def as_pg_enum(
        cls,
        name: str = "payment_method_enum",
        schema: str | None = "public",
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


__all__ = ["PaymentMethod"]

# Fin del archivo backend/app/modules/payments/enums/payment_method_enum.py
