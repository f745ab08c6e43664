# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/payment_gateway_enum.py

Pasarelas de pago soportadas por el checkout.
Sincronizado con el tipo ENUM de PostgreSQL: payment_gateway_enum.

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class PaymentGateway(StrEnum):
    RAZORPAY = "RAZORPAY"
    STRIPE = "STRIPE"
    STRIPE_CHECKOUT = "STRIPE_CHECKOUT"
    PAYU = "PAYU"
    PAYPAL = "PAYPAL"

    __pg_enum_name__ = "payment_gateway_enum"

    @classmethod
    def as_pg_enum(
        cls,
        name: str = "payment_gateway_enum",
        schema: str | None = "public",
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


__all__ = ["PaymentGateway"]

# Fin del archivo backend/app/modules/payments/enums/payment_gateway_enum.py
