# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas/checkout_schemas.py

Contratos de checkout y verificación de pago.

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from .common_schemas import CamelModel


class CheckoutRequest(CamelModel):
    """
    Payload de entrada para iniciar un checkout.

    Los course ids duplicados se colapsan; el gateway se valida contra el
    registro de pasarelas disponibles (no aquí).
    """

    course_ids: list[int] = Field(min_length=1, description="Cursos a comprar.")
    gateway: str = Field(min_length=1, description="RAZORPAY | STRIPE | STRIPE_CHECKOUT | PAYU | PAYPAL")
    coupon_code: Optional[str] = Field(default=None, max_length=64)
    billing_address: Optional[dict[str, Any]] = None

    @field_validator("course_ids")
    @classmethod
    def validate_course_ids(cls, value: list[int]) -> list[int]:
        if any(v <= 0 for v in value):
            raise ValueError("course ids must be positive")
        return list(dict.fromkeys(value))


class CheckoutCourse(CamelModel):
    id: int
    title: str
    slug: Optional[str] = None
    price: Decimal


class AmountBreakdown(CamelModel):
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    currency: str = "INR"


class GatewayCheckout(CamelModel):
    """
    Lo que el frontend necesita para completar el pago:
    - RAZORPAY: gateway_order_id + keyId en public_config (checkout.js)
    - STRIPE_CHECKOUT / PAYPAL: redirect_url
    - STRIPE: client_secret (+ publishableKey en public_config)
    - PAYU: form_payload (action, method, fields)
    """

    gateway_order_id: str
    redirect_url: Optional[str] = None
    client_secret: Optional[str] = None
    form_payload: Optional[dict[str, Any]] = None
    public_config: dict[str, Any] = Field(default_factory=dict)


class CheckoutOut(CamelModel):
    order_id: str
    payment_id: int
    gateway: str
    checkout: GatewayCheckout
    amount: AmountBreakdown
    courses: list[CheckoutCourse]
    coupon_code: Optional[str] = None
    retry_of: Optional[int] = None


class VerifyRequest(CamelModel):
    """
    Evidencia que el cliente trae del proveedor tras pagar.

    provider_payment_id: razorpay_payment_id / PayPal order id / mihpayid ...
    provider_order_id:   orden Razorpay / intent / checkout session / txnid
    """

    order_id: str = Field(min_length=1)
    provider_payment_id: Optional[str] = None
    provider_order_id: Optional[str] = None
    signature: Optional[str] = None
    payer_id: Optional[str] = None
    status: Optional[str] = None
    extra: dict[str, Any] = Field(default_factory=dict)


class VerifyOut(CamelModel):
    payment_id: int
    order_id: str
    status: str
    already_processed: bool = False
    transaction_id: Optional[str] = None
    amount: Decimal
    course_ids: list[int] = Field(default_factory=list)


__all__ = [
    "AmountBreakdown",
    "CheckoutCourse",
    "CheckoutOut",
    "CheckoutRequest",
    "GatewayCheckout",
    "VerifyOut",
    "VerifyRequest",
]

# Fin del archivo backend/app/modules/payments/schemas/checkout_schemas.py
