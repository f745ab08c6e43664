# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas/payment_schemas.py

Vistas de lectura de pagos: historial de compras, detalle, ciclo de vida
(retry / cancel) y estado de pasarelas.

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from .common_schemas import CamelModel, PageMeta
from .refund_schemas import RefundRequestOut


class PaymentOut(CamelModel):
    id: int
    order_id: str
    amount: Decimal
    original_amount: Decimal
    discount_amount: Decimal
    tax: Decimal
    currency: str
    status: str
    method: str
    gateway: str
    transaction_id: Optional[str] = None
    refund_amount: Optional[Decimal] = None
    refund_reason: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None


class EnrollmentOut(CamelModel):
    id: int
    course_id: int
    course_title: Optional[str] = None
    status: str
    created_at: datetime


class PurchaseHistoryItem(PaymentOut):
    enrollments: list[EnrollmentOut] = Field(default_factory=list)


class PurchaseHistoryOut(CamelModel):
    payments: list[PurchaseHistoryItem]
    pagination: PageMeta


class PaymentDetailsOut(CamelModel):
    payment: PaymentOut
    enrollments: list[EnrollmentOut] = Field(default_factory=list)
    refund_request: Optional[RefundRequestOut] = None
    coupon_code: Optional[str] = None
    course_ids: list[int] = Field(default_factory=list)
    retry_of: Optional[int] = None


class CancelOut(CamelModel):
    payment_id: int
    status: str
    coupon_usages_released: int = 0


class GatewayStatusItem(CamelModel):
    gateway: str
    enabled: bool
    configured: bool
    available: bool


class GatewayStatusOut(CamelModel):
    payments_enabled: bool
    currency: str
    gateways: list[GatewayStatusItem]
    available: list[str]


class WebhookAck(CamelModel):
    gateway: str
    event: str
    handled: bool


__all__ = [
    "CancelOut",
    "EnrollmentOut",
    "GatewayStatusItem",
    "GatewayStatusOut",
    "PaymentDetailsOut",
    "PaymentOut",
    "PurchaseHistoryItem",
    "PurchaseHistoryOut",
    "WebhookAck",
]

# Fin del archivo backend/app/modules/payments/schemas/payment_schemas.py
