# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas/__init__.py

Punto de entrada para los esquemas Pydantic del módulo Payments.

Incluye los contratos de:
- Checkout y verificación
- Historial / detalle / ciclo de vida de pagos
- Reembolsos
- Sobre de respuesta y paginación

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

from .common_schemas import ApiResponse, CamelModel, PageMeta
from .checkout_schemas import (
    AmountBreakdown,
    CheckoutCourse,
    CheckoutOut,
    CheckoutRequest,
    GatewayCheckout,
    VerifyOut,
    VerifyRequest,
)
from .refund_schemas import (
    RefundCreate,
    RefundDecisionIn,
    RefundProcessOut,
    RefundQueueItem,
    RefundQueueOut,
    RefundRequestOut,
)
from .payment_schemas import (
    CancelOut,
    EnrollmentOut,
    GatewayStatusItem,
    GatewayStatusOut,
    PaymentDetailsOut,
    PaymentOut,
    PurchaseHistoryItem,
    PurchaseHistoryOut,
    WebhookAck,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "PageMeta",
    "AmountBreakdown",
    "CheckoutCourse",
    "CheckoutOut",
    "CheckoutRequest",
    "GatewayCheckout",
    "VerifyOut",
    "VerifyRequest",
    "RefundCreate",
    "RefundDecisionIn",
    "RefundProcessOut",
    "RefundQueueItem",
    "RefundQueueOut",
    "RefundRequestOut",
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

# Fin del archivo backend/app/modules/payments/schemas/__init__.py
