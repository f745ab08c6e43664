# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/__init__.py

Superficie de exportación de servicios del módulo Payments.

Incluye:
- CheckoutSessionStore (sesiones checkout:{orderId})
- CouponService
- pricing (totales y order ids)
- DatabaseNotificationDispatcher
- FulfillmentService

Los webhooks viven en services.webhooks y se importan desde ahí.

Autor: CourseMart
Fecha: 2026-03-10
"""

from .checkout_session_store import CheckoutSession, CheckoutSessionStore, session_key
from .coupon_service import CouponApplication, CouponService, compute_discount
from .pricing import OrderTotals, compute_totals, generate_order_id, round_money
from .notification_service import DatabaseNotificationDispatcher
from .fulfillment_service import FulfillmentResult, FulfillmentService

__all__ = [
    "CheckoutSession",
    "CheckoutSessionStore",
    "session_key",
    "CouponApplication",
    "CouponService",
    "compute_discount",
    "OrderTotals",
    "compute_totals",
    "generate_order_id",
    "round_money",
    "DatabaseNotificationDispatcher",
    "FulfillmentResult",
    "FulfillmentService",
]

# Fin del archivo backend/app/modules/payments/services/__init__.py
