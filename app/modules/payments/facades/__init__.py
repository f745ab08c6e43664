# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/__init__.py

Punto de entrada del paquete de fachadas del módulo Payments.

Diseño:
- Cada fachada recibe (session, ctx, ...) y es dueña de su transacción:
  hace commit explícito; lo no confirmado lo revierte get_async_session.
- PaymentsContext agrupa las dependencias de proceso (registry de
  pasarelas, caché, cola diferida, notificador, email).

  Ejemplos de uso:

      from app.modules.payments.facades import initiate_checkout, verify_payment
      from app.modules.payments.facades.webhooks import handle_webhook

Autor: CourseMart
Fecha: 2026-03-14
"""

from .context import PaymentsContext, fulfillment_job_id
from .checkout import initiate_checkout
from .verification import evidence_from_request, verify_payment
from .refunds import process_refund, request_refund
from .lifecycle import cancel_payment, retry_payment
from .queries import (
    get_gateway_status,
    get_payment_details,
    get_purchase_history,
    list_refund_requests,
)
from .webhooks import handle_webhook

__all__ = [
    "PaymentsContext",
    "fulfillment_job_id",
    "initiate_checkout",
    "evidence_from_request",
    "verify_payment",
    "request_refund",
    "process_refund",
    "retry_payment",
    "cancel_payment",
    "get_purchase_history",
    "get_payment_details",
    "list_refund_requests",
    "get_gateway_status",
    "handle_webhook",
]

# Fin del archivo backend/app/modules/payments/facades/__init__.py
