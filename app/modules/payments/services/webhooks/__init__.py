# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/webhooks/__init__.py

Servicios relacionados con webhooks de pagos.

Autor: CourseMart
Fecha: 2026-03-11
"""

from .signature_verification import (
    detect_gateway,
    verify_razorpay_webhook_signature,
    verify_stripe_signature,
)
from .webhook_events import WebhookEvent, compute_payload_hash, parse_webhook_event

__all__ = [
    # Verificación de firmas
    "detect_gateway",
    "verify_razorpay_webhook_signature",
    "verify_stripe_signature",

    # Eventos
    "WebhookEvent",
    "compute_payload_hash",
    "parse_webhook_event",
]
