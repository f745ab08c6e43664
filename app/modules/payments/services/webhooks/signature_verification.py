# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/webhooks/signature_verification.py

Verificación de firmas de webhooks de pasarelas.

- Stripe: header `Stripe-Signature: t=...,v1=...`, HMAC-SHA256 sobre
  "{t}.{body}" con el webhook secret y tolerancia de timestamp.
- Razorpay: header `X-Razorpay-Signature`, HMAC-SHA256 hex del body crudo
  con el webhook secret.
- PayPal: no hay HMAC local; se delega en PayPalAdapter
  (/v1/notifications/verify-webhook-signature).

IMPORTANTE:
- El bypass inseguro SOLO funciona con allow_insecure_webhooks=true Y
  PYTHON_ENV=development. Tests y producción siempre verifican.

Autor: CourseMart
Fecha: 2026-03-11
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from typing import Dict, Mapping, Optional

from app.shared.config import get_settings
from app.shared.config.settings_payments import PaymentsSettings, get_payments_settings
from app.modules.payments.enums import PaymentGateway

logger = logging.getLogger(__name__)

STRIPE_SIGNATURE_HEADER = "stripe-signature"
RAZORPAY_SIGNATURE_HEADER = "x-razorpay-signature"
PAYPAL_TRANSMISSION_HEADER = "paypal-transmission-id"


# =============================================================================
# ENVIRONMENT CHECKS
# =============================================================================

def insecure_webhooks_allowed(settings: Optional[PaymentsSettings] = None) -> bool:
    """
    Bypass de verificación: flag activo Y entorno de desarrollo.
    Con el flag fuera de desarrollo se registra el intento y se ignora.
    """
    settings = settings or get_payments_settings()
    if not settings.allow_insecure_webhooks:
        return False

    env = str(get_settings().python_env).lower()
    if env not in ("development", "dev", "local"):
        logger.error(
            "SECURITY VIOLATION: allow_insecure_webhooks=true en entorno %s. "
            "Ignorando flag y forzando verificación real.",
            env,
        )
        return False

    logger.warning(
        "DESARROLLO: Verificación de webhooks deshabilitada. "
        "Esto NUNCA debe ocurrir en producción."
    )
    return True


# =============================================================================
# DETECCIÓN DE PROVEEDOR
# =============================================================================

def detect_gateway(headers: Mapping[str, str]) -> Optional[PaymentGateway]:
    """Proveedor según el header de firma presente; None si no se reconoce."""
    lowered = {k.lower(): v for k, v in headers.items()}
    if STRIPE_SIGNATURE_HEADER in lowered:
        return PaymentGateway.STRIPE
    if RAZORPAY_SIGNATURE_HEADER in lowered:
        return PaymentGateway.RAZORPAY
    if PAYPAL_TRANSMISSION_HEADER in lowered:
        return PaymentGateway.PAYPAL
    return None


# =============================================================================
# STRIPE
# =============================================================================

def _parse_stripe_header(signature_header: str) -> Dict[str, list]:
    elements: Dict[str, list] = {}
    for item in signature_header.split(","):
        item = item.strip()
        if "=" in item:
            key, value = item.split("=", 1)
            elements.setdefault(key, []).append(value)
    return elements


def compute_stripe_signature(secret: str, timestamp: int, payload: bytes) -> str:
    signed_payload = f"{timestamp}.".encode("utf-8") + payload
    return hmac.new(secret.encode("utf-8"), msg=signed_payload, digestmod=hashlib.sha256).hexdigest()


def verify_stripe_signature(
    payload: bytes,
    signature_header: Optional[str],
    webhook_secret: Optional[str] = None,
    tolerance_seconds: Optional[int] = None,
    *,
    now: Optional[float] = None,
) -> bool:
    """
    Verifica la firma de un webhook de Stripe.

    Args:
        payload: Body crudo del request
        signature_header: Header Stripe-Signature
        webhook_secret: Secret del webhook (whsec_...); por defecto el de settings
        tolerance_seconds: Tolerancia de timestamp; por defecto la de settings

    Returns:
        True si alguna firma v1 coincide dentro de la tolerancia
    """
    settings = get_payments_settings()
    if insecure_webhooks_allowed(settings):
        return True

    webhook_secret = webhook_secret or settings.stripe_webhook_secret
    if tolerance_seconds is None:
        tolerance_seconds = settings.stripe_webhook_tolerance_seconds

    if not signature_header:
        logger.warning("Stripe webhook rechazado: falta header Stripe-Signature")
        return False
    if not webhook_secret:
        logger.error("Stripe webhook rechazado: STRIPE_WEBHOOK_SECRET no configurado.")
        return False

    elements = _parse_stripe_header(signature_header)
    timestamp_str = elements.get("t", [None])[0]
    signatures_v1 = elements.get("v1", [])
    if not timestamp_str or not signatures_v1:
        logger.warning("Stripe webhook rechazado: header sin timestamp o firma v1")
        return False

    try:
        timestamp = int(timestamp_str)
    except ValueError:
        logger.warning("Stripe webhook rechazado: timestamp inválido %r", timestamp_str)
        return False

    current = int(now if now is not None else time.time())
    if abs(current - timestamp) > tolerance_seconds:
        logger.warning(
            "Stripe webhook rechazado: timestamp fuera de tolerancia (%ss > %ss)",
            abs(current - timestamp), tolerance_seconds,
        )
        return False

    expected = compute_stripe_signature(webhook_secret, timestamp, payload)
    for sig in signatures_v1:
        if hmac.compare_digest(expected, sig):
            return True

    logger.warning("Stripe webhook rechazado: ninguna firma v1 coincide")
    return False


# =============================================================================
# RAZORPAY
# =============================================================================

def compute_razorpay_webhook_signature(secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), msg=payload, digestmod=hashlib.sha256).hexdigest()


def verify_razorpay_webhook_signature(
    payload: bytes,
    signature_header: Optional[str],
    webhook_secret: Optional[str] = None,
) -> bool:
    settings = get_payments_settings()
    if insecure_webhooks_allowed(settings):
        return True

    webhook_secret = webhook_secret or settings.razorpay_webhook_secret
    if not signature_header:
        logger.warning("Razorpay webhook rechazado: falta header X-Razorpay-Signature")
        return False
    if not webhook_secret:
        logger.error("Razorpay webhook rechazado: RAZORPAY_WEBHOOK_SECRET no configurado.")
        return False

    expected = compute_razorpay_webhook_signature(webhook_secret, payload)
    if hmac.compare_digest(expected, signature_header.strip()):
        return True

    logger.warning("Razorpay webhook rechazado: firma no coincide")
    return False


__all__ = [
    "PAYPAL_TRANSMISSION_HEADER",
    "RAZORPAY_SIGNATURE_HEADER",
    "STRIPE_SIGNATURE_HEADER",
    "compute_razorpay_webhook_signature",
    "compute_stripe_signature",
    "detect_gateway",
    "insecure_webhooks_allowed",
    "verify_razorpay_webhook_signature",
    "verify_stripe_signature",
]

# Fin del archivo backend/app/modules/payments/services/webhooks/signature_verification.py
