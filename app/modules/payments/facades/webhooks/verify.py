# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/webhooks/verify.py

Fachada de verificación de firmas de webhooks.

- Stripe / Razorpay: HMAC local (services.webhooks.signature_verification).
- PayPal: verificación async vía API oficial a través del adapter registrado.

Una firma inválida levanta WebhookSignatureInvalid (401); el pago no se toca.

Autor: CourseMart
Fecha: 2026-03-14
"""
from __future__ import annotations

import logging
from typing import Mapping

from app.modules.payments.adapters.registry import GatewayRegistry
from app.modules.payments.enums import PaymentGateway
from app.modules.payments.errors import WebhookSignatureInvalid
from app.modules.payments.services.webhooks.signature_verification import (
    RAZORPAY_SIGNATURE_HEADER,
    STRIPE_SIGNATURE_HEADER,
    insecure_webhooks_allowed,
    verify_razorpay_webhook_signature,
    verify_stripe_signature,
)

logger = logging.getLogger(__name__)


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


async def _verify_paypal(registry: GatewayRegistry, headers: Mapping[str, str], raw_body: bytes) -> bool:
    if insecure_webhooks_allowed():
        return True
    if PaymentGateway.PAYPAL not in registry:
        logger.error("PayPal webhook rechazado: pasarela PayPal no configurada")
        return False
    lowered = {k.lower(): v for k, v in headers.items()}
    adapter = registry.get(PaymentGateway.PAYPAL)
    return await adapter.verify_webhook_signature(lowered, raw_body)


async def verify_webhook_signature(
    gateway: PaymentGateway,
    *,
    registry: GatewayRegistry,
    headers: Mapping[str, str],
    raw_body: bytes,
) -> None:
    """
    Verifica la firma del webhook según el proveedor.

    Raises:
        WebhookSignatureInvalid: si la firma no es válida o falta configuración
    """
    if gateway == PaymentGateway.STRIPE:
        valid = verify_stripe_signature(raw_body, _header(headers, STRIPE_SIGNATURE_HEADER))
    elif gateway == PaymentGateway.RAZORPAY:
        valid = verify_razorpay_webhook_signature(raw_body, _header(headers, RAZORPAY_SIGNATURE_HEADER))
    elif gateway == PaymentGateway.PAYPAL:
        valid = await _verify_paypal(registry, headers, raw_body)
    else:
        valid = False

    if not valid:
        logger.warning("webhook_signature_invalid gateway=%s", gateway.value)
        raise WebhookSignatureInvalid(details={"gateway": gateway.value})


__all__ = ["verify_webhook_signature"]

# Fin del archivo backend/app/modules/payments/facades/webhooks/verify.py
