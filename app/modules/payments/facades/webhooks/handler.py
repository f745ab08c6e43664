# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/webhooks/handler.py

Receptor unificado de webhooks de pasarelas.

Pasos:
1. Detecta el proveedor por header de firma (o por el segmento de ruta)
2. Verifica la firma (401 si no es válida; el pago no se toca)
3. Normaliza el payload a WebhookEvent
4. Despacha por categoría:
   - completion: CAS PENDING→COMPLETED + fulfillment diferido
   - failure:    CAS PENDING→FAILED + liberación de cupón + notificación
   - refund:     registra gatewayRefundStatus en metadata
   - dispute:    agrega la disputa a metadata.disputes
   - resto:      se reconoce y se ignora

Con firma válida siempre se responde 200, para que el proveedor no reintente
eventos ya manejados o que no nos interesan.

Autor: CourseMart
Fecha: 2026-03-14
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.services.notifications import NotificationType, safe_notify
from app.modules.payments.enums import PaymentGateway, PaymentStatus
from app.modules.payments.errors import InvalidRequest
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.facades.webhooks.verify import verify_webhook_signature
from app.modules.payments.models.payment_models import Payment
from app.modules.payments.repositories import PaymentRepository
from app.modules.payments.schemas import WebhookAck
from app.modules.payments.services.webhooks import (
    WebhookEvent,
    detect_gateway,
    parse_webhook_event,
)
from app.modules.payments.services.webhooks.webhook_events import (
    COMPLETION,
    DISPUTE,
    FAILURE,
    REFUND,
)
from app.modules.payments.utils.datetime_helpers import to_iso8601, utcnow

logger = logging.getLogger(__name__)

# Familias de pasarela que comparten credenciales de webhook
_GATEWAY_FAMILIES: Dict[PaymentGateway, frozenset[PaymentGateway]] = {
    PaymentGateway.STRIPE: frozenset({PaymentGateway.STRIPE, PaymentGateway.STRIPE_CHECKOUT}),
    PaymentGateway.RAZORPAY: frozenset({PaymentGateway.RAZORPAY}),
    PaymentGateway.PAYPAL: frozenset({PaymentGateway.PAYPAL}),
}


def _resolve_gateway(headers: Mapping[str, str], gateway_hint: Optional[str]) -> PaymentGateway:
    detected = detect_gateway(headers)
    if detected is None:
        raise InvalidRequest("Unrecognised webhook provider")

    if gateway_hint:
        try:
            hinted = PaymentGateway(gateway_hint.strip().upper())
        except ValueError:
            raise InvalidRequest(
                "Unsupported gateway", details={"gateway": gateway_hint}
            ) from None
        if hinted not in _GATEWAY_FAMILIES[detected]:
            raise InvalidRequest(
                "Webhook headers do not match gateway",
                details={"gateway": hinted.value, "detected": detected.value},
            )
    return detected


def _decode_payload(raw_body: bytes) -> Dict[str, Any]:
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise InvalidRequest("Webhook payload is not valid JSON") from None
    if not isinstance(payload, dict):
        raise InvalidRequest("Webhook payload must be a JSON object")
    return payload


async def _locate_payment(
    session: AsyncSession,
    event: WebhookEvent,
) -> Optional[Payment]:
    payment = await PaymentRepository().find_for_webhook(
        session,
        order_id=event.order_id,
        transaction_ids=event.transaction_ids,
    )
    if payment is None:
        logger.warning(
            "webhook_payment_not_found gateway=%s event=%s order=%s txns=%s",
            event.gateway.value, event.event_type, event.order_id, event.transaction_ids,
        )
        return None
    if payment.gateway not in _GATEWAY_FAMILIES[event.gateway]:
        logger.warning(
            "webhook_gateway_mismatch payment=%s payment_gateway=%s event_gateway=%s",
            payment.id, payment.gateway, event.gateway.value,
        )
        return None
    return payment


# ------------------------------------------------------------------ #
# Manejadores por categoría
# ------------------------------------------------------------------ #
async def _handle_completion(session: AsyncSession, ctx: PaymentsContext, event: WebhookEvent) -> bool:
    payment = await _locate_payment(session, event)
    if payment is None:
        return False
    if payment.status == PaymentStatus.COMPLETED:
        logger.info("webhook_completion_noop payment=%s already completed", payment.id)
        return True
    if payment.status != PaymentStatus.PENDING:
        logger.warning(
            "webhook_completion_ignored payment=%s status=%s", payment.id, payment.status
        )
        return False

    values: Dict[str, Any] = {"gateway_response": event.object}
    if event.primary_transaction_id:
        values["transaction_id"] = event.primary_transaction_id
    method = event.method()
    if method is not None:
        values["method"] = method

    applied = await PaymentRepository().transition(
        session,
        payment.id,
        expected=PaymentStatus.PENDING,
        target=PaymentStatus.COMPLETED,
        **values,
    )
    await session.commit()

    if applied:
        logger.info("webhook_payment_completed payment=%s event=%s", payment.id, event.event_type)
        await ctx.enqueue_fulfillment(payment.id)
        return True

    # otro actor (verify) ganó el CAS
    await session.refresh(payment)
    return payment.status == PaymentStatus.COMPLETED


async def _handle_failure(session: AsyncSession, ctx: PaymentsContext, event: WebhookEvent) -> bool:
    payment = await _locate_payment(session, event)
    if payment is None:
        return False
    if payment.status != PaymentStatus.PENDING:
        logger.info(
            "webhook_failure_ignored payment=%s status=%s", payment.id, payment.status
        )
        return False

    error = event.object.get("last_payment_error") or {}
    reason = (
        (error.get("message") if isinstance(error, dict) else None)
        or event.object.get("error_description")
        or event.status
        or event.event_type
    )
    metadata = dict(payment.payment_metadata or {})
    errors = list(metadata.get("errors", []))
    errors.append({"stage": "webhook", "event": event.event_type, "reason": reason, "at": to_iso8601(utcnow())})
    metadata["errors"] = errors

    applied = await PaymentRepository().transition(
        session,
        payment.id,
        expected=PaymentStatus.PENDING,
        target=PaymentStatus.FAILED,
        payment_metadata=metadata,
    )
    if not applied:
        await session.rollback()
        return False

    released = await ctx.coupons.release_for_payment(session, payment.id)
    user_id = payment.user_id
    order_id = payment.order_id
    payment_id = payment.id
    await session.commit()

    logger.info(
        "webhook_payment_failed payment=%s event=%s coupons_released=%s",
        payment_id, event.event_type, released,
    )
    await ctx.session_store.delete(order_id)
    await safe_notify(
        ctx.notifier,
        user_id,
        NotificationType.PAYMENT_FAILED,
        "Payment Failed",
        "Your payment could not be processed. Please try again.",
        {"paymentId": payment_id, "orderId": order_id},
    )
    return True


async def _handle_refund(session: AsyncSession, event: WebhookEvent) -> bool:
    payment = await _locate_payment(session, event)
    if payment is None:
        return False
    await PaymentRepository().merge_metadata(
        session, payment, gatewayRefundStatus=event.audit_entry()
    )
    await session.commit()
    logger.info(
        "webhook_refund_recorded payment=%s status=%s", payment.id, event.status
    )
    return True


async def _handle_dispute(session: AsyncSession, event: WebhookEvent) -> bool:
    payment = await _locate_payment(session, event)
    if payment is None:
        return False
    disputes = list((payment.payment_metadata or {}).get("disputes", []))
    disputes.append(event.audit_entry())
    await PaymentRepository().merge_metadata(session, payment, disputes=disputes)
    await session.commit()
    logger.warning(
        "webhook_dispute_recorded payment=%s event=%s total=%s",
        payment.id, event.event_type, len(disputes),
    )
    return True


# ------------------------------------------------------------------ #
# Entrada
# ------------------------------------------------------------------ #
async def handle_webhook(
    session: AsyncSession,
    ctx: PaymentsContext,
    *,
    headers: Mapping[str, str],
    raw_body: bytes,
    gateway_hint: Optional[str] = None,
) -> WebhookAck:
    """
    Verifica y procesa un webhook.

    Raises:
        InvalidRequest: proveedor no reconocido o payload inválido (400)
        WebhookSignatureInvalid: firma inválida (401)
    """
    gateway = _resolve_gateway(headers, gateway_hint)
    await verify_webhook_signature(
        gateway, registry=ctx.registry, headers=headers, raw_body=raw_body
    )

    event = parse_webhook_event(gateway, _decode_payload(raw_body), raw_body)
    logger.info(
        "webhook_received gateway=%s event=%s category=%s id=%s",
        gateway.value, event.event_type, event.category, event.event_id,
    )

    if event.category == COMPLETION:
        handled = await _handle_completion(session, ctx, event)
    elif event.category == FAILURE:
        handled = await _handle_failure(session, ctx, event)
    elif event.category == REFUND:
        handled = await _handle_refund(session, event)
    elif event.category == DISPUTE:
        handled = await _handle_dispute(session, event)
    else:
        handled = False

    return WebhookAck(gateway=gateway.value, event=event.event_type, handled=handled)


__all__ = ["handle_webhook"]

# Fin del archivo backend/app/modules/payments/facades/webhooks/handler.py
