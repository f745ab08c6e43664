# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/verification/verify_payment.py

Verificación de un pago a partir de la evidencia que trae el cliente.

Flujo:
    sesión checkout:{orderId} del usuario
      → Payment (COMPLETED: éxito idempotente; FAILED/CANCELLED/REFUNDED: SessionInvalid)
      → adapter.verify_completion
          False → CAS PENDING→FAILED + VerificationFailed (state_changed)
          True  → fetch_settled_details → CAS PENDING→COMPLETED → fulfillment diferido
La sesión habilita la verificación pero no es un lock: solo un verificador
gana el CAS; el resto responde already_processed=True.

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.payments.adapters.base import VerificationEvidence
from app.modules.payments.enums import PaymentStatus
from app.modules.payments.errors import SessionInvalid, VerificationFailed
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.models.payment_models import Payment
from app.modules.payments.repositories import PaymentRepository
from app.modules.payments.schemas import VerifyOut, VerifyRequest
from app.modules.payments.utils.datetime_helpers import to_iso8601, utcnow

logger = logging.getLogger(__name__)


def evidence_from_request(payload: VerifyRequest) -> VerificationEvidence:
    return VerificationEvidence(
        payment_id=payload.provider_payment_id,
        gateway_order_id=payload.provider_order_id,
        signature=payload.signature,
        payer_id=payload.payer_id,
        status=payload.status,
        extra=dict(payload.extra),
    )


def _verify_out(payment: Payment, *, already_processed: bool) -> VerifyOut:
    return VerifyOut(
        payment_id=payment.id,
        order_id=payment.order_id,
        status=str(payment.status),
        already_processed=already_processed,
        transaction_id=payment.transaction_id,
        amount=payment.amount,
        course_ids=payment.course_ids,
    )


async def _already_completed(ctx: PaymentsContext, payment: Payment) -> VerifyOut:
    # re-encolar cura un crash entre la transición y el fulfillment
    await ctx.enqueue_fulfillment(payment.id)
    logger.info("verify_already_processed payment=%s", payment.id)
    return _verify_out(payment, already_processed=True)


async def verify_payment(
    session: AsyncSession,
    ctx: PaymentsContext,
    *,
    user_id: int,
    order_id: str,
    evidence: VerificationEvidence,
) -> VerifyOut:
    payment_repo = PaymentRepository()

    # 1) Sesión de checkout
    checkout = await ctx.session_store.load(order_id)
    if checkout is None:
        # sin sesión: solo un pago ya completado del mismo usuario es válido
        payment: Optional[Payment] = await payment_repo.get_by_order_id(session, order_id)
        if (
            payment is not None
            and payment.user_id == user_id
            and payment.status == PaymentStatus.COMPLETED
        ):
            return await _already_completed(ctx, payment)
        raise SessionInvalid()
    if checkout.user_id != user_id:
        logger.warning("verify_session_user_mismatch order=%s user=%s", order_id, user_id)
        raise SessionInvalid()

    # 2) Payment
    payment = await payment_repo.get(session, checkout.payment_id)
    if payment is None or payment.user_id != user_id:
        raise SessionInvalid()
    if payment.status == PaymentStatus.COMPLETED:
        return await _already_completed(ctx, payment)
    if payment.status != PaymentStatus.PENDING:
        raise SessionInvalid(
            "Payment is no longer pending",
            details={"status": str(payment.status)},
        )

    # 3) Verificación contra la pasarela (GatewayUnavailable se propaga)
    adapter = ctx.registry.get(payment.gateway)
    verified = await adapter.verify_completion(evidence, checkout)

    if not verified:
        errors = list((payment.payment_metadata or {}).get("errors", []))
        errors.append({"stage": "verification", "reason": "evidence_rejected", "at": to_iso8601(utcnow())})
        applied = await payment_repo.transition(
            session,
            payment.id,
            expected=PaymentStatus.PENDING,
            target=PaymentStatus.FAILED,
            payment_metadata={**(payment.payment_metadata or {}), "errors": errors},
        )
        await session.commit()
        await session.refresh(payment)
        if not applied and payment.status == PaymentStatus.COMPLETED:
            return await _already_completed(ctx, payment)
        logger.warning("verify_rejected payment=%s order=%s", payment.id, order_id)
        raise VerificationFailed(details={"payment_id": payment.id, "order_id": order_id})

    # 4) Detalles liquidados + CAS PENDING→COMPLETED
    info = await adapter.fetch_settled_details(adapter.settlement_reference(evidence, checkout))
    applied = await payment_repo.transition(
        session,
        payment.id,
        expected=PaymentStatus.PENDING,
        target=PaymentStatus.COMPLETED,
        method=info.method,
        transaction_id=info.external_id,
        gateway_response=info.raw,
    )
    await session.commit()
    await session.refresh(payment)

    if not applied:
        if payment.status == PaymentStatus.COMPLETED:
            return _verify_out(payment, already_processed=True)
        raise SessionInvalid(
            "Payment is no longer pending",
            details={"status": str(payment.status)},
        )

    # 5) Fulfillment diferido; él borra la sesión al terminar
    await ctx.enqueue_fulfillment(payment.id)
    return _verify_out(payment, already_processed=False)


__all__ = ["evidence_from_request", "verify_payment"]

# Fin del archivo backend/app/modules/payments/facades/verification/verify_payment.py
