# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/refunds/process_refund.py

Decisión del administrador sobre una solicitud de reembolso.

REJECT  → RefundRequest REJECTED (+notas, revisor, reviewed_at) y aviso.
APPROVE → la solicitud pasa a PROCESSING (CAS desde PENDING/FAILED, con
          commit) y solo quien la toma llama a create_refund con una
          clave de idempotencia por pago; si el proveedor acepta, una sola
          transacción:
              CAS Payment COMPLETED→REFUNDED (refund_amount/reason/refunded_at)
              RefundRequest APPROVED (+gateway_refund_id)
              Enrollments → REFUNDED, Earnings → CANCELLED
              contadores de curso e instructor menos la contribución del pago
          luego email + notificación + invalidación de caché.
          Si el proveedor declina o no responde: RefundRequest FAILED con
          error_message, Payment sigue COMPLETED y el error se propaga.

Solo se deciden solicitudes PENDING o FAILED. El uso de cupón no se toca.

Autor: CourseMart
Fecha: 2026-03-13
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.integrations.email_sender import safe_send_refund_processed
from app.shared.services.notifications import NotificationType, safe_notify
from app.modules.payments.enums import (
    EarningStatus,
    PaymentStatus,
    RefundDecision,
    RefundRequestStatus,
)
from app.modules.payments.errors import (
    GatewayUnavailable,
    InvalidRequest,
    InvalidStateTransition,
    NotFound,
    RefundRejected,
)
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.facades.serializers import refund_request_out
from app.modules.payments.models import Payment, RefundRequest
from app.modules.payments.repositories import (
    CourseRepository,
    EarningRepository,
    EnrollmentRepository,
    InstructorRepository,
    PaymentRepository,
    RefundRequestRepository,
    UserRepository,
)
from app.modules.payments.schemas import RefundProcessOut
from app.modules.payments.services.fulfillment_service import (
    course_cache_key,
    user_cache_keys,
)
from app.modules.payments.utils.datetime_helpers import utcnow

logger = logging.getLogger(__name__)


_DECIDABLE = (RefundRequestStatus.PENDING, RefundRequestStatus.FAILED)


def refund_idempotency_key(payment_id: int) -> str:
    """Un pago se reembolsa una sola vez: la clave no cambia entre reintentos."""
    return f"refund-{payment_id}"


def _review_values(admin_id: int, admin_notes: Optional[str]) -> dict:
    values = {"reviewed_by": admin_id, "reviewed_at": utcnow()}
    if admin_notes is not None:
        values["admin_notes"] = admin_notes
    return values


def _process_out(payment: Payment, action: RefundDecision, request: RefundRequest) -> RefundProcessOut:
    return RefundProcessOut(
        payment_id=payment.id,
        action=action.value,
        payment_status=str(payment.status),
        refund_amount=payment.refund_amount,
        refund_request=refund_request_out(request),
    )


async def _claim_lost(session: AsyncSession, payment_id: int, request_id: int) -> InvalidRequest:
    await session.rollback()
    logger.info("refund_decision_conflict payment=%s request=%s", payment_id, request_id)
    return InvalidRequest("Refund request is already being processed")


async def process_refund(
    session: AsyncSession,
    ctx: PaymentsContext,
    *,
    admin_id: int,
    payment_id: int,
    action: RefundDecision | str,
    admin_notes: Optional[str] = None,
) -> RefundProcessOut:
    try:
        action = RefundDecision(str(action).upper())
    except ValueError:
        raise InvalidRequest("Action must be APPROVE or REJECT") from None
    if not ctx.settings.refunds_enabled:
        raise InvalidRequest("Refunds are currently disabled")

    payment = await PaymentRepository().get(session, payment_id)
    if payment is None:
        raise NotFound()
    request = await RefundRequestRepository().get_by_payment(session, payment.id)
    if request is None:
        raise NotFound("Refund request not found")
    if not request.status.is_decidable:
        raise InvalidRequest(
            "Refund request has already been processed",
            details={"refund_status": str(request.status)},
        )

    if action == RefundDecision.REJECT:
        return await _reject(session, ctx, payment, request, admin_id=admin_id, admin_notes=admin_notes)
    return await _approve(session, ctx, payment, request, admin_id=admin_id, admin_notes=admin_notes)


# ------------------------------------------------------------------ #
# REJECT
# ------------------------------------------------------------------ #
async def _reject(
    session: AsyncSession,
    ctx: PaymentsContext,
    payment: Payment,
    request: RefundRequest,
    *,
    admin_id: int,
    admin_notes: Optional[str],
) -> RefundProcessOut:
    payment_id, user_id, request_id = payment.id, payment.user_id, request.id

    rejected = await RefundRequestRepository().transition(
        session,
        request_id,
        expected=_DECIDABLE,
        target=RefundRequestStatus.REJECTED,
        **_review_values(admin_id, admin_notes),
    )
    if not rejected:
        raise await _claim_lost(session, payment_id, request_id)
    await session.commit()
    await session.refresh(request)
    logger.info("refund_rejected payment=%s admin=%s", payment_id, admin_id)

    await safe_notify(
        ctx.notifier,
        user_id,
        NotificationType.REFUND_REJECTED,
        "Refund Request Rejected",
        "Your refund request has been reviewed and rejected",
        {"paymentId": payment_id, "adminNotes": admin_notes},
    )
    return _process_out(payment, RefundDecision.REJECT, request)


# ------------------------------------------------------------------ #
# APPROVE
# ------------------------------------------------------------------ #
async def _approve(
    session: AsyncSession,
    ctx: PaymentsContext,
    payment: Payment,
    request: RefundRequest,
    *,
    admin_id: int,
    admin_notes: Optional[str],
) -> RefundProcessOut:
    if payment.status != PaymentStatus.COMPLETED:
        raise InvalidStateTransition(
            "Only completed payments can be refunded",
            details={"status": str(payment.status)},
        )
    if not payment.transaction_id:
        raise InvalidRequest("Payment has no gateway reference to refund")

    # valores planos: los rollback de abajo expiran las instancias ORM
    payment_id, request_id = payment.id, request.id
    transaction_id = payment.transaction_id
    amount = Decimal(request.requested_amount)
    reason = request.reason
    adapter = ctx.registry.get(payment.gateway)
    refund_repo = RefundRequestRepository()

    # 1) Tomar la solicitud antes de mover dinero
    claimed = await refund_repo.transition(
        session,
        request_id,
        expected=_DECIDABLE,
        target=RefundRequestStatus.PROCESSING,
        **_review_values(admin_id, admin_notes),
    )
    if not claimed:
        raise await _claim_lost(session, payment_id, request_id)
    await session.commit()

    # 2) Reembolso en la pasarela
    try:
        refund = await adapter.create_refund(
            transaction_id,
            amount,
            reason,
            idempotency_key=refund_idempotency_key(payment_id),
        )
    except (RefundRejected, GatewayUnavailable) as exc:
        await refund_repo.transition(
            session,
            request_id,
            expected=(RefundRequestStatus.PROCESSING,),
            target=RefundRequestStatus.FAILED,
            error_message=exc.message,
        )
        await session.commit()
        logger.warning(
            "refund_failed payment=%s code=%s details=%s", payment_id, exc.code, exc.details
        )
        raise

    # 3) Estado local en una sola transacción
    earnings = [
        e for e in await EarningRepository().list_for_payment(session, payment_id)
        if e.status != EarningStatus.CANCELLED
    ]
    refund_amount = refund.amount if refund.amount is not None else amount

    applied = await PaymentRepository().transition(
        session,
        payment_id,
        expected=PaymentStatus.COMPLETED,
        target=PaymentStatus.REFUNDED,
        refund_amount=refund_amount,
        refund_reason=reason,
    )
    if not applied:
        await session.rollback()
        logger.error(
            "refund_cas_lost payment=%s provider_refund=%s", payment_id, refund.refund_id
        )
        await refund_repo.transition(
            session,
            request_id,
            expected=(RefundRequestStatus.PROCESSING,),
            target=RefundRequestStatus.FAILED,
            gateway_refund_id=refund.refund_id,
            error_message="Payment left COMPLETED before the refund was recorded",
        )
        await session.commit()
        raise InvalidStateTransition("Payment was refunded concurrently")

    await refund_repo.transition(
        session,
        request_id,
        expected=(RefundRequestStatus.PROCESSING,),
        target=RefundRequestStatus.APPROVED,
        gateway_refund_id=refund.refund_id,
        processed_at=utcnow(),
        error_message=None,
    )

    await EnrollmentRepository().mark_refunded(session, payment_id)
    await EarningRepository().cancel_for_payment(session, payment_id)
    course_repo = CourseRepository()
    instructor_repo = InstructorRepository()
    for earning in earnings:
        await course_repo.adjust_counters(
            session, earning.course_id, enrollments=-1, revenue=-Decimal(earning.amount)
        )
        await instructor_repo.adjust_totals(
            session, earning.instructor_id, students=-1, revenue=-Decimal(earning.commission)
        )

    await session.commit()
    await session.refresh(payment)
    await session.refresh(request)
    logger.info(
        "refund_approved payment=%s amount=%s provider_refund=%s admin=%s",
        payment_id, refund_amount, refund.refund_id, admin_id,
    )

    await _after_refund(ctx, session, payment, [e.course_id for e in earnings], refund.refund_id)
    return _process_out(payment, RefundDecision.APPROVE, request)


async def _after_refund(
    ctx: PaymentsContext,
    session: AsyncSession,
    payment: Payment,
    course_ids: list[int],
    refund_id: Optional[str],
) -> None:
    courses = list(await CourseRepository().list_by_ids(session, course_ids))
    user = await UserRepository().get(session, payment.user_id)
    if user is not None:
        await safe_send_refund_processed(
            ctx.email_sender,
            email=user.email,
            first_name=user.first_name,
            amount=payment.refund_amount,
            currency=str(payment.currency),
            course_name=courses[0].title if len(courses) == 1 else f"{len(courses)} courses",
            refund_id=refund_id,
        )

    await safe_notify(
        ctx.notifier,
        payment.user_id,
        NotificationType.REFUND_PROCESSED,
        "Refund Processed",
        f"Your refund of {payment.refund_amount} has been processed",
        {"paymentId": payment.id, "refundId": refund_id, "amount": str(payment.refund_amount)},
    )

    for key in user_cache_keys(payment.user_id) + [course_cache_key(c) for c in course_ids]:
        await ctx.cache.delete(key)


__all__ = ["process_refund", "refund_idempotency_key"]

# Fin del archivo backend/app/modules/payments/facades/refunds/process_refund.py
