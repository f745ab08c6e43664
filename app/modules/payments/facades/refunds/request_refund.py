# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/refunds/request_refund.py

Solicitud de reembolso por parte del alumno.

Reglas (el primer fallo define el mensaje):
- el pago existe y es del usuario                     → NotFound
- no fue reembolsado antes                            → InvalidRequest
- está COMPLETED                                      → InvalidRequest
- tiene inscripción ACTIVE/COMPLETED                  → InvalidRequest
- dentro de refund_window_days desde created_at       → InvalidRequest
- sin solicitud PENDING/APPROVED previa               → InvalidRequest
Una solicitud REJECTED o FAILED se reabre como PENDING. El Payment no cambia.

Autor: CourseMart
Fecha: 2026-03-13
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.services.notifications import NotificationType, safe_notify
from app.modules.payments.enums import (
    HOLDING_ENROLLMENT_STATUSES,
    PaymentStatus,
    RefundRequestStatus,
)
from app.modules.payments.errors import InvalidRequest, NotFound
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.facades.serializers import refund_request_out
from app.modules.payments.repositories import (
    EnrollmentRepository,
    PaymentRepository,
    RefundRequestRepository,
)
from app.modules.payments.schemas import RefundRequestOut
from app.modules.payments.utils.datetime_helpers import is_within_window, utcnow

logger = logging.getLogger(__name__)


async def request_refund(
    session: AsyncSession,
    ctx: PaymentsContext,
    *,
    user_id: int,
    payment_id: int,
    reason: str,
    now: Optional[datetime] = None,
) -> RefundRequestOut:
    if not ctx.settings.refunds_enabled:
        raise InvalidRequest("Refunds are currently disabled")
    if not reason or not reason.strip():
        raise InvalidRequest("Refund reason is required")

    payment = await PaymentRepository().get_for_user(session, payment_id, user_id)
    if payment is None:
        raise NotFound()

    if payment.refund_amount or payment.status == PaymentStatus.REFUNDED:
        raise InvalidRequest("Payment has already been refunded")
    if payment.status != PaymentStatus.COMPLETED:
        raise InvalidRequest(
            "Only completed payments can be refunded",
            details={"status": str(payment.status)},
        )

    enrollments = await EnrollmentRepository().list_for_payment(session, payment.id)
    if not any(e.status in HOLDING_ENROLLMENT_STATUSES for e in enrollments):
        raise InvalidRequest("No active enrollment found for this payment")

    days = ctx.settings.refund_window_days
    if not is_within_window(payment.created_at, days, now=now):
        raise InvalidRequest(f"Refund window of {days} days has expired")

    refund_repo = RefundRequestRepository()
    existing = await refund_repo.get_by_payment(session, payment.id)
    if existing is not None and existing.status in (
        RefundRequestStatus.PENDING,
        RefundRequestStatus.PROCESSING,
        RefundRequestStatus.APPROVED,
    ):
        raise InvalidRequest(
            "Refund has already been requested for this payment",
            details={"refund_status": str(existing.status)},
        )

    if existing is None:
        try:
            refund_request = await refund_repo.create(
                session,
                payment_id=payment.id,
                user_id=user_id,
                status=RefundRequestStatus.PENDING,
                reason=reason.strip(),
                requested_amount=payment.amount,
            )
            await session.commit()
        except IntegrityError:
            # solicitud concurrente para el mismo pago
            await session.rollback()
            raise InvalidRequest("Refund has already been requested for this payment") from None
    else:
        refund_request = existing
        refund_request.status = RefundRequestStatus.PENDING
        refund_request.reason = reason.strip()
        refund_request.requested_amount = payment.amount
        refund_request.requested_at = utcnow()
        refund_request.admin_notes = None
        refund_request.reviewed_by = None
        refund_request.reviewed_at = None
        refund_request.processed_at = None
        refund_request.error_message = None
        await session.commit()

    logger.info("refund_requested payment=%s request=%s", payment.id, refund_request.id)

    await safe_notify(
        ctx.notifier,
        user_id,
        NotificationType.REFUND_REQUESTED,
        "Refund Requested",
        "Your refund request has been submitted and is under review",
        {"paymentId": payment.id, "amount": str(payment.amount)},
    )
    return refund_request_out(refund_request)


__all__ = ["request_refund"]

# Fin del archivo backend/app/modules/payments/facades/refunds/request_refund.py
