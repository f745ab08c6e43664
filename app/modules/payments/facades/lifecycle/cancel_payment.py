# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/lifecycle/cancel_payment.py

Cancelación de un pago PENDING del usuario: CAS PENDING→CANCELLED y
liberación de los CouponUsage del pago en la misma transacción; la sesión
de checkout se borra después del commit (best-effort).

Autor: CourseMart
Fecha: 2026-03-13
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.payments.enums import PaymentStatus
from app.modules.payments.errors import InvalidRequest, InvalidStateTransition, NotFound
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.repositories import PaymentRepository
from app.modules.payments.schemas import CancelOut

logger = logging.getLogger(__name__)


async def cancel_payment(
    session: AsyncSession,
    ctx: PaymentsContext,
    *,
    user_id: int,
    payment_id: int,
) -> CancelOut:
    payment_repo = PaymentRepository()
    payment = await payment_repo.get_for_user(session, payment_id, user_id)
    if payment is None:
        raise NotFound()
    if payment.status != PaymentStatus.PENDING:
        raise InvalidRequest(
            "Only pending payments can be cancelled",
            details={"status": str(payment.status)},
        )

    applied = await payment_repo.transition(
        session,
        payment.id,
        expected=PaymentStatus.PENDING,
        target=PaymentStatus.CANCELLED,
    )
    if not applied:
        await session.rollback()
        raise InvalidStateTransition("Payment is no longer pending")

    released = await ctx.coupons.release_for_payment(session, payment.id)
    await session.commit()
    await session.refresh(payment)

    await ctx.session_store.delete(payment.order_id)
    logger.info("payment_cancelled payment=%s coupon_usages_released=%s", payment.id, released)

    return CancelOut(
        payment_id=payment.id,
        status=str(payment.status),
        coupon_usages_released=released,
    )


__all__ = ["cancel_payment"]

# Fin del archivo backend/app/modules/payments/facades/lifecycle/cancel_payment.py
