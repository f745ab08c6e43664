# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/lifecycle/retry_payment.py

Reintento de un pago FAILED del usuario.

Crea una orden nueva (order id, orden en pasarela, Payment PENDING y
sesión) con los mismos cursos y el mismo desglose financiero del pago
fallido; metadata.retryOf apunta al original, que no se modifica. El
descuento viaja como snapshot: el cupón no se vuelve a aplicar.

Autor: CourseMart
Fecha: 2026-03-13
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.payments.adapters.base import OrderRequest
from app.modules.payments.errors import (
    AlreadyEnrolled,
    CourseUnavailable,
    InvalidRequest,
    NotFound,
)
from app.modules.payments.enums import PaymentStatus
from app.modules.payments.facades.checkout.initiate_checkout import describe_order
from app.modules.payments.facades.checkout.pending_payment import (
    build_checkout_out,
    course_line,
    open_pending_payment,
)
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.repositories import (
    CourseRepository,
    EnrollmentRepository,
    PaymentRepository,
    UserRepository,
)
from app.modules.payments.schemas import CheckoutOut
from app.modules.payments.services import OrderTotals, generate_order_id, round_money
from app.modules.payments.services.fulfillment_service import effective_prices

logger = logging.getLogger(__name__)


async def retry_payment(
    session: AsyncSession,
    ctx: PaymentsContext,
    *,
    user_id: int,
    payment_id: int,
) -> CheckoutOut:
    failed = await PaymentRepository().get_for_user(session, payment_id, user_id)
    if failed is None:
        raise NotFound()
    if failed.status != PaymentStatus.FAILED:
        raise InvalidRequest(
            "Only failed payments can be retried",
            details={"status": str(failed.status)},
        )

    adapter = ctx.registry.get(failed.gateway)
    course_ids = failed.course_ids
    courses = list(await CourseRepository().list_by_ids(session, course_ids))
    missing = set(course_ids) - {c.id for c in courses}
    if not course_ids or missing:
        raise CourseUnavailable(details={"course_ids": sorted(missing)})

    held = await EnrollmentRepository().held_course_ids(session, user_id, course_ids)
    if held:
        raise AlreadyEnrolled(details={"course_ids": sorted(held)})

    user = await UserRepository().get(session, user_id)
    if user is None:
        raise NotFound("User not found")

    prices = effective_prices(failed, courses)
    lines = [course_line(c, round_money(prices[c.id])) for c in courses]
    totals = OrderTotals(
        subtotal=Decimal(failed.original_amount),
        discount=Decimal(failed.discount_amount),
        tax=Decimal(failed.tax),
        final=Decimal(failed.amount),
    )

    order_id = generate_order_id()
    gateway_order = await adapter.create_order(
        OrderRequest(
            order_id=order_id,
            amount=totals.final,
            currency=str(failed.currency),
            description=describe_order([c.title for c in courses]),
            customer_name=user.full_name,
            customer_email=user.email,
            customer_phone=user.phone,
            course_ids=tuple(c.id for c in courses),
            metadata={"userId": user_id, "retryOf": failed.id},
        )
    )

    previous = failed.payment_metadata or {}
    payment = await open_pending_payment(
        session,
        ctx,
        adapter=adapter,
        gateway_order=gateway_order,
        user_id=user_id,
        order_id=order_id,
        totals=totals,
        courses=lines,
        metadata={
            "billingAddress": previous.get("billingAddress"),
            "couponCode": previous.get("couponCode"),
            "retryOf": failed.id,
        },
    )
    logger.info("payment_retry_opened failed=%s new=%s", failed.id, payment.id)

    return build_checkout_out(
        payment,
        adapter=adapter,
        gateway_order=gateway_order,
        totals=totals,
        courses=lines,
        coupon_code=previous.get("couponCode"),
        retry_of=failed.id,
    )


__all__ = ["retry_payment"]

# Fin del archivo backend/app/modules/payments/facades/lifecycle/retry_payment.py
