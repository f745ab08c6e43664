# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/checkout/pending_payment.py

Apertura de un Payment PENDING tras crear la orden en la pasarela.

Unidad atómica (checkout y retry):
    1. INSERT Payment PENDING con desglose y snapshot de metadata
    2. si aplica cupón: INSERT CouponUsage + used_count = used_count + 1
    3. guardar la sesión checkout:{orderId} en caché
    4. COMMIT
Cualquier fallo en 1-3 hace rollback: no quedan Payment ni CouponUsage
huérfanos. La orden del proveedor queda abandonada (expira sola).

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.payments.adapters.base import GatewayAdapter, GatewayOrder
from app.modules.payments.enums import Currency, PaymentStatus
from app.modules.payments.errors import GatewayUnavailable, PaymentsError
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.models.payment_models import Payment
from app.modules.payments.repositories import PaymentRepository
from app.modules.payments.schemas import (
    AmountBreakdown,
    CheckoutCourse,
    CheckoutOut,
    GatewayCheckout,
)
from app.modules.payments.services import CheckoutSession, CouponApplication, OrderTotals

logger = logging.getLogger(__name__)


async def open_pending_payment(
    session: AsyncSession,
    ctx: PaymentsContext,
    *,
    adapter: GatewayAdapter,
    gateway_order: GatewayOrder,
    user_id: int,
    order_id: str,
    totals: OrderTotals,
    courses: list[CheckoutCourse],
    metadata: dict[str, Any],
    coupon: Optional[CouponApplication] = None,
) -> Payment:
    payment_repo = PaymentRepository()
    try:
        payment = await payment_repo.create(
            session,
            user_id=user_id,
            order_id=order_id,
            amount=totals.final,
            original_amount=totals.subtotal,
            discount_amount=totals.discount,
            tax=totals.tax,
            currency=Currency(ctx.settings.currency),
            status=PaymentStatus.PENDING,
            gateway=adapter.gateway,
            transaction_id=gateway_order.external_id,
            gateway_response=gateway_order.raw or None,
            payment_metadata={
                **metadata,
                "orderId": order_id,
                "courseIds": [c.id for c in courses],
                "orderItems": [
                    {"courseId": c.id, "title": c.title, "price": str(c.price)} for c in courses
                ],
                "gatewayOrderId": gateway_order.external_id,
            },
        )
        if coupon is not None:
            await ctx.coupons.record_usage(session, coupon, user_id=user_id, payment_id=payment.id)

        await ctx.session_store.save(
            CheckoutSession(
                order_id=order_id,
                payment_id=payment.id,
                gateway_order_id=gateway_order.external_id,
                user_id=user_id,
                course_ids=[c.id for c in courses],
                final_amount=totals.final,
                gateway=adapter.gateway.value,
            )
        )
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.error("checkout_persist_conflict order=%s: %s", order_id, exc)
        raise GatewayUnavailable(
            "Checkout temporarily unavailable",
            details={"reason": "persist_conflict"},
        ) from exc
    except PaymentsError:
        await session.rollback()
        raise

    logger.info(
        "checkout_opened order=%s payment=%s gateway=%s amount=%s coupon=%s",
        order_id, payment.id, adapter.gateway.value, totals.final,
        coupon.coupon.code if coupon else None,
    )
    return payment


def build_checkout_out(
    payment: Payment,
    *,
    adapter: GatewayAdapter,
    gateway_order: GatewayOrder,
    totals: OrderTotals,
    courses: list[CheckoutCourse],
    coupon_code: Optional[str] = None,
    retry_of: Optional[int] = None,
) -> CheckoutOut:
    return CheckoutOut(
        order_id=payment.order_id,
        payment_id=payment.id,
        gateway=adapter.gateway.value,
        checkout=GatewayCheckout(
            gateway_order_id=gateway_order.external_id,
            redirect_url=gateway_order.redirect_url,
            client_secret=gateway_order.client_secret,
            form_payload=gateway_order.form_payload,
            public_config={k: v for k, v in adapter.public_config().items() if v},
        ),
        amount=AmountBreakdown(
            subtotal=totals.subtotal,
            discount=totals.discount,
            tax=totals.tax,
            total=totals.final,
            currency=str(payment.currency),
        ),
        courses=courses,
        coupon_code=coupon_code,
        retry_of=retry_of,
    )


def course_line(course: Any, price: Decimal) -> CheckoutCourse:
    return CheckoutCourse(id=course.id, title=course.title, slug=course.slug, price=price)


__all__ = ["build_checkout_out", "course_line", "open_pending_payment"]

# Fin del archivo backend/app/modules/payments/facades/checkout/pending_payment.py
