# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/checkout/initiate_checkout.py

Fachada de alto nivel para iniciar el checkout de un carrito de cursos.

Orquesta:
- Validación (cursos no vacíos, pasarela disponible)
- Cursos PUBLISHED (comparación por conjuntos) y alumno sin inscripción vigente
- Subtotal, cupón, impuesto plano y total final
- Orden en la pasarela ANTES de cualquier escritura
- Payment PENDING + CouponUsage + sesión checkout:{orderId} en una unidad

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.payments.adapters.base import OrderRequest
from app.modules.payments.enums import CourseStatus
from app.modules.payments.errors import (
    AlreadyEnrolled,
    CourseUnavailable,
    InvalidRequest,
    NotFound,
)
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.repositories import (
    CourseRepository,
    EnrollmentRepository,
    UserRepository,
)
from app.modules.payments.schemas import CheckoutOut
from app.modules.payments.services import compute_totals, generate_order_id, round_money
from .pending_payment import build_checkout_out, course_line, open_pending_payment

logger = logging.getLogger(__name__)


def _normalize_course_ids(course_ids: Optional[Iterable[Any]]) -> list[int]:
    try:
        ids = [int(c) for c in course_ids or []]
    except (TypeError, ValueError):
        raise InvalidRequest("Course IDs must be integers") from None
    return list(dict.fromkeys(ids))


def describe_order(titles: list[str]) -> str:
    if len(titles) == 1:
        return titles[0][:200]
    return f"{len(titles)} courses"


async def initiate_checkout(
    session: AsyncSession,
    ctx: PaymentsContext,
    *,
    user_id: int,
    course_ids: Iterable[Any],
    gateway: str,
    coupon_code: Optional[str] = None,
    billing_address: Optional[dict[str, Any]] = None,
) -> CheckoutOut:
    """
    Inicia el checkout y devuelve lo que el frontend necesita para pagar.

    Errores sin efectos: InvalidRequest, CourseUnavailable, AlreadyEnrolled,
    CouponError, GatewayUnavailable / GatewayRejected (sin Payment creado).
    """
    # 1) Validaciones de entrada
    ids = _normalize_course_ids(course_ids)
    if not ids:
        raise InvalidRequest("Course IDs are required")
    adapter = ctx.registry.get(gateway)

    # 2) Cursos publicados (conjunto pedido == conjunto encontrado)
    courses = list(
        await CourseRepository().list_by_ids(session, ids, status=CourseStatus.PUBLISHED)
    )
    missing = set(ids) - {c.id for c in courses}
    if missing:
        raise CourseUnavailable(details={"course_ids": sorted(missing)})

    # 3) Sin inscripción ACTIVE/COMPLETED en ninguno
    held = await EnrollmentRepository().held_course_ids(session, user_id, ids)
    if held:
        raise AlreadyEnrolled(details={"course_ids": sorted(held)})

    user = await UserRepository().get(session, user_id)
    if user is None:
        raise NotFound("User not found")

    # 4) Totales
    lines = [course_line(c, round_money(c.effective_price)) for c in courses]
    subtotal = sum((line.price for line in lines), Decimal("0.00"))
    application = await ctx.coupons.evaluate(
        session,
        code=coupon_code,
        user_id=user_id,
        course_ids=ids,
        subtotal=subtotal,
    )
    totals = compute_totals(
        subtotal,
        application.discount_amount if application else Decimal("0"),
        ctx.settings.tax_rate,
    )

    # 5) Orden en la pasarela (antes de escribir nada)
    order_id = generate_order_id()
    gateway_order = await adapter.create_order(
        OrderRequest(
            order_id=order_id,
            amount=totals.final,
            currency=ctx.settings.currency,
            description=describe_order([c.title for c in courses]),
            customer_name=user.full_name,
            customer_email=user.email,
            customer_phone=user.phone,
            course_ids=tuple(c.id for c in courses),
            metadata={"userId": user_id},
        )
    )

    # 6) Payment PENDING + cupón + sesión, un solo commit
    applied_code = application.coupon.code if application else None
    payment = await open_pending_payment(
        session,
        ctx,
        adapter=adapter,
        gateway_order=gateway_order,
        user_id=user_id,
        order_id=order_id,
        totals=totals,
        courses=lines,
        metadata={"billingAddress": billing_address, "couponCode": applied_code},
        coupon=application,
    )

    # 7) Respuesta
    return build_checkout_out(
        payment,
        adapter=adapter,
        gateway_order=gateway_order,
        totals=totals,
        courses=lines,
        coupon_code=applied_code,
    )


__all__ = ["describe_order", "initiate_checkout"]

# Fin del archivo backend/app/modules/payments/facades/checkout/initiate_checkout.py
