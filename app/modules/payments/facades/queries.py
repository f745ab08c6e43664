# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/queries.py

Consultas de lectura: historial de compras, detalle de pago, cola de
reembolsos (admin) y estado de pasarelas.

Autor: CourseMart
Fecha: 2026-03-13
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.payments.enums import PaymentGateway, PaymentStatus, RefundRequestStatus
from app.modules.payments.errors import InvalidRequest, NotFound
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.facades.serializers import (
    enrollment_out,
    payment_out,
    refund_request_out,
)
from app.modules.payments.models import Enrollment
from app.modules.payments.repositories import (
    CourseRepository,
    EnrollmentRepository,
    PaymentRepository,
    RefundRequestRepository,
)
from app.modules.payments.schemas import (
    EnrollmentOut,
    GatewayStatusItem,
    GatewayStatusOut,
    PageMeta,
    PaymentDetailsOut,
    PurchaseHistoryItem,
    PurchaseHistoryOut,
    RefundQueueItem,
    RefundQueueOut,
)

MAX_PAGE_SIZE = 100


def _parse_filter(enum_cls, value: Optional[str], label: str):
    if value in (None, ""):
        return None
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        raise InvalidRequest(f"Invalid {label} filter: {value}") from None


def _check_paging(page: int, limit: int) -> None:
    if page < 1 or limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidRequest(f"page must be >= 1 and limit between 1 and {MAX_PAGE_SIZE}")


async def _enrollments_with_titles(
    session: AsyncSession, enrollments: Iterable[Enrollment]
) -> list[tuple[Enrollment, Optional[str]]]:
    rows = list(enrollments)
    courses = await CourseRepository().list_by_ids(session, {e.course_id for e in rows})
    titles = {c.id: c.title for c in courses}
    return [(e, titles.get(e.course_id)) for e in rows]


async def get_purchase_history(
    session: AsyncSession,
    *,
    user_id: int,
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    gateway: Optional[str] = None,
) -> PurchaseHistoryOut:
    _check_paging(page, limit)
    repo = PaymentRepository()
    stmt = repo.history_stmt(
        user_id,
        status=_parse_filter(PaymentStatus, status, "status"),
        gateway=_parse_filter(PaymentGateway, gateway, "gateway"),
    )
    payments, total = await repo.paginate(session, stmt, page=page, limit=limit)

    enrollments = await EnrollmentRepository().list_for_payments(session, [p.id for p in payments])
    by_payment: dict[int, list[EnrollmentOut]] = {}
    for enrollment, title in await _enrollments_with_titles(session, enrollments):
        by_payment.setdefault(enrollment.payment_id, []).append(enrollment_out(enrollment, title))

    items = [
        PurchaseHistoryItem(
            **payment_out(p).model_dump(),
            enrollments=by_payment.get(p.id, []),
        )
        for p in payments
    ]
    return PurchaseHistoryOut(
        payments=items,
        pagination=PageMeta.build(page=page, limit=limit, total=total),
    )


async def get_payment_details(
    session: AsyncSession,
    *,
    user_id: int,
    payment_id: int,
) -> PaymentDetailsOut:
    payment = await PaymentRepository().get_for_user(session, payment_id, user_id)
    if payment is None:
        raise NotFound()

    enrollments = await EnrollmentRepository().list_for_payment(session, payment.id)
    refund_request = await RefundRequestRepository().get_by_payment(session, payment.id)
    metadata = payment.payment_metadata or {}

    return PaymentDetailsOut(
        payment=payment_out(payment),
        enrollments=[
            enrollment_out(e, title)
            for e, title in await _enrollments_with_titles(session, enrollments)
        ],
        refund_request=refund_request_out(refund_request) if refund_request else None,
        coupon_code=payment.coupon_code,
        course_ids=payment.course_ids,
        retry_of=metadata.get("retryOf"),
    )


async def list_refund_requests(
    session: AsyncSession,
    *,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> RefundQueueOut:
    _check_paging(page, limit)
    repo = RefundRequestRepository()
    stmt = repo.queue_stmt(_parse_filter(RefundRequestStatus, status, "status"))
    requests, total = await repo.paginate(session, stmt, page=page, limit=limit)

    payment_repo = PaymentRepository()
    items: list[RefundQueueItem] = []
    for request in requests:
        payment = await payment_repo.get(session, request.payment_id)
        items.append(
            RefundQueueItem(
                **refund_request_out(request).model_dump(),
                order_id=payment.order_id,
                payment_amount=payment.amount,
                payment_status=str(payment.status),
                gateway=str(payment.gateway),
            )
        )
    return RefundQueueOut(
        refund_requests=items,
        pagination=PageMeta.build(page=page, limit=limit, total=total),
    )


def get_gateway_status(ctx: PaymentsContext) -> GatewayStatusOut:
    return GatewayStatusOut(
        payments_enabled=ctx.settings.payments_enabled,
        currency=ctx.settings.currency,
        gateways=[GatewayStatusItem(**s) for s in ctx.registry.status()],
        available=[g.value for g in ctx.registry.available()],
    )


__all__ = [
    "get_gateway_status",
    "get_payment_details",
    "get_purchase_history",
    "list_refund_requests",
]

# Fin del archivo backend/app/modules/payments/facades/queries.py
