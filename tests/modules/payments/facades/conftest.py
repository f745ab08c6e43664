# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/facades/conftest.py

Helpers de flujo completo para los tests de facades:
checkout Razorpay + evidencia firmada + verify (fulfillment inline).

Autor: CourseMart
Fecha: 2026-03-18
"""
from dataclasses import dataclass

import pytest
from sqlalchemy import func, select

from app.modules.payments.adapters.base import VerificationEvidence
from app.modules.payments.adapters.razorpay_adapter import compute_razorpay_signature
from app.modules.payments.facades import initiate_checkout, verify_payment
from app.modules.payments.models import Enrollment
from app.modules.payments.schemas import CheckoutOut, VerifyOut

RZP_SECRET = "rzp_test_secret"


def razorpay_evidence(checkout: CheckoutOut, provider_payment_id: str = "pay_1") -> VerificationEvidence:
    link_id = checkout.checkout.gateway_order_id
    return VerificationEvidence(
        payment_id=provider_payment_id,
        gateway_order_id=link_id,
        signature=compute_razorpay_signature(RZP_SECRET, link_id, provider_payment_id),
    )


async def count_enrollments(session_factory, **filters) -> int:
    async with session_factory() as session:
        stmt = select(func.count()).select_from(Enrollment).filter_by(**filters)
        return int((await session.execute(stmt)).scalar_one())


@dataclass
class PaidOrder:
    checkout: CheckoutOut
    verified: VerifyOut


@pytest.fixture
def checkout_razorpay(db, ctx, catalog):
    async def _checkout(course_ids=None, coupon_code=None, user_id=None) -> CheckoutOut:
        return await initiate_checkout(
            db,
            ctx,
            user_id=user_id or catalog.student.id,
            course_ids=course_ids or [catalog.course_a.id, catalog.course_b.id],
            gateway="RAZORPAY",
            coupon_code=coupon_code,
        )

    return _checkout


@pytest.fixture
def paid_order(db, ctx, catalog, checkout_razorpay):
    """Checkout + verify exitoso; el fulfillment corre inline."""

    async def _pay(course_ids=None, coupon_code=None, provider_payment_id="pay_1") -> PaidOrder:
        out = await checkout_razorpay(course_ids=course_ids, coupon_code=coupon_code)
        verified = await verify_payment(
            db,
            ctx,
            user_id=catalog.student.id,
            order_id=out.order_id,
            evidence=razorpay_evidence(out, provider_payment_id),
        )
        return PaidOrder(checkout=out, verified=verified)

    return _pay


@pytest.fixture
def rzp_evidence():
    return razorpay_evidence


@pytest.fixture
def enrollment_count(session_factory):
    async def _count(**filters) -> int:
        return await count_enrollments(session_factory, **filters)

    return _count
