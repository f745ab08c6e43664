# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/facades/test_verify_payment.py

Verificación del pago: transición PENDING→COMPLETED exactamente una vez,
fulfillment idempotente, rechazo de evidencia y reintento.

Autor: CourseMart
Fecha: 2026-03-18
"""
import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.modules.payments.adapters.base import VerificationEvidence
from app.modules.payments.enums import EarningStatus, EnrollmentStatus, PaymentStatus
from app.modules.payments.errors import InvalidRequest, SessionInvalid, VerificationFailed
from app.modules.payments.facades import cancel_payment, retry_payment, verify_payment
from app.modules.payments.models import Coupon, CouponUsage, Course, Earning, Instructor, Payment



class TestVerifyPayment:
    async def test_success_fulfils_every_course(
        self, ctx, catalog, paid_order, session_factory, notifier, email_sender, cache, enrollment_count
    ):
        await cache.set(f"cart:{catalog.student.id}", "[1,2]", 60)

        paid = await paid_order()

        assert paid.verified.status == "COMPLETED"
        assert paid.verified.already_processed is False
        assert paid.verified.transaction_id == "pay_1"
        assert await enrollment_count(student_id=catalog.student.id) == 2

        async with session_factory() as session:
            payment = await session.get(Payment, paid.checkout.payment_id)
            course_a = await session.get(Course, catalog.course_a.id)
            course_b = await session.get(Course, catalog.course_b.id)
            instructor = await session.get(Instructor, catalog.instructor.id)

        assert payment.status == PaymentStatus.COMPLETED
        assert payment.completed_at is not None
        assert course_a.total_enrollments == 1
        assert course_a.total_revenue == Decimal("1000.00")
        assert course_b.total_revenue == Decimal("400.00")
        assert instructor.total_students == 2
        assert instructor.total_revenue == Decimal("980.00")  # 70 % de 1400

        # sesión borrada y efectos posteriores
        assert await ctx.session_store.load(paid.checkout.order_id) is None
        assert await cache.get(f"cart:{catalog.student.id}") is None
        assert "PAYMENT_RECEIVED" in notifier.types_for(catalog.student.id)
        assert notifier.types_for(catalog.instructor_user.id).count("NEW_ENROLLMENT") == 2
        assert len(email_sender.purchases) == 1

    async def test_second_verify_is_already_processed(
        self, db, ctx, catalog, paid_order, session_factory, notifier, rzp_evidence, enrollment_count
    ):
        paid = await paid_order()

        again = await verify_payment(
            db,
            ctx,
            user_id=catalog.student.id,
            order_id=paid.checkout.order_id,
            evidence=rzp_evidence(paid.checkout),
        )

        assert again.already_processed is True
        assert again.status == "COMPLETED"
        assert await enrollment_count(payment_id=paid.checkout.payment_id) == 2
        # el re-encolado no repite efectos
        assert notifier.types_for(catalog.student.id).count("PAYMENT_RECEIVED") == 1

    async def test_fulfillment_job_succeeds_on_first_attempt(
        self, ctx, catalog, paid_order, notifier, email_sender, cache, caplog
    ):
        """Los efectos post-commit no dependen de objetos ORM expirados."""
        caplog.set_level("WARNING", logger="app.shared.tasks.task_queue")
        await cache.set(f"cart:{catalog.student.id}", "[1,2]", 60)
        completed_before = ctx.queue.completed

        await paid_order()

        assert not [r for r in caplog.records if "job falló" in r.getMessage()]
        assert ctx.queue.dead_jobs == []
        assert ctx.queue.completed == completed_before + 1
        assert notifier.types_for(catalog.student.id).count("PAYMENT_RECEIVED") == 1
        assert notifier.types_for(catalog.instructor_user.id).count("NEW_ENROLLMENT") == 2
        assert len(email_sender.purchases) == 1
        assert await cache.get(f"cart:{catalog.student.id}") is None

    async def test_concurrent_verifies_fulfil_once(
        self, ctx, catalog, checkout_razorpay, session_factory, rzp_evidence, enrollment_count
    ):
        out = await checkout_razorpay()
        evidence = rzp_evidence(out)

        async def attempt():
            async with session_factory() as session:
                return await verify_payment(
                    session, ctx, user_id=catalog.student.id, order_id=out.order_id, evidence=evidence
                )

        results = await asyncio.gather(attempt(), attempt())

        assert all(r.status == "COMPLETED" for r in results)
        assert sorted(r.already_processed for r in results) == [False, True]
        assert await enrollment_count(payment_id=out.payment_id) == 2

    async def test_other_user_cannot_verify(self, db, ctx, catalog, checkout_razorpay, rzp_evidence):
        out = await checkout_razorpay()

        with pytest.raises(SessionInvalid):
            await verify_payment(
                db,
                ctx,
                user_id=catalog.other_student.id,
                order_id=out.order_id,
                evidence=rzp_evidence(out),
            )

    async def test_lost_session_for_pending_payment_is_session_invalid(
        self, db, ctx, catalog, checkout_razorpay, session_factory, rzp_evidence
    ):
        """Sin sesión solo se acepta un pago ya completado; el PENDING no se toca."""
        out = await checkout_razorpay()
        await ctx.session_store.delete(out.order_id)

        with pytest.raises(SessionInvalid):
            await verify_payment(
                db, ctx, user_id=catalog.student.id, order_id=out.order_id, evidence=rzp_evidence(out)
            )

        async with session_factory() as session:
            assert (await session.get(Payment, out.payment_id)).status == PaymentStatus.PENDING

    async def test_completed_payment_without_session_is_already_processed_for_owner_only(
        self, db, ctx, catalog, paid_order, rzp_evidence
    ):
        paid = await paid_order()
        assert await ctx.session_store.load(paid.checkout.order_id) is None

        with pytest.raises(SessionInvalid):
            await verify_payment(
                db,
                ctx,
                user_id=catalog.other_student.id,
                order_id=paid.checkout.order_id,
                evidence=rzp_evidence(paid.checkout),
            )

        again = await verify_payment(
            db,
            ctx,
            user_id=catalog.student.id,
            order_id=paid.checkout.order_id,
            evidence=VerificationEvidence(),
        )
        assert again.already_processed is True
        assert again.payment_id == paid.checkout.payment_id

    async def test_unknown_order_is_session_invalid(self, db, ctx, catalog):
        with pytest.raises(SessionInvalid):
            await verify_payment(
                db, ctx, user_id=catalog.student.id, order_id="ORD_0_missing", evidence=VerificationEvidence()
            )


class TestRejectedEvidenceAndRetry:
    async def test_bad_signature_fails_payment_then_retry_reopens_it(
        self, db, ctx, catalog, make_coupon, checkout_razorpay, session_factory, gateway_api, enrollment_count
    ):
        await make_coupon()
        out = await checkout_razorpay(coupon_code="SAVE10")
        forged = VerificationEvidence(
            payment_id="pay_1",
            gateway_order_id=out.checkout.gateway_order_id,
            signature="0" * 64,
        )

        with pytest.raises(VerificationFailed):
            await verify_payment(
                db, ctx, user_id=catalog.student.id, order_id=out.order_id, evidence=forged
            )

        async with session_factory() as session:
            failed = await session.get(Payment, out.payment_id)
        assert failed.status == PaymentStatus.FAILED
        assert failed.payment_metadata["errors"][-1]["stage"] == "verification"
        assert await enrollment_count() == 0

        retry = await retry_payment(db, ctx, user_id=catalog.student.id, payment_id=out.payment_id)

        assert retry.payment_id != out.payment_id
        assert retry.order_id != out.order_id
        assert retry.retry_of == out.payment_id
        assert retry.amount.total == out.amount.total
        assert gateway_api.count("POST", "/v1/orders") == 2

        async with session_factory() as session:
            reopened = await session.get(Payment, retry.payment_id)
        assert reopened.status == PaymentStatus.PENDING
        assert sorted(reopened.course_ids) == sorted(failed.course_ids)
        assert reopened.payment_metadata["retryOf"] == out.payment_id
        assert reopened.payment_metadata["couponCode"] == "SAVE10"

    async def test_only_failed_payments_can_be_retried(self, db, ctx, catalog, checkout_razorpay):
        out = await checkout_razorpay()

        with pytest.raises(InvalidRequest):
            await retry_payment(db, ctx, user_id=catalog.student.id, payment_id=out.payment_id)


class TestCancelPayment:
    async def test_cancel_releases_coupon(
        self, db, ctx, catalog, make_coupon, checkout_razorpay, session_factory
    ):
        coupon = await make_coupon()
        out = await checkout_razorpay(coupon_code="SAVE10")

        cancelled = await cancel_payment(db, ctx, user_id=catalog.student.id, payment_id=out.payment_id)

        assert cancelled.status == "CANCELLED"
        assert cancelled.coupon_usages_released == 1
        assert await ctx.session_store.load(out.order_id) is None
        async with session_factory() as session:
            assert (await session.get(Coupon, coupon.id)).used_count == 0
            assert (await session.get(Payment, out.payment_id)).cancelled_at is not None
            usages = await session.execute(
                select(CouponUsage).where(CouponUsage.payment_id == out.payment_id)
            )
            assert usages.first() is None

        # el cupón vuelve a estar disponible
        again = await checkout_razorpay(coupon_code="SAVE10")
        assert again.amount.discount == Decimal("100.00")

    async def test_cancel_completed_payment_is_rejected(self, db, ctx, catalog, paid_order):
        paid = await paid_order()

        with pytest.raises(InvalidRequest):
            await cancel_payment(db, ctx, user_id=catalog.student.id, payment_id=paid.checkout.payment_id)


class TestEarnings:
    async def test_earning_split_per_course(self, catalog, paid_order, session_factory):
        paid = await paid_order()

        async with session_factory() as session:
            rows = (
                await session.execute(
                    select(Earning).where(Earning.payment_id == paid.checkout.payment_id)
                )
            ).scalars().all()

        by_course = {row.course_id: row for row in rows}
        assert by_course[catalog.course_a.id].commission == Decimal("700.00")
        assert by_course[catalog.course_a.id].platform_fee == Decimal("300.00")
        assert by_course[catalog.course_b.id].commission == Decimal("280.00")
        assert all(row.status == EarningStatus.PENDING for row in rows)
