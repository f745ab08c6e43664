# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/fulfillment_service.py

Fulfillment de un pago COMPLETED (job de la cola diferida, at-least-once).

Idempotente por (alumno, curso, pago):
- pre-check de Enrollment existente por curso
- UNIQUE(student_id, course_id, payment_id): si un fulfillment concurrente
  gana la carrera, el commit perdedor se deshace y cuenta como "ya cumplido"

Por curso nuevo (todas las escrituras en un solo commit):
    Enrollment ACTIVE/PURCHASE, contadores del curso (+1, precio efectivo),
    totales del instructor (+1 alumno, comisión), Earning PENDING
    (comisión 70 % / fee de plataforma 30 %)
Después del commit, solo si hubo inscripciones nuevas:
    aviso al instructor (NEW_ENROLLMENT), email de confirmación,
    notificación al comprador (PAYMENT_RECEIVED), invalidación de caché.
Siempre: borrado de la sesión checkout:{orderId}.

Autor: CourseMart
Fecha: 2026-03-10
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.database.database import session_scope
from app.shared.cache import CacheBackend
from app.shared.config.settings_payments import PaymentsSettings
from app.shared.integrations.email_sender import (
    IPurchaseEmailSender,
    safe_send_purchase_confirmation,
)
from app.shared.services.notifications import (
    NotificationDispatcher,
    NotificationType,
    safe_notify,
)
from app.modules.payments.enums import (
    EarningStatus,
    EnrollmentSource,
    EnrollmentStatus,
    PaymentStatus,
)
from app.modules.payments.models.course_models import Course
from app.modules.payments.models.payment_models import Payment
from app.modules.payments.repositories import (
    CartRepository,
    CourseRepository,
    EarningRepository,
    EnrollmentRepository,
    InstructorRepository,
    PaymentRepository,
    UserRepository,
)
from app.modules.payments.services.checkout_session_store import CheckoutSessionStore
from app.modules.payments.services.pricing import round_money

logger = logging.getLogger(__name__)


@dataclass
class FulfillmentResult:
    payment_id: int
    created_enrollment_ids: list[int] = field(default_factory=list)
    skipped_course_ids: list[int] = field(default_factory=list)
    already_fulfilled: bool = False

    @property
    def created(self) -> int:
        return len(self.created_enrollment_ids)


@dataclass(frozen=True)
class PurchasedCourse:
    course_id: int
    title: str
    slug: str
    price: Decimal
    instructor_user_id: Optional[int]


@dataclass(frozen=True)
class PurchaseReceipt:
    """Valores planos para los efectos posteriores al commit (sin instancias ORM)."""

    payment_id: int
    user_id: int
    amount: Decimal
    currency: str
    transaction_id: Optional[str]
    buyer_email: Optional[str]
    buyer_first_name: Optional[str]
    courses: list[PurchasedCourse]


def user_cache_keys(user_id: int) -> list[str]:
    return [f"cart:{user_id}", f"cart_totals:{user_id}", f"enrollments:{user_id}"]


def course_cache_key(course_id: int) -> str:
    return f"course:{course_id}"


def effective_prices(payment: Payment, courses: list[Course]) -> dict[int, Decimal]:
    """Precio por curso: snapshot orderItems del checkout; si falta, el del catálogo."""
    snapshot: dict[int, Decimal] = {}
    for item in (payment.payment_metadata or {}).get("orderItems", []) or []:
        try:
            snapshot[int(item["courseId"])] = Decimal(str(item["price"]))
        except (KeyError, TypeError, ValueError, ArithmeticError):
            continue
    return {c.id: snapshot.get(c.id, Decimal(c.effective_price)) for c in courses}


class FulfillmentService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        settings: PaymentsSettings,
        cache: CacheBackend,
        notifier: NotificationDispatcher,
        email_sender: IPurchaseEmailSender,
    ) -> None:
        self.session_factory = session_factory
        self.settings = settings
        self.cache = cache
        self.notifier = notifier
        self.email_sender = email_sender
        self.session_store = CheckoutSessionStore(cache, settings.checkout_session_ttl_seconds)

        self.payment_repo = PaymentRepository()
        self.course_repo = CourseRepository()
        self.instructor_repo = InstructorRepository()
        self.enrollment_repo = EnrollmentRepository()
        self.earning_repo = EarningRepository()
        self.cart_repo = CartRepository()
        self.user_repo = UserRepository()

    def split(self, price: Decimal) -> tuple[Decimal, Decimal]:
        """(comisión del instructor, fee de plataforma); suman exactamente price."""
        commission = round_money(price * self.settings.instructor_commission_rate)
        return commission, round_money(price) - commission

    # ------------------------------------------------------------------ #
    # Job
    # ------------------------------------------------------------------ #
    async def fulfill_payment(self, payment_id: int) -> FulfillmentResult:
        result = FulfillmentResult(payment_id=payment_id)
        receipt: Optional[PurchaseReceipt] = None

        async with session_scope(self.session_factory) as session:
            payment = await self.payment_repo.get(session, payment_id)
            if payment is None:
                logger.warning("fulfillment_skipped payment=%s reason=not_found", payment_id)
                return result
            if payment.status != PaymentStatus.COMPLETED:
                logger.warning(
                    "fulfillment_skipped payment=%s reason=status_%s", payment_id, payment.status
                )
                return result

            courses = list(await self.course_repo.list_by_ids(session, payment.course_ids))
            order_id = payment.order_id
            prices = effective_prices(payment, courses)
            new_courses: list[Course] = []

            try:
                for course in courses:
                    if await self.enrollment_repo.exists(
                        session,
                        student_id=payment.user_id,
                        course_id=course.id,
                        payment_id=payment.id,
                    ):
                        result.skipped_course_ids.append(course.id)
                        continue

                    enrollment_id = await self._fulfill_course(session, payment, course, prices[course.id])
                    result.created_enrollment_ids.append(enrollment_id)
                    new_courses.append(course)

                if new_courses:
                    await self.cart_repo.remove_courses(
                        session, payment.user_id, [c.id for c in new_courses]
                    )
                    # lecturas dentro de la misma transacción: tras el commit
                    # la sesión no vuelve a consultar la base
                    receipt = await self._build_receipt(session, payment, new_courses, prices)
                await session.commit()
            except IntegrityError:
                # otro worker cumplió el mismo pago primero
                await session.rollback()
                logger.info("fulfillment_lost_race payment=%s", payment_id)
                result.created_enrollment_ids.clear()
                result.already_fulfilled = True
                receipt = None

            if receipt is None:
                result.already_fulfilled = True

        if receipt is not None:
            logger.info(
                "fulfillment_completed payment=%s enrollments=%s",
                payment_id, result.created_enrollment_ids,
            )
            await self._after_commit(receipt, result)

        await self.session_store.delete(order_id)
        return result

    async def _build_receipt(
        self,
        session: AsyncSession,
        payment: Payment,
        courses: list[Course],
        prices: dict[int, Decimal],
    ) -> PurchaseReceipt:
        buyer = await self.user_repo.get(session, payment.user_id)
        lines: list[PurchasedCourse] = []
        for course in courses:
            instructor = await self.instructor_repo.get(session, course.instructor_id)
            lines.append(
                PurchasedCourse(
                    course_id=course.id,
                    title=course.title,
                    slug=course.slug,
                    price=prices[course.id],
                    instructor_user_id=instructor.user_id if instructor is not None else None,
                )
            )
        return PurchaseReceipt(
            payment_id=payment.id,
            user_id=payment.user_id,
            amount=payment.amount,
            currency=str(payment.currency),
            transaction_id=payment.transaction_id,
            buyer_email=buyer.email if buyer is not None else None,
            buyer_first_name=buyer.first_name if buyer is not None else None,
            courses=lines,
        )

    async def _fulfill_course(
        self,
        session: AsyncSession,
        payment: Payment,
        course: Course,
        price: Decimal,
    ) -> int:
        commission, platform_fee = self.split(price)

        enrollment = await self.enrollment_repo.create(
            session,
            student_id=payment.user_id,
            course_id=course.id,
            payment_id=payment.id,
            status=EnrollmentStatus.ACTIVE,
            enrollment_source=EnrollmentSource.PURCHASE,
            discount_applied=payment.discount_amount,
        )
        await self.course_repo.adjust_counters(session, course.id, enrollments=1, revenue=price)
        await self.instructor_repo.adjust_totals(
            session, course.instructor_id, students=1, revenue=commission
        )
        await self.earning_repo.create(
            session,
            instructor_id=course.instructor_id,
            course_id=course.id,
            payment_id=payment.id,
            amount=round_money(price),
            commission=commission,
            platform_fee=platform_fee,
            status=EarningStatus.PENDING,
        )
        return enrollment.id

    # ------------------------------------------------------------------ #
    # Efectos best-effort
    # ------------------------------------------------------------------ #
    async def _after_commit(self, receipt: PurchaseReceipt, result: FulfillmentResult) -> None:
        courses = receipt.courses
        for line in courses:
            if line.instructor_user_id is None:
                continue
            await safe_notify(
                self.notifier,
                line.instructor_user_id,
                NotificationType.NEW_ENROLLMENT,
                "New Student Enrolled",
                f'A new student has enrolled in your course "{line.title}"',
                {
                    "courseId": line.course_id,
                    "courseName": line.title,
                    "studentId": receipt.user_id,
                    "amount": str(line.price),
                },
            )

        frontend = (self.settings.frontend_url or "").rstrip("/")
        if receipt.buyer_email:
            single = len(courses) == 1
            await safe_send_purchase_confirmation(
                self.email_sender,
                email=receipt.buyer_email,
                first_name=receipt.buyer_first_name,
                amount=receipt.amount,
                currency=receipt.currency,
                transaction_id=receipt.transaction_id,
                course_name=courses[0].title if single else f"{len(courses)} courses",
                course_url=(
                    f"{frontend}/courses/{courses[0].slug}" if single else f"{frontend}/my-learning"
                ),
            )

        await safe_notify(
            self.notifier,
            receipt.user_id,
            NotificationType.PAYMENT_RECEIVED,
            "Purchase Successful",
            f"Your purchase of {len(courses)} course(s) has been completed successfully",
            {
                "paymentId": receipt.payment_id,
                "amount": str(receipt.amount),
                "courses": [{"id": c.course_id, "title": c.title} for c in courses],
                "enrollmentIds": list(result.created_enrollment_ids),
            },
            priority="HIGH",
        )

        await self.invalidate_caches(receipt.user_id, [c.course_id for c in courses])

    async def invalidate_caches(self, user_id: int, course_ids: list[int]) -> None:
        for key in user_cache_keys(user_id) + [course_cache_key(c) for c in course_ids]:
            await self.cache.delete(key)


__all__ = ["FulfillmentResult", "FulfillmentService", "effective_prices"]

# Fin del archivo backend/app/modules/payments/services/fulfillment_service.py
