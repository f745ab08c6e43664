# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/enrollment_repository.py

Repositorios de enrollments y earnings (productos del fulfillment).

Autor: CourseMart
Fecha: 2026-03-06
"""

from typing import Iterable, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.payments.enums import (
    EarningStatus,
    EnrollmentStatus,
    HOLDING_ENROLLMENT_STATUSES,
)
from app.modules.payments.models.enrollment_models import Earning, Enrollment


class EnrollmentRepository(BaseRepository[Enrollment]):
    def __init__(self) -> None:
        super().__init__(Enrollment)

    async def held_course_ids(
        self,
        session: AsyncSession,
        student_id: int,
        course_ids: Iterable[int],
    ) -> set[int]:
        """Cursos de la lista en los que el alumno ya tiene inscripción vigente."""
        ids = list(course_ids)
        if not ids:
            return set()
        stmt = select(Enrollment.course_id).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id.in_(ids),
            Enrollment.status.in_(HOLDING_ENROLLMENT_STATUSES),
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())

    async def exists(
        self,
        session: AsyncSession,
        *,
        student_id: int,
        course_id: int,
        payment_id: int,
    ) -> bool:
        stmt = select(Enrollment.id).where(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.payment_id == payment_id,
        )
        return (await session.scalar(stmt.limit(1))) is not None

    async def list_for_payment(
        self, session: AsyncSession, payment_id: int
    ) -> Sequence[Enrollment]:
        stmt = select(Enrollment).where(Enrollment.payment_id == payment_id).order_by(Enrollment.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_for_payments(
        self, session: AsyncSession, payment_ids: Iterable[int]
    ) -> Sequence[Enrollment]:
        ids = list(payment_ids)
        if not ids:
            return []
        stmt = select(Enrollment).where(Enrollment.payment_id.in_(ids)).order_by(Enrollment.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def mark_refunded(self, session: AsyncSession, payment_id: int) -> None:
        await session.execute(
            update(Enrollment)
            .where(
                Enrollment.payment_id == payment_id,
                Enrollment.status != EnrollmentStatus.REFUNDED,
            )
            .values(status=EnrollmentStatus.REFUNDED)
            .execution_options(synchronize_session=False)
        )


class EarningRepository(BaseRepository[Earning]):
    def __init__(self) -> None:
        super().__init__(Earning)

    async def list_for_payment(self, session: AsyncSession, payment_id: int) -> Sequence[Earning]:
        stmt = select(Earning).where(Earning.payment_id == payment_id).order_by(Earning.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def cancel_for_payment(self, session: AsyncSession, payment_id: int) -> None:
        await session.execute(
            update(Earning)
            .where(
                Earning.payment_id == payment_id,
                Earning.status != EarningStatus.CANCELLED,
            )
            .values(status=EarningStatus.CANCELLED)
            .execution_options(synchronize_session=False)
        )

# Fin del archivo backend/app/modules/payments/repositories/enrollment_repository.py
