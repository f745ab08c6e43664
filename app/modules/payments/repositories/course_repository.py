# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/course_repository.py

Repositorios de courses e instructors.

Los agregados (inscripciones, ingresos, alumnos) se ajustan con deltas en
SQL para que fulfillments y reembolsos concurrentes no pierdan updates.

Autor: CourseMart
Fecha: 2026-03-06
"""

from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.payments.enums import CourseStatus
from app.modules.payments.models.course_models import Course, Instructor


class CourseRepository(BaseRepository[Course]):
    def __init__(self) -> None:
        super().__init__(Course)

    async def list_by_ids(
        self,
        session: AsyncSession,
        course_ids: Iterable[int],
        *,
        status: CourseStatus | None = None,
    ) -> Sequence[Course]:
        ids = list(course_ids)
        if not ids:
            return []
        stmt = select(Course).where(Course.id.in_(ids))
        if status is not None:
            stmt = stmt.where(Course.status == status)
        result = await session.execute(stmt.order_by(Course.id))
        return result.scalars().all()

    async def adjust_counters(
        self,
        session: AsyncSession,
        course_id: int,
        *,
        enrollments: int,
        revenue: Decimal,
    ) -> None:
        await session.execute(
            update(Course)
            .where(Course.id == course_id)
            .values(
                total_enrollments=Course.total_enrollments + enrollments,
                total_revenue=Course.total_revenue + revenue,
            )
            .execution_options(synchronize_session=False)
        )


class InstructorRepository(BaseRepository[Instructor]):
    def __init__(self) -> None:
        super().__init__(Instructor)

    async def adjust_totals(
        self,
        session: AsyncSession,
        instructor_id: int,
        *,
        students: int,
        revenue: Decimal,
    ) -> None:
        await session.execute(
            update(Instructor)
            .where(Instructor.id == instructor_id)
            .values(
                total_students=Instructor.total_students + students,
                total_revenue=Instructor.total_revenue + revenue,
            )
            .execution_options(synchronize_session=False)
        )

# Fin del archivo backend/app/modules/payments/repositories/course_repository.py
