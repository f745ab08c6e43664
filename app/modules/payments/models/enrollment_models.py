# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/enrollment_models.py

Modelos ORM que produce el fulfillment: enrollments y earnings.

- UNIQUE(student_id, course_id, payment_id): el fulfillment es idempotente
  por pago; una inserción concurrente perdedora equivale a "ya cumplido".
- UNIQUE(course_id, payment_id) en earnings.
- Inmutables salvo Enrollment→REFUNDED y Earning→CANCELLED por reembolso.

Autor: CourseMart
Fecha: 2026-03-06
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK, Money, utcnow
from app.modules.payments.enums import EarningStatus, EnrollmentSource, EnrollmentStatus


class Enrollment(Base):
    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(BigIntPK, nullable=False)
    course_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False
    )
    payment_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("payments.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    status: Mapped[EnrollmentStatus] = mapped_column(
        EnrollmentStatus.as_pg_enum(), nullable=False, default=EnrollmentStatus.ACTIVE
    )
    enrollment_source: Mapped[EnrollmentSource] = mapped_column(
        EnrollmentSource.as_pg_enum(), nullable=False, default=EnrollmentSource.PURCHASE
    )
    discount_applied: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0.00")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "student_id", "course_id", "payment_id", name="uq_enrollment_student_course_payment"
        ),
        Index("ix_enrollments_student_course", "student_id", "course_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Enrollment id={self.id} student={self.student_id} "
            f"course={self.course_id} status={self.status}>"
        )


class Earning(Base):
    __tablename__ = "earnings"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    instructor_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("instructors.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    course_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False
    )
    payment_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("payments.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # amount = precio efectivo del curso; commission + platform_fee == amount
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    commission: Mapped[Decimal] = mapped_column(Money, nullable=False)
    platform_fee: Mapped[Decimal] = mapped_column(Money, nullable=False)

    status: Mapped[EarningStatus] = mapped_column(
        EarningStatus.as_pg_enum(), nullable=False, default=EarningStatus.PENDING
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("course_id", "payment_id", name="uq_earning_course_payment"),
    )

# Fin del archivo backend/app/modules/payments/models/enrollment_models.py
