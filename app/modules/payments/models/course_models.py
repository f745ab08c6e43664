# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/course_models.py

Modelos ORM del catálogo que el checkout lee y cuyos agregados el
fulfillment actualiza: courses e instructors.

Los contadores (total_enrollments, total_revenue, total_students) solo se
modifican con incrementos en SQL (col = col + :delta).

Autor: CourseMart
Fecha: 2026-03-06
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK, Money, utcnow
from app.modules.payments.enums import CourseStatus


class Instructor(Base):
    __tablename__ = "instructors"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntPK, nullable=False, unique=True)
    total_students: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_revenue: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0.00"), server_default="0"
    )

    def __repr__(self) -> str:
        return f"<Instructor id={self.id} user_id={self.user_id}>"


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    discount_price: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)

    status: Mapped[CourseStatus] = mapped_column(
        CourseStatus.as_pg_enum(), nullable=False, default=CourseStatus.DRAFT, index=True
    )

    instructor_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("instructors.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    total_enrollments: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    total_revenue: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0.00"), server_default="0"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    @property
    def effective_price(self) -> Decimal:
        """Precio cobrado: discount_price si existe, si no price."""
        return self.discount_price if self.discount_price is not None else self.price

    def __repr__(self) -> str:
        return f"<Course id={self.id} slug={self.slug} status={self.status}>"

# Fin del archivo backend/app/modules/payments/models/course_models.py
