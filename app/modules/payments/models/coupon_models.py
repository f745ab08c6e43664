# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/coupon_models.py

Modelos ORM de cupones: coupons y coupon_usages.

- coupons.code se almacena en mayúsculas (búsqueda insensible a mayúsculas).
- coupons.used_count se mueve junto con inserts/deletes de coupon_usages.
- UNIQUE(coupon_id, user_id): un cupón por usuario.

Autor: CourseMart
Fecha: 2026-03-06
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK, JSONType, Money, utcnow
from app.modules.payments.enums import CouponApplicability, CouponType


class Coupon(Base):
    __tablename__ = "coupons"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    type: Mapped[CouponType] = mapped_column(CouponType.as_pg_enum(), nullable=False)
    value: Mapped[Decimal] = mapped_column(Money, nullable=False)

    minimum_amount: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    maximum_discount: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)

    usage_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    used_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    valid_from: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    valid_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    applicable_to: Mapped[CouponApplicability] = mapped_column(
        CouponApplicability.as_pg_enum(),
        nullable=False,
        default=CouponApplicability.ALL_COURSES,
    )
    course_ids: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    created_by: Mapped[Optional[int]] = mapped_column(BigIntPK, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("used_count >= 0", name="coupon_used_count_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Coupon {self.code} type={self.type} used={self.used_count}/{self.usage_limit}>"


class CouponUsage(Base):
    __tablename__ = "coupon_usages"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    coupon_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("coupons.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(BigIntPK, nullable=False, index=True)
    payment_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    discount_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    used_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("coupon_id", "user_id", name="uq_coupon_usage_coupon_user"),
    )

# Fin del archivo backend/app/modules/payments/models/coupon_models.py
