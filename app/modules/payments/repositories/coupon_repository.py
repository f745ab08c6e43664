# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/coupon_repository.py

Repositorios de coupons y coupon_usages.

used_count solo se modifica en SQL (used_count = used_count ± n) dentro de
la misma transacción que inserta/borra el CouponUsage correspondiente.

Autor: CourseMart
Fecha: 2026-03-06
"""

from typing import Optional, Sequence

from sqlalchemy import case, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.payments.models.coupon_models import Coupon, CouponUsage


class CouponRepository(BaseRepository[Coupon]):
    def __init__(self) -> None:
        super().__init__(Coupon)

    async def get_by_code(self, session: AsyncSession, code: str) -> Optional[Coupon]:
        """Búsqueda insensible a mayúsculas (los códigos se guardan en mayúsculas)."""
        stmt = select(Coupon).where(Coupon.code == code.strip().upper())
        result = await session.execute(stmt)
        return result.scalars().first()

    async def increment_used(self, session: AsyncSession, coupon_id: int) -> bool:
        """Suma un uso solo si queda cupo; False si el cupón ya está agotado."""
        result = await session.execute(
            update(Coupon)
            .where(
                Coupon.id == coupon_id,
                or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit),
            )
            .values(used_count=Coupon.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def decrement_used(self, session: AsyncSession, coupon_id: int, by: int = 1) -> None:
        """Resta `by` usos sin bajar de 0."""
        await session.execute(
            update(Coupon)
            .where(Coupon.id == coupon_id)
            .values(
                used_count=case(
                    (Coupon.used_count - by < 0, 0),
                    else_=Coupon.used_count - by,
                )
            )
            .execution_options(synchronize_session=False)
        )


class CouponUsageRepository(BaseRepository[CouponUsage]):
    def __init__(self) -> None:
        super().__init__(CouponUsage)

    async def has_used(self, session: AsyncSession, coupon_id: int, user_id: int) -> bool:
        stmt = select(CouponUsage.id).where(
            CouponUsage.coupon_id == coupon_id,
            CouponUsage.user_id == user_id,
        )
        return (await session.scalar(stmt.limit(1))) is not None

    async def list_for_payment(
        self, session: AsyncSession, payment_id: int
    ) -> Sequence[CouponUsage]:
        stmt = select(CouponUsage).where(CouponUsage.payment_id == payment_id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_for_payment(self, session: AsyncSession, payment_id: int) -> None:
        await session.execute(
            delete(CouponUsage)
            .where(CouponUsage.payment_id == payment_id)
            .execution_options(synchronize_session=False)
        )

# Fin del archivo backend/app/modules/payments/repositories/coupon_repository.py
