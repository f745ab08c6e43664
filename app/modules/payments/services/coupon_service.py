# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/coupon_service.py

Evaluación y registro de cupones.

Orden de validación (el primero que falla define el error):
    1. CouponInvalid        código desconocido, inactivo o fuera de vigencia
    2. CouponExhausted      used_count >= usage_limit
    3. CouponAlreadyUsed    el usuario ya tiene un CouponUsage del cupón
    4. CouponMinimumNotMet  subtotal < minimum_amount
    5. CouponNotApplicable  SPECIFIC_COURSES sin intersección con el carrito

Descuento:
    PERCENTAGE   → subtotal * value / 100, acotado a maximum_discount
    FIXED_AMOUNT → value
    siempre min(descuento, subtotal), redondeado a 0.01 half-up

Autor: CourseMart
Fecha: 2026-03-10
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.payments.enums import CouponApplicability, CouponType
from app.modules.payments.errors import (
    CouponAlreadyUsed,
    CouponExhausted,
    CouponInvalid,
    CouponMinimumNotMet,
    CouponNotApplicable,
)
from app.modules.payments.models.coupon_models import Coupon
from app.modules.payments.repositories import CouponRepository, CouponUsageRepository
from app.modules.payments.services.pricing import round_money
from app.modules.payments.utils.datetime_helpers import ensure_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass
class CouponApplication:
    coupon: Coupon
    discount_amount: Decimal


def compute_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
    """Cálculo puro del descuento (sin validar elegibilidad)."""
    subtotal = Decimal(subtotal)
    value = Decimal(coupon.value)

    if coupon.type == CouponType.PERCENTAGE:
        discount = subtotal * value / Decimal(100)
        if coupon.maximum_discount is not None:
            discount = min(discount, Decimal(coupon.maximum_discount))
    else:
        discount = value

    discount = max(min(discount, subtotal), Decimal("0"))
    return round_money(discount)


def _coupon_course_ids(coupon: Coupon) -> set[int]:
    ids: set[int] = set()
    for raw in coupon.course_ids or []:
        try:
            ids.add(int(raw))
        except (TypeError, ValueError):
            continue
    return ids


class CouponService:
    def __init__(
        self,
        coupon_repo: Optional[CouponRepository] = None,
        usage_repo: Optional[CouponUsageRepository] = None,
    ) -> None:
        self.coupon_repo = coupon_repo or CouponRepository()
        self.usage_repo = usage_repo or CouponUsageRepository()

    # ------------------------------------------------------------------ #
    # Evaluación
    # ------------------------------------------------------------------ #
    async def evaluate(
        self,
        session: AsyncSession,
        *,
        code: Optional[str],
        user_id: int,
        course_ids: Iterable[int],
        subtotal: Decimal,
        now: Optional[datetime] = None,
    ) -> Optional[CouponApplication]:
        """None si no se envió código; si no, la aplicación o un CouponError."""
        if not code or not code.strip():
            return None

        coupon = await self.coupon_repo.get_by_code(session, code)
        now = ensure_utc(now or utcnow())

        if coupon is None or not coupon.is_active:
            raise CouponInvalid()
        if coupon.valid_from is not None and now < ensure_utc(coupon.valid_from):
            raise CouponInvalid()
        if coupon.valid_until is not None and now > ensure_utc(coupon.valid_until):
            raise CouponInvalid()

        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            raise CouponExhausted()

        if await self.usage_repo.has_used(session, coupon.id, user_id):
            raise CouponAlreadyUsed()

        if coupon.minimum_amount is not None and Decimal(subtotal) < Decimal(coupon.minimum_amount):
            raise CouponMinimumNotMet(
                f"Minimum order amount of {coupon.minimum_amount} required",
                details={"minimum_amount": str(coupon.minimum_amount)},
            )

        if coupon.applicable_to == CouponApplicability.SPECIFIC_COURSES:
            if not _coupon_course_ids(coupon) & {int(c) for c in course_ids}:
                raise CouponNotApplicable()

        return CouponApplication(coupon=coupon, discount_amount=compute_discount(coupon, subtotal))

    # ------------------------------------------------------------------ #
    # Uso / liberación
    # ------------------------------------------------------------------ #
    async def record_usage(
        self,
        session: AsyncSession,
        application: CouponApplication,
        *,
        user_id: int,
        payment_id: int,
    ) -> None:
        """
        Inserta el CouponUsage e incrementa used_count en la transacción actual.

        Raises:
            CouponAlreadyUsed: violación de UNIQUE(coupon_id, user_id); la
            transacción queda inutilizable y quien llama debe hacer rollback.
            CouponExhausted: otro checkout consumió el último uso entre la
            evaluación y este incremento condicional.
        """
        # tras un flush fallido los atributos ORM quedan expirados
        coupon_id = application.coupon.id
        code = application.coupon.code
        try:
            await self.usage_repo.create(
                session,
                coupon_id=coupon_id,
                user_id=user_id,
                payment_id=payment_id,
                discount_amount=application.discount_amount,
            )
        except IntegrityError as exc:
            logger.info("coupon_usage_conflict coupon=%s user=%s", code, user_id)
            raise CouponAlreadyUsed() from exc

        if not await self.coupon_repo.increment_used(session, coupon_id):
            logger.info("coupon_usage_limit_reached coupon=%s user=%s", code, user_id)
            raise CouponExhausted()

    async def release_for_payment(self, session: AsyncSession, payment_id: int) -> int:
        """Borra los CouponUsage del pago y devuelve los usos (used_count >= 0)."""
        usages = await self.usage_repo.list_for_payment(session, payment_id)
        if not usages:
            return 0

        per_coupon: dict[int, int] = {}
        for usage in usages:
            per_coupon[usage.coupon_id] = per_coupon.get(usage.coupon_id, 0) + 1

        await self.usage_repo.delete_for_payment(session, payment_id)
        for coupon_id, count in per_coupon.items():
            await self.coupon_repo.decrement_used(session, coupon_id, count)

        logger.info("coupon_usage_released payment=%s usages=%s", payment_id, len(usages))
        return len(usages)


__all__ = ["CouponApplication", "CouponService", "compute_discount"]

# Fin del archivo backend/app/modules/payments/services/coupon_service.py
