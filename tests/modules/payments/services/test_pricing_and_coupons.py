# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/services/test_pricing_and_coupons.py

Tests de cálculo de totales y descuentos de cupón, y de la evaluación de
elegibilidad de cupones contra la base de datos.

Autor: CourseMart
Fecha: 2026-03-17
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.modules.payments.enums import CouponApplicability, CouponType
from app.modules.payments.errors import (
    CouponExhausted,
    CouponInvalid,
    CouponMinimumNotMet,
    CouponNotApplicable,
)
from app.modules.payments.models import Coupon
from app.modules.payments.repositories import CouponRepository
from app.modules.payments.services import (
    CouponService,
    compute_discount,
    compute_totals,
    generate_order_id,
)

NOW = datetime(2026, 3, 17, 12, 0, tzinfo=timezone.utc)


def _coupon(type_: CouponType, value: str, maximum: str | None = None) -> Coupon:
    return Coupon(
        code="X",
        type=type_,
        value=Decimal(value),
        maximum_discount=Decimal(maximum) if maximum is not None else None,
    )


class TestComputeDiscount:
    def test_percentage_is_capped_by_maximum_discount(self):
        coupon = _coupon(CouponType.PERCENTAGE, "10", maximum="100")
        assert compute_discount(coupon, Decimal("1400.00")) == Decimal("100.00")

    def test_percentage_without_cap(self):
        coupon = _coupon(CouponType.PERCENTAGE, "15")
        assert compute_discount(coupon, Decimal("999.99")) == Decimal("150.00")

    def test_fixed_amount_never_exceeds_subtotal(self):
        coupon = _coupon(CouponType.FIXED_AMOUNT, "750")
        assert compute_discount(coupon, Decimal("500.00")) == Decimal("500.00")

    @pytest.mark.parametrize("subtotal", ["0.01", "99.50", "400", "1400", "25000"])
    @pytest.mark.parametrize("percent,maximum", [("10", "100"), ("50", None), ("100", "300")])
    def test_percentage_bounds_hold(self, subtotal, percent, maximum):
        """discount <= min(subtotal, maximum_discount) y final >= tax."""
        subtotal = Decimal(subtotal)
        coupon = _coupon(CouponType.PERCENTAGE, percent, maximum)
        discount = compute_discount(coupon, subtotal)

        cap = Decimal(maximum) if maximum is not None else subtotal
        assert discount <= min(subtotal, cap)

        totals = compute_totals(subtotal, discount, Decimal("0.18"))
        assert totals.final >= totals.tax


class TestComputeTotals:
    def test_save10_scenario(self):
        """courseA 1000 + courseB rebajado a 400, SAVE10 (10 %, máx 100)."""
        coupon = _coupon(CouponType.PERCENTAGE, "10", maximum="100")
        subtotal = Decimal("1000.00") + Decimal("400.00")

        totals = compute_totals(subtotal, compute_discount(coupon, subtotal), Decimal("0.18"))

        assert totals.subtotal == Decimal("1400.00")
        assert totals.discount == Decimal("100.00")
        assert totals.taxable == Decimal("1300.00")
        assert totals.tax == Decimal("234.00")
        assert totals.final == Decimal("1534.00")

    def test_tax_rounds_half_up_to_cents(self):
        totals = compute_totals(Decimal("10.25"), Decimal("0"), Decimal("0.18"))
        # 10.25 * 0.18 = 1.845 → 1.85
        assert totals.tax == Decimal("1.85")
        assert totals.final == Decimal("12.10")


def test_order_id_format():
    order_id = generate_order_id()
    prefix, millis, suffix = order_id.split("_")
    assert prefix == "ORD"
    assert millis.isdigit()
    assert len(suffix) == 9 and suffix.isalnum() and suffix == suffix.lower()
    assert generate_order_id() != order_id


class TestCouponEvaluation:
    async def _evaluate(self, db, code="SAVE10", course_ids=(1,), subtotal="1400.00"):
        return await CouponService().evaluate(
            db,
            code=code,
            user_id=7,
            course_ids=list(course_ids),
            subtotal=Decimal(subtotal),
            now=NOW,
        )

    async def test_sin_codigo_no_aplica_nada(self, db):
        assert await self._evaluate(db, code="  ") is None

    async def test_codigo_desconocido(self, db):
        with pytest.raises(CouponInvalid):
            await self._evaluate(db, code="NOPE")

    async def test_cupon_inactivo(self, db, make_coupon):
        await make_coupon(is_active=False)
        with pytest.raises(CouponInvalid):
            await self._evaluate(db)

    @pytest.mark.parametrize(
        "window",
        [
            {"valid_from": NOW + timedelta(days=1)},
            {"valid_until": NOW - timedelta(seconds=1)},
        ],
    )
    async def test_fuera_de_vigencia(self, db, make_coupon, window):
        await make_coupon(**window)
        with pytest.raises(CouponInvalid):
            await self._evaluate(db)

    async def test_dentro_de_vigencia_e_insensible_a_mayusculas(self, db, make_coupon):
        await make_coupon(valid_from=NOW - timedelta(days=1), valid_until=NOW + timedelta(days=1))

        application = await self._evaluate(db, code=" save10 ")

        assert application.coupon.code == "SAVE10"
        assert application.discount_amount == Decimal("100.00")

    async def test_agotado(self, db, make_coupon):
        await make_coupon(usage_limit=3, used_count=3)
        with pytest.raises(CouponExhausted):
            await self._evaluate(db)

    async def test_minimo_no_alcanzado(self, db, make_coupon):
        await make_coupon(minimum_amount=Decimal("500.00"))

        with pytest.raises(CouponMinimumNotMet) as exc_info:
            await self._evaluate(db, subtotal="499.99")
        assert exc_info.value.details["minimum_amount"] == "500.00"

    async def test_cursos_especificos_sin_interseccion(self, db, make_coupon):
        await make_coupon(applicable_to=CouponApplicability.SPECIFIC_COURSES, course_ids=[10, 11])

        with pytest.raises(CouponNotApplicable):
            await self._evaluate(db, course_ids=[1, 2])

        application = await self._evaluate(db, course_ids=[2, 11])
        assert application is not None

    async def test_el_primer_fallo_define_el_error(self, db, make_coupon):
        """Agotado y bajo el mínimo a la vez: gana CouponExhausted."""
        await make_coupon(usage_limit=1, used_count=1, minimum_amount=Decimal("5000"))
        with pytest.raises(CouponExhausted):
            await self._evaluate(db)


class TestCouponUsageCounter:
    async def test_increment_respeta_usage_limit(self, db, make_coupon, session_factory):
        coupon_id = (await make_coupon(usage_limit=2, used_count=1)).id
        repo = CouponRepository()

        assert await repo.increment_used(db, coupon_id) is True
        assert await repo.increment_used(db, coupon_id) is False
        await db.commit()

        async with session_factory() as session:
            assert (await session.get(Coupon, coupon_id)).used_count == 2

    async def test_increment_sin_limite(self, db, make_coupon):
        coupon_id = (await make_coupon(usage_limit=None, used_count=41)).id
        assert await CouponRepository().increment_used(db, coupon_id) is True
