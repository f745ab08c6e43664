# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/pricing.py

Cálculo de totales del checkout y generación de order ids.

    taxable = subtotal - discount
    tax     = round(taxable * tax_rate, 2)
    final   = taxable + tax

Impuesto plano sobre el total descontado; sin impuesto por línea.

Autor: CourseMart
Fecha: 2026-03-10
"""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")

_ORDER_ID_ALPHABET = string.ascii_lowercase + string.digits


def round_money(value: Any) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    final: Decimal

    @property
    def taxable(self) -> Decimal:
        return self.subtotal - self.discount

    def as_dict(self) -> dict[str, str]:
        return {
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "tax": str(self.tax),
            "total": str(self.final),
        }


def compute_totals(subtotal: Decimal, discount: Decimal, tax_rate: Decimal) -> OrderTotals:
    subtotal = round_money(subtotal)
    discount = round_money(discount)
    taxable = subtotal - discount
    tax = round_money(taxable * Decimal(tax_rate))
    return OrderTotals(subtotal=subtotal, discount=discount, tax=tax, final=taxable + tax)


def generate_order_id() -> str:
    """ORD_{epochMillis}_{random9}"""
    suffix = "".join(secrets.choice(_ORDER_ID_ALPHABET) for _ in range(9))
    return f"ORD_{int(time.time() * 1000)}_{suffix}"


__all__ = ["CENT", "OrderTotals", "compute_totals", "generate_order_id", "round_money"]

# Fin del archivo backend/app/modules/payments/services/pricing.py
