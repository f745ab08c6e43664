# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/method_mapping.py

Normalización del método de pago reportado por cada proveedor a la
taxonomía interna (PaymentMethod). Valores no mapeados caen al método más
común del proveedor.

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from app.modules.payments.enums import PaymentMethod

RAZORPAY_METHODS: Mapping[str, PaymentMethod] = {
    "upi": PaymentMethod.UPI,
    "netbanking": PaymentMethod.NET_BANKING,
    "wallet": PaymentMethod.WALLET,
    "emi": PaymentMethod.EMI,
    "bank_transfer": PaymentMethod.BANK_TRANSFER,
}

STRIPE_METHODS: Mapping[str, PaymentMethod] = {
    "card": PaymentMethod.CREDIT_CARD,
    "upi": PaymentMethod.UPI,
    "bank_transfer": PaymentMethod.BANK_TRANSFER,
}

PAYU_MODES: Mapping[str, PaymentMethod] = {
    "cc": PaymentMethod.CREDIT_CARD,
    "creditcard": PaymentMethod.CREDIT_CARD,
    "dc": PaymentMethod.DEBIT_CARD,
    "debitcard": PaymentMethod.DEBIT_CARD,
    "upi": PaymentMethod.UPI,
    "nb": PaymentMethod.NET_BANKING,
    "netbanking": PaymentMethod.NET_BANKING,
    "wallet": PaymentMethod.WALLET,
    "emi": PaymentMethod.EMI,
    "banktransfer": PaymentMethod.BANK_TRANSFER,
}


def _norm(value: Optional[Any]) -> str:
    return str(value or "").strip().lower()


def map_razorpay_method(details: Mapping[str, Any]) -> PaymentMethod:
    method = _norm(details.get("method"))
    if method == "card":
        card = details.get("card") or {}
        return PaymentMethod.CREDIT_CARD if _norm(card.get("type")) == "credit" else PaymentMethod.DEBIT_CARD
    return RAZORPAY_METHODS.get(method, PaymentMethod.UPI)


def map_stripe_method(details: Mapping[str, Any]) -> PaymentMethod:
    types = details.get("payment_method_types") or []
    first = _norm(types[0]) if types else ""
    return STRIPE_METHODS.get(first, PaymentMethod.CREDIT_CARD)


def map_payu_method(details: Mapping[str, Any]) -> PaymentMethod:
    return PAYU_MODES.get(_norm(details.get("mode")), PaymentMethod.CREDIT_CARD)


def map_paypal_method(details: Mapping[str, Any]) -> PaymentMethod:
    return PaymentMethod.CREDIT_CARD


__all__ = [
    "map_razorpay_method",
    "map_stripe_method",
    "map_payu_method",
    "map_paypal_method",
]

# Fin del archivo backend/app/modules/payments/adapters/method_mapping.py
