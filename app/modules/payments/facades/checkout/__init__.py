# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/checkout/__init__.py

Punto de entrada del submódulo de checkout del módulo Payments.

Autor: CourseMart
Fecha: 2026-03-12
"""

from .initiate_checkout import initiate_checkout
from .pending_payment import build_checkout_out, open_pending_payment

__all__ = [
    "build_checkout_out",
    "initiate_checkout",
    "open_pending_payment",
]

# Fin del archivo backend/app/modules/payments/facades/checkout/__init__.py
