# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/lifecycle/__init__.py

Ciclo de vida posterior al checkout: reintento y cancelación.

Autor: CourseMart
Fecha: 2026-03-13
"""

from .cancel_payment import cancel_payment
from .retry_payment import retry_payment

__all__ = ["cancel_payment", "retry_payment"]

# Fin del archivo backend/app/modules/payments/facades/lifecycle/__init__.py
