# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/verification/__init__.py

Verificación de pagos desde el callback del cliente.

Autor: CourseMart
Fecha: 2026-03-12
"""

from .verify_payment import evidence_from_request, verify_payment

__all__ = ["evidence_from_request", "verify_payment"]

# Fin del archivo backend/app/modules/payments/facades/verification/__init__.py
