# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/refunds/__init__.py

Solicitud y decisión de reembolsos.

Autor: CourseMart
Fecha: 2026-03-13
"""

from .process_refund import process_refund
from .request_refund import request_refund

__all__ = ["process_refund", "request_refund"]

# Fin del archivo backend/app/modules/payments/facades/refunds/__init__.py
