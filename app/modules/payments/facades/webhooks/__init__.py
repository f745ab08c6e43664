# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/webhooks/__init__.py

Exporta las funciones clave de facades/webhooks.

Autor: CourseMart
Fecha: 2026-03-14
"""

from .verify import verify_webhook_signature
from .handler import handle_webhook

__all__ = [
    "verify_webhook_signature",
    "handle_webhook",
]

# Fin del archivo backend/app/modules/payments/facades/webhooks/__init__.py
