# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/__init__.py

Ensamblador de rutas REST del módulo Payments.

Incluye (prefijo /payments):
- /checkout, /verify, /retry/{id}, /cancel/{id}
- /history, /details/{id}, /gateways
- /refund/{id}, /refund/{id}/process, /admin/refunds
- /webhooks, /webhooks/{gateway}

Autor: CourseMart
Fecha: 2026-03-15
"""

from fastapi import APIRouter

from .checkout import router as checkout_router
from .history import router as history_router
from .refunds import router as refunds_router
from .webhooks import router as webhooks_router
from .exception_handlers import register_exception_handlers

router = APIRouter()

# Prefijo común /payments para todas las rutas del módulo
router.include_router(checkout_router, prefix="/payments")
router.include_router(history_router, prefix="/payments")
router.include_router(refunds_router, prefix="/payments")
router.include_router(webhooks_router, prefix="/payments")

__all__ = ["router", "register_exception_handlers"]

# Fin del archivo backend/app/modules/payments/routes/__init__.py
