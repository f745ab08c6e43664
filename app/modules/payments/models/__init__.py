# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/__init__.py

Modelos ORM del módulo Payments.

Importar este paquete registra todas las tablas en Base.metadata
(lo usa create_all).

Autor: CourseMart
Fecha: 2026-03-06
"""

from .payment_models import Payment
from .refund_request_models import RefundRequest
from .coupon_models import Coupon, CouponUsage
from .course_models import Course, Instructor
from .user_models import AppUser
from .enrollment_models import Earning, Enrollment
from .cart_models import CartItem, Notification

__all__ = [
    "AppUser",
    "CartItem",
    "Coupon",
    "CouponUsage",
    "Course",
    "Earning",
    "Enrollment",
    "Instructor",
    "Notification",
    "Payment",
    "RefundRequest",
]

# Fin del archivo backend/app/modules/payments/models/__init__.py
