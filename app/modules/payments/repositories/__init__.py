# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/__init__.py

Punto de entrada de repositorios del módulo Payments.

Incluye:
- PaymentRepository (transiciones CAS)
- CouponRepository, CouponUsageRepository
- CourseRepository, InstructorRepository
- EnrollmentRepository, EarningRepository
- RefundRequestRepository
- CartRepository, UserRepository, NotificationRepository

Autor: CourseMart
Fecha: 2026-03-06
"""

from .payment_repository import PaymentRepository
from .coupon_repository import CouponRepository, CouponUsageRepository
from .course_repository import CourseRepository, InstructorRepository
from .enrollment_repository import EarningRepository, EnrollmentRepository
from .refund_request_repository import RefundRequestRepository
from .cart_repository import CartRepository, NotificationRepository, UserRepository

__all__ = [
    "PaymentRepository",
    "CouponRepository",
    "CouponUsageRepository",
    "CourseRepository",
    "InstructorRepository",
    "EnrollmentRepository",
    "EarningRepository",
    "RefundRequestRepository",
    "CartRepository",
    "UserRepository",
    "NotificationRepository",
]

# Fin del archivo backend/app/modules/payments/repositories/__init__.py
