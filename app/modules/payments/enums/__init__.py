# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/__init__.py

Superficie de exportación de enums del módulo Payments.

Autor: CourseMart
Fecha: 2026-03-06
"""

from .coupon_enums import CouponApplicability, CouponType
from .course_status_enum import CourseStatus
from .currency_enum import Currency
from .earning_status_enum import EarningStatus
from .enrollment_enums import EnrollmentSource, EnrollmentStatus, HOLDING_ENROLLMENT_STATUSES
from .payment_gateway_enum import PaymentGateway
from .payment_method_enum import PaymentMethod
from .payment_status_enum import ALLOWED_TRANSITIONS, PaymentStatus
from .refund_request_status_enum import RefundDecision, RefundRequestStatus

__all__ = [
    "ALLOWED_TRANSITIONS",
    "CouponApplicability",
    "CouponType",
    "CourseStatus",
    "Currency",
    "EarningStatus",
    "EnrollmentSource",
    "EnrollmentStatus",
    "HOLDING_ENROLLMENT_STATUSES",
    "PaymentGateway",
    "PaymentMethod",
    "PaymentStatus",
    "RefundDecision",
    "RefundRequestStatus",
]

# Fin del archivo backend/app/modules/payments/enums/__init__.py
