# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/serializers.py

Conversión de modelos ORM a esquemas de salida.

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

from typing import Optional

from app.modules.payments.models import Enrollment, Payment, RefundRequest
from app.modules.payments.schemas import EnrollmentOut, PaymentOut, RefundRequestOut


def payment_out(payment: Payment) -> PaymentOut:
    return PaymentOut(
        id=payment.id,
        order_id=payment.order_id,
        amount=payment.amount,
        original_amount=payment.original_amount,
        discount_amount=payment.discount_amount,
        tax=payment.tax,
        currency=str(payment.currency),
        status=str(payment.status),
        method=str(payment.method),
        gateway=str(payment.gateway),
        transaction_id=payment.transaction_id,
        refund_amount=payment.refund_amount,
        refund_reason=payment.refund_reason,
        created_at=payment.created_at,
        completed_at=payment.completed_at,
        failed_at=payment.failed_at,
        cancelled_at=payment.cancelled_at,
        refunded_at=payment.refunded_at,
    )


def enrollment_out(enrollment: Enrollment, course_title: Optional[str] = None) -> EnrollmentOut:
    return EnrollmentOut(
        id=enrollment.id,
        course_id=enrollment.course_id,
        course_title=course_title,
        status=str(enrollment.status),
        created_at=enrollment.created_at,
    )


def refund_request_out(request: RefundRequest) -> RefundRequestOut:
    return RefundRequestOut(
        id=request.id,
        payment_id=request.payment_id,
        user_id=request.user_id,
        status=str(request.status),
        reason=request.reason,
        requested_amount=request.requested_amount,
        admin_notes=request.admin_notes,
        reviewed_by=request.reviewed_by,
        requested_at=request.requested_at,
        reviewed_at=request.reviewed_at,
        processed_at=request.processed_at,
        gateway_refund_id=request.gateway_refund_id,
        error_message=request.error_message,
    )


__all__ = ["enrollment_out", "payment_out", "refund_request_out"]

# Fin del archivo backend/app/modules/payments/facades/serializers.py
