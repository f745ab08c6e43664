# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/errors.py

Errores de dominio del módulo Payments.

Objetivo:
- Definir excepciones semánticas que fachadas, servicios y adaptadores de
  pasarela pueden lanzar sin acoplarse a FastAPI.
- Cada error lleva su código estable, status HTTP y el flag `state_changed`
  para que el cliente distinga "no pasó nada, reintenta la misma llamada"
  de "hubo una transición, usa retry".

El texto del proveedor nunca va en `message`; se guarda en `details`
(y en logs) para auditoría.

Autor: CourseMart
Fecha: 2026-03-06
"""

from __future__ import annotations

from typing import Any, Optional


class PaymentsError(Exception):
    """
    Error base para el módulo Payments.
    """

    code: str = "PAYMENTS_ERROR"
    http_status: int = 400
    state_changed: bool = False
    default_message: str = "Payment operation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "state_changed": self.state_changed,
            "details": self.details,
        }


class InvalidRequest(PaymentsError):
    code = "INVALID_REQUEST"
    default_message = "Invalid request"


class NotFound(PaymentsError):
    code = "NOT_FOUND"
    http_status = 404
    default_message = "Payment not found"


class Forbidden(PaymentsError):
    code = "FORBIDDEN"
    http_status = 403
    default_message = "Access denied"


class CourseUnavailable(PaymentsError):
    code = "COURSE_UNAVAILABLE"
    default_message = "Some courses are not available for purchase"


class AlreadyEnrolled(PaymentsError):
    code = "ALREADY_ENROLLED"
    http_status = 409
    default_message = "You are already enrolled in one or more of these courses"


# --------------------------------------------------------------------------- #
# Cupones (checkout abortado antes de crear cualquier Payment)
# --------------------------------------------------------------------------- #
class CouponError(PaymentsError):
    code = "COUPON_ERROR"
    default_message = "Coupon cannot be applied"


class CouponInvalid(CouponError):
    code = "COUPON_INVALID"
    default_message = "Invalid or expired coupon"


class CouponExhausted(CouponError):
    code = "COUPON_EXHAUSTED"
    default_message = "Coupon usage limit exceeded"


class CouponAlreadyUsed(CouponError):
    code = "COUPON_ALREADY_USED"
    default_message = "You have already used this coupon"


class CouponMinimumNotMet(CouponError):
    code = "COUPON_MINIMUM_NOT_MET"
    default_message = "Order amount is below the coupon minimum"


class CouponNotApplicable(CouponError):
    code = "COUPON_NOT_APPLICABLE"
    default_message = "Coupon is not applicable to selected courses"


# --------------------------------------------------------------------------- #
# Pasarelas
# --------------------------------------------------------------------------- #
class GatewayUnavailable(PaymentsError):
    """Red, timeout, 5xx o reintentos transitorios agotados. Reintentable."""

    code = "GATEWAY_UNAVAILABLE"
    http_status = 503
    default_message = "Payment gateway temporarily unavailable"


class GatewayRejected(PaymentsError):
    """El proveedor rechazó la solicitud (4xx / validación)."""

    code = "GATEWAY_REJECTED"
    http_status = 502
    default_message = "Payment gateway rejected the request"


# --------------------------------------------------------------------------- #
# Verificación / ciclo de vida
# --------------------------------------------------------------------------- #
class SessionInvalid(PaymentsError):
    code = "SESSION_INVALID"
    default_message = "Invalid or expired payment session"


class VerificationFailed(PaymentsError):
    """La evidencia no verificó: el pago pasó a FAILED."""

    code = "VERIFICATION_FAILED"
    state_changed = True
    default_message = "Payment verification failed"


class RefundRejected(PaymentsError):
    """El proveedor declinó el reembolso: la solicitud quedó FAILED."""

    code = "REFUND_REJECTED"
    http_status = 502
    state_changed = True
    default_message = "Refund was declined by the payment gateway"


class InvalidStateTransition(PaymentsError):
    code = "INVALID_STATE_TRANSITION"
    http_status = 409
    default_message = "Payment is not in a valid state for this operation"


class WebhookSignatureInvalid(PaymentsError):
    code = "WEBHOOK_SIGNATURE_INVALID"
    http_status = 401
    default_message = "Invalid webhook signature"


__all__ = [
    "PaymentsError",
    "InvalidRequest",
    "NotFound",
    "Forbidden",
    "CourseUnavailable",
    "AlreadyEnrolled",
    "CouponError",
    "CouponInvalid",
    "CouponExhausted",
    "CouponAlreadyUsed",
    "CouponMinimumNotMet",
    "CouponNotApplicable",
    "GatewayUnavailable",
    "GatewayRejected",
    "SessionInvalid",
    "VerificationFailed",
    "RefundRejected",
    "InvalidStateTransition",
    "WebhookSignatureInvalid",
]

# Fin del archivo backend/app/modules/payments/errors.py
