# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/razorpay_adapter.py

Adaptador Razorpay: orden + checkout.js en el frontend + firma HMAC-SHA256.

- create: POST /v1/orders (Basic auth key_id:key_secret, monto en paise,
  receipt = orderId, captura automática) → id de la orden (order_...)
- verify: HMAC-SHA256("{gatewayOrderId}|{paymentId}", key_secret),
  comparación local en tiempo constante
- fetch: GET /v1/payments/{id}
- refund: POST /v1/payments/{id}/refund

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from decimal import Decimal
from typing import Optional

from app.modules.payments.adapters.base import (
    GatewayAdapter,
    GatewayOrder,
    OrderRequest,
    ProviderPaymentInfo,
    RefundInfo,
    VerificationEvidence,
    from_minor_units,
    to_minor_units,
)
from app.modules.payments.adapters.method_mapping import map_razorpay_method
from app.modules.payments.enums import PaymentGateway
from app.modules.payments.errors import GatewayRejected, GatewayUnavailable, RefundRejected
from app.modules.payments.services.checkout_session_store import CheckoutSession

logger = logging.getLogger(__name__)


def compute_razorpay_signature(secret: str, order_id: str, payment_id: str) -> str:
    return hmac.new(
        secret.encode("utf-8"),
        msg=f"{order_id}|{payment_id}".encode("utf-8"),
        digestmod=hashlib.sha256,
    ).hexdigest()


class RazorpayAdapter(GatewayAdapter):
    gateway = PaymentGateway.RAZORPAY

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.razorpay_key_id and self.settings.razorpay_key_secret)

    @property
    def _auth(self) -> tuple[str, str]:
        if not self.is_configured:
            raise GatewayUnavailable(details={"gateway": self.gateway.value, "reason": "not_configured"})
        return (self.settings.razorpay_key_id, self.settings.razorpay_key_secret)

    def public_config(self) -> dict:
        return {"keyId": self.settings.razorpay_key_id}

    async def create_order(self, order: OrderRequest) -> GatewayOrder:
        payload = {
            "amount": to_minor_units(order.amount),
            "currency": order.currency,
            "receipt": order.order_id[:40],
            "payment_capture": 1,
            "notes": {
                "orderId": order.order_id,
                "courseIds": ",".join(str(c) for c in order.course_ids),
                "description": order.description[:256],
            },
        }
        data = await self.http.request_json(
            "POST", "/v1/orders", operation="create", auth=self._auth, json=payload
        )
        if not data.get("id"):
            raise GatewayRejected(details={"gateway": self.gateway.value, "reason": "incomplete_order"})
        logger.info("razorpay_order_created order=%s rzp_order=%s", order.order_id, data["id"])
        return GatewayOrder(external_id=data["id"], raw=data)

    async def verify_completion(
        self,
        evidence: VerificationEvidence,
        expected: CheckoutSession,
    ) -> bool:
        secret = self.settings.razorpay_key_secret
        if not secret:
            raise GatewayUnavailable(details={"gateway": self.gateway.value, "reason": "not_configured"})

        if not (evidence.payment_id and evidence.gateway_order_id and evidence.signature):
            logger.warning("razorpay_verify_missing_fields order=%s", expected.order_id)
            return False
        if evidence.gateway_order_id != expected.gateway_order_id:
            logger.warning("razorpay_verify_order_mismatch order=%s", expected.order_id)
            return False

        expected_signature = compute_razorpay_signature(
            secret, evidence.gateway_order_id, evidence.payment_id
        )
        return hmac.compare_digest(expected_signature, evidence.signature)

    async def fetch_settled_details(self, external_id: str) -> ProviderPaymentInfo:
        data = await self.http.request_json(
            "GET", f"/v1/payments/{external_id}", operation="fetch", auth=self._auth
        )
        return ProviderPaymentInfo(
            external_id=str(data.get("id") or external_id),
            status=str(data.get("status", "")),
            amount=from_minor_units(data.get("amount")),
            method=map_razorpay_method(data),
            raw=data,
        )

    async def create_refund(
        self,
        external_id: str,
        amount: Decimal,
        note: str,
        *,
        idempotency_key: Optional[str] = None,
    ) -> RefundInfo:
        payload: dict = {"amount": to_minor_units(amount), "notes": {"reason": note[:256]}}
        if idempotency_key:
            payload["receipt"] = idempotency_key[:40]
        try:
            data = await self.http.request_json(
                "POST",
                f"/v1/payments/{external_id}/refund",
                operation="refund",
                auth=self._auth,
                json=payload,
            )
        except GatewayRejected as exc:
            raise RefundRejected(details=exc.details) from exc

        if data.get("status") == "failed" or not data.get("id"):
            raise RefundRejected(details={"gateway": self.gateway.value, "status": data.get("status")})
        return RefundInfo(
            refund_id=str(data["id"]),
            status=str(data.get("status", "processed")),
            amount=from_minor_units(data.get("amount")) or amount,
            raw=data,
        )


__all__ = ["RazorpayAdapter", "compute_razorpay_signature"]

# Fin del archivo backend/app/modules/payments/adapters/razorpay_adapter.py
