# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/paypal_adapter.py

Adaptador PayPal (REST v2, OAuth client credentials).

- token: POST /v1/oauth2/token; cacheado hasta 60s antes de expirar
- create: POST /v2/checkout/orders (intent CAPTURE; INR convertido a USD
  con paypal_inr_per_usd) → link "approve"
- verify: POST /v2/checkout/orders/{id}/capture → status == "COMPLETED"
- fetch: GET /v2/checkout/orders/{id} (id de la captura como referencia)
- refund: POST /v2/payments/captures/{captureId}/refund
- webhooks: POST /v1/notifications/verify-webhook-signature

Cache de token en memoria por proceso: cada réplica obtiene el suyo.

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

import json
import logging
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional

from app.modules.payments.adapters.base import (
    GatewayAdapter,
    GatewayOrder,
    OrderRequest,
    ProviderPaymentInfo,
    RefundInfo,
    VerificationEvidence,
)
from app.modules.payments.adapters.method_mapping import map_paypal_method
from app.modules.payments.enums import PaymentGateway
from app.modules.payments.errors import GatewayRejected, GatewayUnavailable, RefundRejected
from app.modules.payments.services.checkout_session_store import CheckoutSession

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_MARGIN_SECONDS = 60

# Headers requeridos para verificar la firma de un webhook
PAYPAL_WEBHOOK_HEADERS = {
    "auth_algo": "paypal-auth-algo",
    "cert_url": "paypal-cert-url",
    "transmission_id": "paypal-transmission-id",
    "transmission_sig": "paypal-transmission-sig",
    "transmission_time": "paypal-transmission-time",
}


class PayPalAdapter(GatewayAdapter):
    gateway = PaymentGateway.PAYPAL

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._token: Optional[str] = None
        self._token_expires_at: float = 0.0

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.paypal_client_id and self.settings.paypal_client_secret)

    def public_config(self) -> dict:
        return {"clientId": self.settings.paypal_client_id}

    # ------------------------------------------------------------------ #
    # Token OAuth
    # ------------------------------------------------------------------ #
    def clear_token_cache(self) -> None:
        self._token = None
        self._token_expires_at = 0.0

    async def _access_token(self, operation: str) -> str:
        if not self.is_configured:
            raise GatewayUnavailable(details={"gateway": self.gateway.value, "reason": "not_configured"})

        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        data = await self.http.request_json(
            "POST",
            "/v1/oauth2/token",
            operation=operation,
            idempotent=True,
            auth=(self.settings.paypal_client_id, self.settings.paypal_client_secret),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
        )
        token = data.get("access_token")
        if not token:
            raise GatewayUnavailable(details={"gateway": self.gateway.value, "reason": "token_missing"})

        expires_in = int(data.get("expires_in", 3600))
        self._token = token
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN_SECONDS, 0)
        logger.debug("PayPal access token obtenido y cacheado (TTL=%ss)", expires_in)
        return token

    async def _headers(self, operation: str, request_id: Optional[str] = None) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {await self._access_token(operation)}",
            "Content-Type": "application/json",
        }
        if request_id:
            headers["PayPal-Request-Id"] = request_id
        return headers

    # ------------------------------------------------------------------ #
    # Conversión de moneda
    # ------------------------------------------------------------------ #
    def provider_amount(self, amount: Decimal, currency: str) -> tuple[str, str]:
        """(currency_code, value) que PayPal recibe; INR se cobra en USD."""
        if currency.upper() == "INR":
            usd = (Decimal(amount) / self.settings.paypal_inr_per_usd).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
            return "USD", f"{usd}"
        return currency.upper(), f"{Decimal(amount).quantize(Decimal('0.01'))}"

    # ------------------------------------------------------------------ #
    # Contrato
    # ------------------------------------------------------------------ #
    async def create_order(self, order: OrderRequest) -> GatewayOrder:
        frontend = self.settings.frontend_url.rstrip("/")
        currency_code, value = self.provider_amount(order.amount, order.currency)
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": order.order_id,
                    "custom_id": order.order_id,
                    "description": (order.description or "Course Purchase")[:127],
                    "amount": {"currency_code": currency_code, "value": value},
                }
            ],
            "application_context": {
                "return_url": f"{frontend}/payment/success?order_id={order.order_id}",
                "cancel_url": f"{frontend}/payment/cancel?order_id={order.order_id}",
                "brand_name": "CourseMart",
                "locale": "en-US",
                "landing_page": "BILLING",
                "user_action": "PAY_NOW",
            },
        }
        data = await self.http.request_json(
            "POST",
            "/v2/checkout/orders",
            operation="create",
            idempotent=True,
            headers=await self._headers("create", request_id=order.order_id),
            json=payload,
        )
        approve = next(
            (link.get("href") for link in data.get("links", []) if link.get("rel") in ("approve", "payer-action")),
            None,
        )
        if not data.get("id") or not approve:
            raise GatewayRejected(details={"gateway": self.gateway.value, "reason": "approve_link_missing"})
        logger.info("paypal_order_created order=%s paypal_order=%s", order.order_id, data["id"])
        return GatewayOrder(external_id=data["id"], redirect_url=approve, raw=data)

    def settlement_reference(
        self,
        evidence: VerificationEvidence,
        session: CheckoutSession,
    ) -> str:
        return session.gateway_order_id

    async def _get_order(self, paypal_order_id: str, operation: str) -> dict[str, Any]:
        return await self.http.request_json(
            "GET",
            f"/v2/checkout/orders/{paypal_order_id}",
            operation=operation,
            headers=await self._headers(operation),
        )

    async def verify_completion(
        self,
        evidence: VerificationEvidence,
        expected: CheckoutSession,
    ) -> bool:
        paypal_order_id = evidence.payment_id or evidence.gateway_order_id
        if not paypal_order_id or not evidence.payer_id:
            return False
        if paypal_order_id != expected.gateway_order_id:
            logger.warning("paypal_verify_order_mismatch order=%s", expected.order_id)
            return False

        try:
            data = await self.http.request_json(
                "POST",
                f"/v2/checkout/orders/{paypal_order_id}/capture",
                operation="verify",
                idempotent=True,
                headers=await self._headers("verify", request_id=f"capture_{paypal_order_id}"),
            )
        except GatewayRejected as exc:
            # ORDER_ALREADY_CAPTURED: consultar el estado real de la orden
            if "ORDER_ALREADY_CAPTURED" not in str(exc.details.get("provider_response", "")):
                return False
            try:
                data = await self._get_order(paypal_order_id, "verify")
            except GatewayRejected:
                return False

        return data.get("status") == "COMPLETED"

    @staticmethod
    def _first_capture(order: Mapping[str, Any]) -> dict[str, Any]:
        for unit in order.get("purchase_units", []) or []:
            captures = ((unit.get("payments") or {}).get("captures")) or []
            if captures:
                return captures[0]
        return {}

    async def fetch_settled_details(self, external_id: str) -> ProviderPaymentInfo:
        data = await self._get_order(external_id, "fetch")
        capture = self._first_capture(data)
        value = (capture.get("amount") or {}).get("value")
        return ProviderPaymentInfo(
            external_id=str(capture.get("id") or external_id),
            status=str(capture.get("status") or data.get("status", "")),
            amount=Decimal(str(value)) if value else None,
            method=map_paypal_method(data),
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
        currency_code, value = self.provider_amount(amount, self.settings.currency)
        try:
            data = await self.http.request_json(
                "POST",
                f"/v2/payments/captures/{external_id}/refund",
                operation="refund",
                idempotent=bool(idempotency_key),
                headers=await self._headers("refund", request_id=idempotency_key),
                json={
                    "amount": {"currency_code": currency_code, "value": value},
                    "note_to_payer": note[:255],
                },
            )
        except GatewayRejected as exc:
            raise RefundRejected(details=exc.details) from exc

        if data.get("status") in ("FAILED", "CANCELLED") or not data.get("id"):
            raise RefundRejected(details={"gateway": self.gateway.value, "status": data.get("status")})
        return RefundInfo(
            refund_id=str(data["id"]),
            status=str(data.get("status", "PENDING")),
            amount=amount,
            raw=data,
        )

    # ------------------------------------------------------------------ #
    # Webhooks
    # ------------------------------------------------------------------ #
    async def verify_webhook_signature(self, headers: Mapping[str, str], body: bytes) -> bool:
        """
        Verifica un webhook vía la API oficial (no hay HMAC local).
        True solo si PayPal responde verification_status == "SUCCESS".
        """
        values = {name: headers.get(header) for name, header in PAYPAL_WEBHOOK_HEADERS.items()}
        missing = [name for name, value in values.items() if not value]
        if missing:
            logger.warning("PayPal webhook rechazado: faltan headers requeridos %s", missing)
            return False

        webhook_id = self.settings.paypal_webhook_id
        if not webhook_id:
            logger.error("PayPal webhook rechazado: webhook_id no configurado")
            return False

        try:
            webhook_event = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            logger.warning("PayPal webhook rechazado: payload no es JSON válido - %s", exc)
            return False

        try:
            data = await self.http.request_json(
                "POST",
                "/v1/notifications/verify-webhook-signature",
                operation="verify",
                idempotent=True,
                headers=await self._headers("verify"),
                json={**values, "webhook_id": webhook_id, "webhook_event": webhook_event},
            )
        except GatewayRejected:
            return False

        status = data.get("verification_status", "")
        if status != "SUCCESS":
            logger.warning("PayPal webhook rechazado: verification_status = %s", status)
            return False
        return True


__all__ = ["PayPalAdapter", "PAYPAL_WEBHOOK_HEADERS"]

# Fin del archivo backend/app/modules/payments/adapters/paypal_adapter.py
