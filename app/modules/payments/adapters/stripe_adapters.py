# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/stripe_adapters.py

Adaptadores Stripe sobre el SDK oficial (`stripe`). Las llamadas del SDK son
bloqueantes: se ejecutan en threadpool para no frenar el event loop, y la
secret key viaja por llamada (no se toca stripe.api_key global).

STRIPE (intent):
- create: stripe.PaymentIntent.create → client_secret (el SDK del cliente
  confirma el pago)
- verify: stripe.PaymentIntent.retrieve → status == "succeeded"

STRIPE_CHECKOUT (sesión hospedada):
- create: stripe.checkout.Session.create (mode=payment, una línea) → url
- verify: stripe.checkout.Session.retrieve → payment_status == "paid"
- el reembolso se hace contra el payment_intent de la sesión

Ambos:
- metadata recortada a ≤50 claves y valores ≤500 caracteres
- refund: stripe.Refund.create con idempotency_key
- errores del SDK: red / 429 / 5xx → GatewayUnavailable, resto → GatewayRejected

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

import stripe
from fastapi.concurrency import run_in_threadpool

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
from app.modules.payments.adapters.method_mapping import map_stripe_method
from app.modules.payments.enums import PaymentGateway
from app.modules.payments.errors import (
    GatewayRejected,
    GatewayUnavailable,
    PaymentsError,
    RefundRejected,
)
from app.modules.payments.services.checkout_session_store import CheckoutSession

logger = logging.getLogger(__name__)

STRIPE_METADATA_MAX_KEYS = 50
STRIPE_METADATA_MAX_VALUE = 500


def prepare_stripe_metadata(metadata: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """
    Convierte metadata arbitraria al formato que Stripe acepta:
    valores string (objetos serializados a JSON), máx. 500 caracteres por
    valor y máx. 50 claves. Los None se omiten.
    """
    if not metadata:
        return {}

    prepared: dict[str, str] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        text = json.dumps(value, default=str) if isinstance(value, (dict, list, tuple)) else str(value)
        if len(text) > STRIPE_METADATA_MAX_VALUE:
            text = text[: STRIPE_METADATA_MAX_VALUE - 3] + "..."
        prepared[str(key)] = text
        if len(prepared) >= STRIPE_METADATA_MAX_KEYS:
            break
    return prepared


def stripe_error_to_gateway_error(
    exc: stripe.StripeError, gateway: PaymentGateway, operation: str
) -> PaymentsError:
    status = getattr(exc, "http_status", None)
    details = {
        "gateway": gateway.value,
        "operation": operation,
        "status": status,
        "code": getattr(exc, "code", None),
        "provider_response": str(getattr(exc, "user_message", None) or exc)[:500],
    }
    transient = isinstance(exc, (stripe.APIConnectionError, stripe.RateLimitError))
    if transient or status is None or status >= 500:
        return GatewayUnavailable(details=details)
    return GatewayRejected(details=details)


def _plain(obj: Any) -> dict[str, Any]:
    """StripeObject → dict (recursivo cuando el SDK lo soporta)."""
    if obj is None:
        return {}
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


class _StripeAdapterBase(GatewayAdapter):
    """Credenciales, consulta de intents y reembolsos comunes a ambos flujos."""

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.stripe_secret_key)

    def public_config(self) -> dict:
        return {"publishableKey": self.settings.stripe_publishable_key}

    async def _call(self, operation: str, fn: Callable[..., Any], *args: Any, **params: Any) -> dict[str, Any]:
        """Ejecuta una llamada del SDK en threadpool y traduce sus errores."""
        api_key = self.settings.stripe_secret_key
        if not api_key:
            raise GatewayUnavailable(details={"gateway": self.gateway.value, "reason": "not_configured"})
        try:
            result = await run_in_threadpool(fn, *args, api_key=api_key, **params)
        except stripe.StripeError as exc:
            error = stripe_error_to_gateway_error(exc, self.gateway, operation)
            logger.warning(
                "%s %s: error de Stripe %s - %s",
                self.gateway.value, operation, type(exc).__name__, error.details.get("provider_response"),
            )
            raise error from exc
        return _plain(result)

    async def _get_intent(self, intent_id: str, *, operation: str) -> dict[str, Any]:
        return await self._call(operation, stripe.PaymentIntent.retrieve, intent_id)

    def _intent_info(self, data: Mapping[str, Any], fallback_id: str) -> ProviderPaymentInfo:
        amount = data.get("amount_received") or data.get("amount")
        return ProviderPaymentInfo(
            external_id=str(data.get("id") or fallback_id),
            status=str(data.get("status", "")),
            amount=from_minor_units(amount),
            method=map_stripe_method(data),
            raw=dict(data),
        )

    async def create_refund(
        self,
        external_id: str,
        amount: Decimal,
        note: str,
        *,
        idempotency_key: Optional[str] = None,
    ) -> RefundInfo:
        params: dict[str, Any] = {
            "payment_intent": external_id,
            "amount": to_minor_units(amount),
            "metadata": prepare_stripe_metadata({"reason": note}),
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        try:
            data = await self._call("refund", stripe.Refund.create, **params)
        except GatewayRejected as exc:
            raise RefundRejected(details=exc.details) from exc

        if data.get("status") in ("failed", "canceled") or not data.get("id"):
            raise RefundRejected(details={"gateway": self.gateway.value, "status": data.get("status")})
        return RefundInfo(
            refund_id=str(data["id"]),
            status=str(data.get("status", "pending")),
            amount=from_minor_units(data.get("amount")) or amount,
            raw=data,
        )


class StripeIntentAdapter(_StripeAdapterBase):
    gateway = PaymentGateway.STRIPE

    async def create_order(self, order: OrderRequest) -> GatewayOrder:
        params: dict[str, Any] = {
            "amount": to_minor_units(order.amount),
            "currency": order.currency.lower(),
            "description": order.description,
            "automatic_payment_methods": {"enabled": True},
            "metadata": prepare_stripe_metadata(
                {"orderId": order.order_id, "courseIds": list(order.course_ids), **order.metadata}
            ),
            "idempotency_key": f"pi_{order.order_id}",
        }
        if order.customer_email:
            params["receipt_email"] = order.customer_email

        data = await self._call("create", stripe.PaymentIntent.create, **params)
        if not data.get("id") or not data.get("client_secret"):
            raise GatewayRejected(details={"gateway": self.gateway.value, "reason": "incomplete_intent"})
        logger.info("stripe_intent_created order=%s intent=%s", order.order_id, data["id"])
        return GatewayOrder(external_id=data["id"], client_secret=data["client_secret"], raw=data)

    async def verify_completion(
        self,
        evidence: VerificationEvidence,
        expected: CheckoutSession,
    ) -> bool:
        intent_id = evidence.payment_id
        if not intent_id:
            return False
        if intent_id != expected.gateway_order_id:
            logger.warning("stripe_verify_intent_mismatch order=%s", expected.order_id)
            return False
        try:
            data = await self._get_intent(intent_id, operation="verify")
        except GatewayRejected:
            return False

        order_ref = (data.get("metadata") or {}).get("orderId")
        if order_ref and order_ref != expected.order_id:
            return False
        return data.get("status") == "succeeded"

    async def fetch_settled_details(self, external_id: str) -> ProviderPaymentInfo:
        data = await self._get_intent(external_id, operation="fetch")
        return self._intent_info(data, external_id)


class StripeCheckoutAdapter(_StripeAdapterBase):
    gateway = PaymentGateway.STRIPE_CHECKOUT

    def settlement_reference(
        self,
        evidence: VerificationEvidence,
        session: CheckoutSession,
    ) -> str:
        return session.gateway_order_id

    async def create_order(self, order: OrderRequest) -> GatewayOrder:
        frontend = self.settings.frontend_url.rstrip("/")
        params: dict[str, Any] = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": order.currency.lower(),
                        "product_data": {"name": order.description or "Course Purchase"},
                        "unit_amount": to_minor_units(order.amount),
                    },
                    "quantity": 1,
                }
            ],
            "success_url": (
                f"{frontend}/payment/success?session_id={{CHECKOUT_SESSION_ID}}"
                f"&order_id={order.order_id}"
            ),
            "cancel_url": f"{frontend}/payment/cancel?order_id={order.order_id}",
            "client_reference_id": order.order_id,
            "metadata": prepare_stripe_metadata(
                {"orderId": order.order_id, "courseIds": list(order.course_ids), **order.metadata}
            ),
            "payment_intent_data": {"metadata": {"orderId": order.order_id}},
            "idempotency_key": f"cs_{order.order_id}",
        }
        if order.customer_email:
            params["customer_email"] = order.customer_email

        data = await self._call("create", stripe.checkout.Session.create, **params)
        if not data.get("id") or not data.get("url"):
            raise GatewayRejected(details={"gateway": self.gateway.value, "reason": "incomplete_session"})
        logger.info("stripe_checkout_session_created order=%s session=%s", order.order_id, data["id"])
        return GatewayOrder(external_id=data["id"], redirect_url=data["url"], raw=data)

    async def _get_session(self, session_id: str, *, operation: str) -> dict[str, Any]:
        return await self._call(
            operation, stripe.checkout.Session.retrieve, session_id, expand=["payment_intent"]
        )

    async def verify_completion(
        self,
        evidence: VerificationEvidence,
        expected: CheckoutSession,
    ) -> bool:
        session_id = expected.gateway_order_id
        if evidence.payment_id and evidence.payment_id != session_id:
            logger.warning("stripe_checkout_verify_session_mismatch order=%s", expected.order_id)
            return False
        try:
            data = await self._get_session(session_id, operation="verify")
        except GatewayRejected:
            return False

        reference = data.get("client_reference_id")
        if reference and reference != expected.order_id:
            return False
        return data.get("payment_status") == "paid"

    async def fetch_settled_details(self, external_id: str) -> ProviderPaymentInfo:
        data = await self._get_session(external_id, operation="fetch")
        intent = data.get("payment_intent")
        if isinstance(intent, Mapping):
            return self._intent_info(intent, external_id)
        if intent:
            return self._intent_info(await self._get_intent(str(intent), operation="fetch"), str(intent))

        # Sesión sin intent (no debería ocurrir con mode=payment pagado)
        return ProviderPaymentInfo(
            external_id=external_id,
            status=str(data.get("payment_status", "")),
            amount=from_minor_units(data.get("amount_total")),
            method=map_stripe_method(data),
            raw=data,
        )


__all__ = [
    "StripeIntentAdapter",
    "StripeCheckoutAdapter",
    "prepare_stripe_metadata",
    "stripe_error_to_gateway_error",
]

# Fin del archivo backend/app/modules/payments/adapters/stripe_adapters.py
