# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/adapters/test_stripe_paypal_adapters.py

Adaptadores con verificación remota: Stripe intent y Stripe Checkout sobre
el SDK parcheado (FakeStripeSDK), PayPal contra un API falso vía
httpx.MockTransport.

Autor: CourseMart
Fecha: 2026-03-18
"""
import json
from decimal import Decimal

import httpx
import pytest
import stripe

from app.shared.config.settings_payments import PaymentsSettings
from app.modules.payments.adapters.base import OrderRequest, VerificationEvidence
from app.modules.payments.adapters.http_client import GatewayHttpClient
from app.modules.payments.adapters.paypal_adapter import PayPalAdapter
from app.modules.payments.adapters.stripe_adapters import (
    StripeCheckoutAdapter,
    StripeIntentAdapter,
    prepare_stripe_metadata,
    stripe_error_to_gateway_error,
)
from app.modules.payments.enums import PaymentGateway, PaymentMethod
from app.modules.payments.errors import GatewayRejected, GatewayUnavailable, RefundRejected
from app.modules.payments.services import CheckoutSession


def _settings(**overrides) -> PaymentsSettings:
    values = dict(
        stripe_secret_key="sk_test_123",
        stripe_publishable_key="pk_test_123",
        paypal_client_id="pp_client",
        paypal_client_secret="pp_secret",
        paypal_inr_per_usd=Decimal("80"),
        frontend_url="https://shop.example.com",
        gateway_max_transient_retries=0,
    )
    values.update(overrides)
    return PaymentsSettings(**values)


def _adapter(cls, handler, **overrides):
    settings = _settings(**overrides)
    http = GatewayHttpClient(
        cls.gateway.value,
        settings,
        base_url="https://api.test",
        transport=httpx.MockTransport(handler),
        backoff_base=0,
        backoff_429=0,
    )
    return cls(settings, http)


def _stripe(cls, **overrides):
    settings = _settings(**overrides)
    return cls(settings, GatewayHttpClient(cls.gateway.value, settings, base_url=""))


def _order(amount: str = "1180.00") -> OrderRequest:
    return OrderRequest(
        order_id="ORD_1_abcdefghi",
        amount=Decimal(amount),
        currency="INR",
        description="Course Purchase",
        customer_name="Asha",
        customer_email="asha@example.com",
        course_ids=(1, 2),
    )


def _session(gateway_order_id: str) -> CheckoutSession:
    return CheckoutSession(
        order_id="ORD_1_abcdefghi",
        payment_id=1,
        gateway_order_id=gateway_order_id,
        user_id=7,
        course_ids=[1, 2],
        final_amount=Decimal("1180.00"),
    )


# ------------------------------------------------------------------ #
# Stripe: errores del SDK
# ------------------------------------------------------------------ #
class TestStripeErrorMapping:
    @pytest.mark.parametrize(
        "exc,expected",
        [
            (stripe.APIConnectionError("network down"), GatewayUnavailable),
            (stripe.RateLimitError("slow down", http_status=429), GatewayUnavailable),
            (stripe.APIError("boom", http_status=500), GatewayUnavailable),
            (stripe.InvalidRequestError("bad amount", "amount", http_status=400), GatewayRejected),
            (stripe.AuthenticationError("bad key", http_status=401), GatewayRejected),
        ],
    )
    def test_clasifica_transitorio_vs_rechazo(self, exc, expected):
        error = stripe_error_to_gateway_error(exc, PaymentGateway.STRIPE, "create")
        assert type(error) is expected
        assert error.details["gateway"] == "STRIPE"
        assert error.details["operation"] == "create"


# ------------------------------------------------------------------ #
# Stripe intent
# ------------------------------------------------------------------ #
class TestStripeIntentAdapter:
    async def test_create_order_usa_sdk_con_idempotencia(self, stripe_sdk):
        adapter = _stripe(StripeIntentAdapter)
        order = await adapter.create_order(_order())

        assert order.external_id == "pi_1"
        assert order.client_secret == "pi_1_secret_x"
        params = stripe_sdk.params("PaymentIntent.create")[0]
        assert params["api_key"] == "sk_test_123"
        assert params["idempotency_key"] == "pi_ORD_1_abcdefghi"
        assert params["amount"] == 118000
        assert params["currency"] == "inr"
        assert params["metadata"]["orderId"] == "ORD_1_abcdefghi"
        assert params["metadata"]["courseIds"] == "[1, 2]"
        assert params["automatic_payment_methods"] == {"enabled": True}
        assert params["receipt_email"] == "asha@example.com"

    async def test_create_order_repetido_devuelve_el_mismo_intent(self, stripe_sdk):
        adapter = _stripe(StripeIntentAdapter)

        first = await adapter.create_order(_order())
        second = await adapter.create_order(_order())

        assert first.external_id == second.external_id
        assert len(stripe_sdk.intents) == 1

    async def test_sin_secret_key_no_llama_al_sdk(self, stripe_sdk):
        adapter = _stripe(StripeIntentAdapter, stripe_secret_key=None)

        assert adapter.is_configured is False
        with pytest.raises(GatewayUnavailable):
            await adapter.create_order(_order())
        assert stripe_sdk.calls == []

    async def test_verify_succeeded(self, stripe_sdk):
        adapter = _stripe(StripeIntentAdapter)
        order = await adapter.create_order(_order())
        stripe_sdk.succeed_intent(order.external_id)

        evidence = VerificationEvidence(payment_id=order.external_id)
        assert await adapter.verify_completion(evidence, _session(order.external_id)) is True

    @pytest.mark.parametrize(
        "intent",
        [
            {"id": "pi_1", "status": "processing", "metadata": {"orderId": "ORD_1_abcdefghi"}},
            {"id": "pi_1", "status": "succeeded", "metadata": {"orderId": "ORD_OTHER"}},
        ],
    )
    async def test_verify_evidencia_ambigua_es_false(self, stripe_sdk, intent):
        stripe_sdk.intents["pi_1"] = intent
        adapter = _stripe(StripeIntentAdapter)
        evidence = VerificationEvidence(payment_id="pi_1")
        assert await adapter.verify_completion(evidence, _session("pi_1")) is False

    async def test_verify_intent_distinto_no_consulta_proveedor(self, stripe_sdk):
        adapter = _stripe(StripeIntentAdapter)
        evidence = VerificationEvidence(payment_id="pi_other")
        assert await adapter.verify_completion(evidence, _session("pi_1")) is False
        assert stripe_sdk.calls == []

    async def test_verify_404_es_false_y_503_propaga(self, stripe_sdk):
        adapter = _stripe(StripeIntentAdapter)
        evidence = VerificationEvidence(payment_id="pi_1")
        assert await adapter.verify_completion(evidence, _session("pi_1")) is False

        stripe_sdk.fail_next = stripe.APIError("unavailable", http_status=503)
        with pytest.raises(GatewayUnavailable):
            await adapter.verify_completion(evidence, _session("pi_1"))

    async def test_refund_envia_idempotency_key(self, stripe_sdk):
        adapter = _stripe(StripeIntentAdapter)

        first = await adapter.create_refund(
            "pi_1", Decimal("1180.00"), "requested", idempotency_key="refund-1"
        )
        again = await adapter.create_refund(
            "pi_1", Decimal("1180.00"), "requested", idempotency_key="refund-1"
        )

        assert first.refund_id == again.refund_id
        assert first.amount == Decimal("1180.00")
        params = stripe_sdk.params("Refund.create")[0]
        assert params["payment_intent"] == "pi_1"
        assert params["amount"] == 118000
        assert params["idempotency_key"] == "refund-1"
        assert params["metadata"] == {"reason": "requested"}

    async def test_refund_fallido_es_refund_rejected(self, stripe_sdk):
        stripe_sdk.refund_status = "failed"
        adapter = _stripe(StripeIntentAdapter)
        with pytest.raises(RefundRejected):
            await adapter.create_refund("pi_1", Decimal("1180.00"), "requested")

    async def test_refund_rechazado_por_stripe_es_refund_rejected(self, stripe_sdk):
        stripe_sdk.fail_next = stripe.InvalidRequestError(
            "Charge has already been refunded", None, code="charge_already_refunded", http_status=400
        )
        adapter = _stripe(StripeIntentAdapter)
        with pytest.raises(RefundRejected) as exc_info:
            await adapter.create_refund("pi_1", Decimal("1180.00"), "requested")
        assert exc_info.value.details["code"] == "charge_already_refunded"

    async def test_refund_sin_conexion_es_gateway_unavailable(self, stripe_sdk):
        stripe_sdk.fail_next = stripe.APIConnectionError("network down")
        adapter = _stripe(StripeIntentAdapter)
        with pytest.raises(GatewayUnavailable):
            await adapter.create_refund("pi_1", Decimal("1180.00"), "requested")

    def test_metadata_recortada(self):
        metadata = {f"k{i}": "x" * 600 for i in range(60)}
        metadata["none"] = None
        prepared = prepare_stripe_metadata(metadata)
        assert len(prepared) == 50
        assert all(len(v) == 500 for v in prepared.values())
        assert "none" not in prepared


# ------------------------------------------------------------------ #
# Stripe Checkout
# ------------------------------------------------------------------ #
class TestStripeCheckoutAdapter:
    async def test_create_order_devuelve_url_con_order_id(self, stripe_sdk):
        adapter = _stripe(StripeCheckoutAdapter)
        order = await adapter.create_order(_order())

        assert order.external_id == "cs_test_1"
        assert order.redirect_url == "https://checkout.stripe.com/c/pay/cs_test_1"
        params = stripe_sdk.params("checkout.Session.create")[0]
        assert params["idempotency_key"] == "cs_ORD_1_abcdefghi"
        assert params["mode"] == "payment"
        assert params["line_items"][0]["price_data"]["unit_amount"] == 118000
        assert params["line_items"][0]["quantity"] == 1
        assert "order_id=ORD_1_abcdefghi" in params["success_url"]
        assert params["cancel_url"] == "https://shop.example.com/payment/cancel?order_id=ORD_1_abcdefghi"
        assert params["client_reference_id"] == "ORD_1_abcdefghi"
        assert params["customer_email"] == "asha@example.com"

    @pytest.mark.parametrize("paid,expected", [(True, True), (False, False)])
    async def test_verify_por_payment_status(self, stripe_sdk, paid, expected):
        adapter = _stripe(StripeCheckoutAdapter)
        order = await adapter.create_order(_order())
        if paid:
            stripe_sdk.pay_session(order.external_id)

        result = await adapter.verify_completion(VerificationEvidence(), _session(order.external_id))
        assert result is expected

    async def test_verify_sesion_desconocida_es_false(self, stripe_sdk):
        adapter = _stripe(StripeCheckoutAdapter)
        assert await adapter.verify_completion(VerificationEvidence(), _session("cs_missing")) is False

    async def test_fetch_settled_details_sigue_el_intent(self, stripe_sdk):
        adapter = _stripe(StripeCheckoutAdapter)
        order = await adapter.create_order(_order())
        paid = stripe_sdk.pay_session(order.external_id)

        info = await adapter.fetch_settled_details(order.external_id)

        assert info.external_id == paid["payment_intent"]
        assert info.amount == Decimal("1180.00")
        assert info.method == PaymentMethod.CREDIT_CARD
        assert stripe_sdk.params("checkout.Session.retrieve")[-1]["expand"] == ["payment_intent"]

    def test_settlement_reference_es_la_sesion(self):
        adapter = _stripe(StripeCheckoutAdapter)
        ref = adapter.settlement_reference(VerificationEvidence(payment_id="x"), _session("cs_1"))
        assert ref == "cs_1"


# ------------------------------------------------------------------ #
# PayPal
# ------------------------------------------------------------------ #
class FakePayPal:
    def __init__(self, capture_status: int = 201):
        self.calls: list[tuple[str, str]] = []
        self.capture_status = capture_status

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        path = request.url.path
        if path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "tok_1", "expires_in": 3600})
        assert request.headers["Authorization"] == "Bearer tok_1"
        if path == "/v2/checkout/orders" and request.method == "POST":
            body = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "id": "PP_1",
                    "echo": body,
                    "links": [{"rel": "approve", "href": "https://paypal.test/approve/PP_1"}],
                },
            )
        if path.endswith("/capture"):
            if self.capture_status != 201:
                return httpx.Response(
                    self.capture_status,
                    json={"details": [{"issue": "ORDER_ALREADY_CAPTURED"}]},
                )
            return httpx.Response(201, json={"id": "PP_1", "status": "COMPLETED"})
        if path == "/v2/checkout/orders/PP_1":
            return httpx.Response(
                200,
                json={
                    "id": "PP_1",
                    "status": "COMPLETED",
                    "purchase_units": [
                        {"payments": {"captures": [{"id": "CAP_1", "status": "COMPLETED", "amount": {"value": "14.75"}}]}}
                    ],
                },
            )
        if path.endswith("/refund"):
            return httpx.Response(422, json={"name": "UNPROCESSABLE_ENTITY"})
        return httpx.Response(404)

    def count(self, path: str) -> int:
        return sum(1 for _, p in self.calls if p == path)


class TestPayPalAdapter:
    async def test_inr_se_convierte_a_usd_y_token_se_cachea(self):
        api = FakePayPal()
        adapter = _adapter(PayPalAdapter, api)

        first = await adapter.create_order(_order("1180.00"))
        await adapter.create_order(_order("1180.00"))

        assert first.redirect_url == "https://paypal.test/approve/PP_1"
        amount = first.raw["echo"]["purchase_units"][0]["amount"]
        assert amount == {"currency_code": "USD", "value": "14.75"}
        assert api.count("/v1/oauth2/token") == 1

    async def test_verify_requiere_payer_id(self):
        api = FakePayPal()
        adapter = _adapter(PayPalAdapter, api)
        evidence = VerificationEvidence(payment_id="PP_1")
        assert await adapter.verify_completion(evidence, _session("PP_1")) is False
        assert api.calls == []

    async def test_verify_captura(self):
        adapter = _adapter(PayPalAdapter, FakePayPal())
        evidence = VerificationEvidence(payment_id="PP_1", payer_id="PAYER")
        assert await adapter.verify_completion(evidence, _session("PP_1")) is True

    async def test_orden_ya_capturada_consulta_estado(self):
        api = FakePayPal(capture_status=422)
        adapter = _adapter(PayPalAdapter, api)
        evidence = VerificationEvidence(payment_id="PP_1", payer_id="PAYER")

        assert await adapter.verify_completion(evidence, _session("PP_1")) is True
        assert ("GET", "/v2/checkout/orders/PP_1") in api.calls

    async def test_fetch_settled_details_usa_la_captura(self):
        adapter = _adapter(PayPalAdapter, FakePayPal())
        info = await adapter.fetch_settled_details("PP_1")
        assert info.external_id == "CAP_1"
        assert info.amount == Decimal("14.75")
        assert info.method == PaymentMethod.CREDIT_CARD

    async def test_refund_declinado(self):
        adapter = _adapter(PayPalAdapter, FakePayPal())
        with pytest.raises(RefundRejected):
            await adapter.create_refund("CAP_1", Decimal("1180.00"), "requested")

    async def test_sin_credenciales_no_disponible(self):
        api = FakePayPal()
        adapter = _adapter(PayPalAdapter, api, paypal_client_id=None)
        assert adapter.is_configured is False
        with pytest.raises(GatewayUnavailable):
            await adapter.create_order(_order())
        assert api.calls == []
