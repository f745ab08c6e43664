# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/adapters/test_signatures_and_hashes.py

Orden Razorpay + verificación local (HMAC "{order}|{payment}"), y hashes
PayU de formulario y de respuesta (secuencias documentadas con udf vacíos).

Autor: CourseMart
Fecha: 2026-03-17
"""
import hashlib
import hmac
import json
from decimal import Decimal

import httpx
import pytest

from app.shared.config.settings_payments import PaymentsSettings
from app.modules.payments.adapters.base import OrderRequest, VerificationEvidence
from app.modules.payments.adapters.http_client import GatewayHttpClient
from app.modules.payments.adapters.payu_adapter import (
    PayUAdapter,
    payu_request_hash,
    payu_response_hash,
)
from app.modules.payments.adapters.razorpay_adapter import (
    RazorpayAdapter,
    compute_razorpay_signature,
)
from app.modules.payments.services import CheckoutSession

SECRET = "rzp_test_secret"


def _settings(**overrides) -> PaymentsSettings:
    values = dict(
        razorpay_key_id="rzp_test_key",
        razorpay_key_secret=SECRET,
        payu_key="gtKFFx",
        payu_salt="eCwWELxi",
    )
    values.update(overrides)
    return PaymentsSettings(**values)


def _http(settings: PaymentsSettings) -> GatewayHttpClient:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    return GatewayHttpClient("TEST", settings, transport=transport)


def _session(gateway_order_id: str, amount: str = "1534.00") -> CheckoutSession:
    return CheckoutSession(
        order_id="ORD_1_abcdefghi",
        payment_id=1,
        gateway_order_id=gateway_order_id,
        user_id=7,
        course_ids=[1, 2],
        final_amount=Decimal(amount),
    )


class TestRazorpaySignature:
    def test_signature_matches_reference_hmac(self):
        expected = hmac.new(
            SECRET.encode(), b"order_1|pay_1", hashlib.sha256
        ).hexdigest()
        assert compute_razorpay_signature(SECRET, "order_1", "pay_1") == expected

    async def test_correct_signature_is_accepted(self):
        settings = _settings()
        adapter = RazorpayAdapter(settings, _http(settings))
        evidence = VerificationEvidence(
            payment_id="pay_1",
            gateway_order_id="order_1",
            signature=compute_razorpay_signature(SECRET, "order_1", "pay_1"),
        )
        assert await adapter.verify_completion(evidence, _session("order_1")) is True

    @pytest.mark.parametrize(
        "payment_id,order_ref,signature",
        [
            ("pay_2", "order_1", None),          # firma de otro pago
            ("pay_1", "order_9", None),          # orden distinta a la de la sesión
            ("pay_1", "order_1", "0" * 64),      # firma alterada
            ("pay_1", "order_1", ""),            # campo faltante
        ],
    )
    async def test_tampered_evidence_is_rejected(self, payment_id, order_ref, signature):
        settings = _settings()
        adapter = RazorpayAdapter(settings, _http(settings))
        if signature is None:
            signature = compute_razorpay_signature(SECRET, "order_1", "pay_1")
        evidence = VerificationEvidence(
            payment_id=payment_id, gateway_order_id=order_ref, signature=signature
        )
        assert await adapter.verify_completion(evidence, _session("order_1")) is False


class TestRazorpayOrder:
    async def test_creates_order_whose_id_is_signed_on_completion(self):
        """La orden creada es la misma referencia que firma checkout.js."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "order_Nx1", "entity": "order", "status": "created"})

        settings = _settings()
        http = GatewayHttpClient(
            "RAZORPAY", settings, base_url="https://api.razorpay.com", transport=httpx.MockTransport(handler)
        )
        adapter = RazorpayAdapter(settings, http)
        try:
            order = await adapter.create_order(
                OrderRequest(
                    order_id="ORD_1_abcdefghi",
                    amount=Decimal("1534.00"),
                    currency="INR",
                    description="Python from Zero",
                    customer_name="Asha Rao",
                    customer_email="asha@example.com",
                    course_ids=(1, 2),
                )
            )
        finally:
            await http.aclose()

        assert requests[0].method == "POST"
        assert requests[0].url.path == "/v1/orders"
        body = json.loads(requests[0].content)
        assert body["amount"] == 153400
        assert body["receipt"] == "ORD_1_abcdefghi"
        assert body["notes"]["orderId"] == "ORD_1_abcdefghi"
        assert order.external_id == "order_Nx1"
        assert order.redirect_url is None

        evidence = VerificationEvidence(
            payment_id="pay_5",
            gateway_order_id=order.external_id,
            signature=compute_razorpay_signature(SECRET, order.external_id, "pay_5"),
        )
        assert await adapter.verify_completion(evidence, _session(order.external_id)) is True


class TestPayUHash:
    def test_request_hash_follows_documented_sequence(self):
        sequence = "gtKFFx|TXN_1|1534.00|Course Purchase|Asha|asha@example.com|||||||||||eCwWELxi"
        expected = hashlib.sha512(sequence.encode()).hexdigest()

        assert payu_request_hash(
            key="gtKFFx",
            txnid="TXN_1",
            amount="1534.00",
            productinfo="Course Purchase",
            firstname="Asha",
            email="asha@example.com",
            salt="eCwWELxi",
        ) == expected

    async def test_form_payload_carries_matching_hash(self):
        settings = _settings()
        adapter = PayUAdapter(settings, _http(settings))
        order = await adapter.create_order(
            OrderRequest(
                order_id="ORD_1_abcdefghi",
                amount=Decimal("1534"),
                currency="INR",
                description="Python from Zero",
                customer_name="Asha Rao",
                customer_email="asha@example.com",
            )
        )
        fields = order.form_payload["fields"]

        assert order.external_id == fields["txnid"]
        assert fields["amount"] == "1534.00"
        assert fields["hash"] == payu_request_hash(
            key="gtKFFx",
            txnid=fields["txnid"],
            amount="1534.00",
            productinfo="Python from Zero",
            firstname="Asha Rao",
            email="asha@example.com",
            salt="eCwWELxi",
        )
        assert order.form_payload["action"].endswith("/_payment")


def _payu_evidence(txnid="TXN_1", status="success", amount="1534.00", **overrides) -> VerificationEvidence:
    extra = {
        "amount": amount,
        "email": "asha@example.com",
        "firstname": "Asha",
        "productinfo": "Python from Zero",
    }
    signature = payu_response_hash(
        salt="eCwWELxi",
        status=status,
        email=extra["email"],
        firstname=extra["firstname"],
        productinfo=extra["productinfo"],
        amount=amount,
        txnid=txnid,
        key="gtKFFx",
    )
    values = dict(payment_id=txnid, signature=signature, status=status, extra=extra)
    values.update(overrides)
    return VerificationEvidence(**values)


class TestPayUVerifyCompletion:
    def test_response_hash_follows_reverse_sequence(self):
        sequence = "eCwWELxi|success|||||||||||asha@example.com|Asha|Course Purchase|1534.00|TXN_1|gtKFFx"
        expected = hashlib.sha512(sequence.encode()).hexdigest()

        assert payu_response_hash(
            salt="eCwWELxi",
            status="success",
            email="asha@example.com",
            firstname="Asha",
            productinfo="Course Purchase",
            amount="1534.00",
            txnid="TXN_1",
            key="gtKFFx",
        ) == expected

    async def test_valid_callback_is_accepted(self):
        settings = _settings()
        adapter = PayUAdapter(settings, _http(settings))
        assert await adapter.verify_completion(_payu_evidence(), _session("TXN_1")) is True

    async def test_uppercase_hash_is_accepted(self):
        settings = _settings()
        adapter = PayUAdapter(settings, _http(settings))
        evidence = _payu_evidence()
        evidence = _payu_evidence(signature=evidence.signature.upper())
        assert await adapter.verify_completion(evidence, _session("TXN_1")) is True

    @pytest.mark.parametrize(
        "evidence",
        [
            _payu_evidence(status="failure"),                 # estado distinto de success
            _payu_evidence(amount="1.00"),                    # monto distinto al de la sesión
            _payu_evidence(txnid="TXN_2"),                    # txnid de otra sesión
            _payu_evidence(signature="0" * 128),              # hash alterado
            _payu_evidence(signature=None),                   # hash faltante
        ],
    )
    async def test_rejected_callbacks(self, evidence):
        settings = _settings()
        adapter = PayUAdapter(settings, _http(settings))
        assert await adapter.verify_completion(evidence, _session("TXN_1")) is False
