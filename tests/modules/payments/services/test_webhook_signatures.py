# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/services/test_webhook_signatures.py

Firmas de webhooks (Stripe t/v1 con tolerancia, Razorpay HMAC del body),
detección de proveedor y bypass inseguro restringido a desarrollo.

Autor: CourseMart
Fecha: 2026-03-17
"""
import time
from types import SimpleNamespace

import pytest

from app.shared.config.settings_payments import PaymentsSettings
from app.modules.payments.enums import PaymentGateway
from app.modules.payments.services.webhooks import signature_verification as sv
from app.modules.payments.services.webhooks.signature_verification import (
    compute_razorpay_webhook_signature,
    compute_stripe_signature,
    detect_gateway,
    insecure_webhooks_allowed,
    verify_razorpay_webhook_signature,
    verify_stripe_signature,
)

PAYLOAD = b'{"id":"evt_1","type":"payment_intent.succeeded"}'
STRIPE_SECRET = "whsec_test_123"


class TestStripeSignature:
    def test_valid_header_is_accepted(self, payments_settings):
        ts = int(time.time())
        header = f"t={ts},v1={compute_stripe_signature(STRIPE_SECRET, ts, PAYLOAD)}"
        assert verify_stripe_signature(PAYLOAD, header) is True

    def test_any_matching_v1_is_enough(self, payments_settings):
        ts = int(time.time())
        good = compute_stripe_signature(STRIPE_SECRET, ts, PAYLOAD)
        header = f"t={ts},v1={'a' * 64},v1={good}"
        assert verify_stripe_signature(PAYLOAD, header) is True

    def test_modified_body_is_rejected(self, payments_settings):
        ts = int(time.time())
        header = f"t={ts},v1={compute_stripe_signature(STRIPE_SECRET, ts, PAYLOAD)}"
        assert verify_stripe_signature(PAYLOAD + b" ", header) is False

    def test_timestamp_outside_tolerance_is_rejected(self, payments_settings):
        ts = 1_700_000_000
        header = f"t={ts},v1={compute_stripe_signature(STRIPE_SECRET, ts, PAYLOAD)}"
        assert verify_stripe_signature(PAYLOAD, header, now=ts + 301) is False
        assert verify_stripe_signature(PAYLOAD, header, now=ts + 299) is True

    @pytest.mark.parametrize("header", [None, "", "t=abc,v1=ff", "v1=ff", "t=1700000000"])
    def test_malformed_header_is_rejected(self, payments_settings, header):
        assert verify_stripe_signature(PAYLOAD, header, now=1_700_000_000) is False


class TestRazorpayWebhookSignature:
    def test_valid_signature_is_accepted(self, payments_settings):
        signature = compute_razorpay_webhook_signature("rzp_webhook_secret", PAYLOAD)
        assert verify_razorpay_webhook_signature(PAYLOAD, signature) is True

    def test_signature_with_other_secret_is_rejected(self, payments_settings):
        signature = compute_razorpay_webhook_signature("another_secret", PAYLOAD)
        assert verify_razorpay_webhook_signature(PAYLOAD, signature) is False

    def test_missing_header_is_rejected(self, payments_settings):
        assert verify_razorpay_webhook_signature(PAYLOAD, None) is False


class TestDetectGateway:
    @pytest.mark.parametrize(
        "headers,expected",
        [
            ({"Stripe-Signature": "t=1,v1=x"}, PaymentGateway.STRIPE),
            ({"X-Razorpay-Signature": "abc"}, PaymentGateway.RAZORPAY),
            ({"PAYPAL-TRANSMISSION-ID": "t-1"}, PaymentGateway.PAYPAL),
            ({"Content-Type": "application/json"}, None),
        ],
    )
    def test_detects_by_signature_header(self, headers, expected):
        assert detect_gateway(headers) == expected


class TestInsecureBypass:
    def test_flag_is_ignored_outside_development(self, monkeypatch):
        monkeypatch.setattr(sv, "get_settings", lambda: SimpleNamespace(python_env="production"))
        assert insecure_webhooks_allowed(PaymentsSettings(allow_insecure_webhooks=True)) is False

    def test_flag_is_ignored_in_tests(self):
        # PYTHON_ENV=test en la suite
        assert insecure_webhooks_allowed(PaymentsSettings(allow_insecure_webhooks=True)) is False

    def test_flag_is_honoured_in_development(self, monkeypatch):
        monkeypatch.setattr(sv, "get_settings", lambda: SimpleNamespace(python_env="development"))
        assert insecure_webhooks_allowed(PaymentsSettings(allow_insecure_webhooks=True)) is True

    def test_without_flag_never_bypasses(self, monkeypatch):
        monkeypatch.setattr(sv, "get_settings", lambda: SimpleNamespace(python_env="development"))
        assert insecure_webhooks_allowed(PaymentsSettings(allow_insecure_webhooks=False)) is False
