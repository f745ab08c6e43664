# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/routes/test_payment_routes.py

Rutas /payments/* vía ASGI: sobre {success, message, data} en camelCase,
errores con {success: false, error: {code, state_changed}} e identidad.

Autor: CourseMart
Fecha: 2026-03-19
"""
import json

from app.modules.payments.adapters.razorpay_adapter import compute_razorpay_signature


def _as(user_id: int, **extra) -> dict[str, str]:
    return {"X-User-Id": str(user_id), **extra}


class TestCheckoutRoutes:
    async def test_checkout_returns_camel_case_envelope(self, async_client, catalog):
        resp = await async_client.post(
            "/payments/checkout",
            json={"courseIds": [catalog.course_a.id], "gateway": "razorpay"},
            headers=_as(catalog.student.id),
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Checkout initiated"
        data = body["data"]
        assert data["orderId"].startswith("ORD_")
        assert data["checkout"]["gatewayOrderId"].startswith("order_")
        assert data["amount"]["total"] == "1180.00"
        assert data["checkout"]["publicConfig"] == {"keyId": "rzp_test_key"}

    async def test_checkout_requires_identity(self, async_client, catalog):
        resp = await async_client.post(
            "/payments/checkout", json={"courseIds": [catalog.course_a.id], "gateway": "RAZORPAY"}
        )

        assert resp.status_code == 401
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"

    async def test_bearer_identity_is_accepted(self, async_client, catalog):
        resp = await async_client.post(
            "/payments/checkout",
            json={"courseIds": [catalog.course_a.id], "gateway": "RAZORPAY"},
            headers={"Authorization": f"Bearer user:{catalog.student.id}"},
        )
        assert resp.status_code == 201

    async def test_validation_error_envelope(self, async_client, catalog):
        resp = await async_client.post(
            "/payments/checkout", json={"courseIds": []}, headers=_as(catalog.student.id)
        )

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_domain_error_envelope(self, async_client, catalog):
        resp = await async_client.post(
            "/payments/checkout",
            json={"courseIds": [424242], "gateway": "RAZORPAY"},
            headers=_as(catalog.student.id),
        )

        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["code"] == "COURSE_UNAVAILABLE"
        assert error["state_changed"] is False

    async def test_checkout_verify_and_history(self, async_client, catalog):
        created = (
            await async_client.post(
                "/payments/checkout",
                json={"courseIds": [catalog.course_a.id], "gateway": "RAZORPAY"},
                headers=_as(catalog.student.id),
            )
        ).json()["data"]
        link_id = created["checkout"]["gatewayOrderId"]

        verify = await async_client.post(
            "/payments/verify",
            json={
                "orderId": created["orderId"],
                "providerPaymentId": "pay_5",
                "providerOrderId": link_id,
                "signature": compute_razorpay_signature("rzp_test_secret", link_id, "pay_5"),
            },
            headers=_as(catalog.student.id),
        )
        assert verify.status_code == 200
        assert verify.json()["message"] == "Payment verified"
        assert verify.json()["data"]["alreadyProcessed"] is False

        history = await async_client.get("/payments/history", headers=_as(catalog.student.id))
        payments = history.json()["data"]["payments"]
        assert [p["status"] for p in payments] == ["COMPLETED"]
        assert payments[0]["enrollments"][0]["courseTitle"] == "Python from Zero"

        details = await async_client.get(
            f"/payments/details/{created['paymentId']}", headers=_as(catalog.other_student.id)
        )
        assert details.status_code == 404


class TestGatewayAndAdminRoutes:
    async def test_gateway_status(self, async_client):
        resp = await async_client.get("/payments/gateways")

        data = resp.json()["data"]
        assert resp.status_code == 200
        assert set(data["available"]) >= {"RAZORPAY", "STRIPE"}
        assert "PAYU" not in data["available"]

    async def test_refund_queue_requires_admin(self, async_client, catalog):
        forbidden = await async_client.get("/payments/admin/refunds", headers=_as(catalog.student.id))
        allowed = await async_client.get(
            "/payments/admin/refunds", headers=_as(1, **{"X-User-Role": "admin"})
        )

        assert forbidden.status_code == 403
        assert forbidden.json()["error"]["code"] == "FORBIDDEN"
        assert allowed.status_code == 200
        assert allowed.json()["data"]["refundRequests"] == []

    async def test_health(self, async_client):
        resp = await async_client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["data"]["status"] in ("ok", "degraded")


class TestWebhookRoutes:
    async def test_invalid_signature_is_401_envelope(self, async_client):
        body = json.dumps({"event": "payment.captured", "payload": {}}).encode()

        resp = await async_client.post(
            "/payments/webhooks/razorpay",
            content=body,
            headers={"X-Razorpay-Signature": "0" * 64, "Content-Type": "application/json"},
        )

        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "WEBHOOK_SIGNATURE_INVALID"

    async def test_valid_ignored_event_is_acknowledged(self, async_client):
        from app.modules.payments.services.webhooks.signature_verification import (
            compute_razorpay_webhook_signature,
        )

        body = json.dumps({"event": "subscription.charged", "payload": {}}).encode()
        resp = await async_client.post(
            "/payments/webhooks",
            content=body,
            headers={
                "X-Razorpay-Signature": compute_razorpay_webhook_signature("rzp_webhook_secret", body),
                "Content-Type": "application/json",
            },
        )

        assert resp.status_code == 200
        assert resp.json()["message"] == "Webhook processed"
        assert resp.json()["data"] == {"gateway": "RAZORPAY", "event": "subscription.charged", "handled": False}
