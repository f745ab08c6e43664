# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/adapters/test_gateway_http_client.py

Tests del cliente HTTP de pasarelas: reintentos ante errores transitorios y
traducción a GatewayUnavailable / GatewayRejected.

Autor: CourseMart
Fecha: 2026-03-17
"""
import httpx
import pytest

from app.shared.config.settings_payments import PaymentsSettings
from app.modules.payments.adapters.http_client import GatewayHttpClient
from app.modules.payments.errors import GatewayRejected, GatewayUnavailable


def _client(handler, retries: int = 1) -> GatewayHttpClient:
    settings = PaymentsSettings(gateway_max_transient_retries=retries)
    return GatewayHttpClient(
        "TEST",
        settings,
        base_url="https://gateway.test",
        transport=httpx.MockTransport(handler),
        backoff_base=0,
        backoff_429=0,
    )


class TestGatewayHttpClient:
    async def test_transient_status_is_retried_once(self):
        statuses = iter([503, 200])
        calls = []

        def handler(request):
            calls.append(request.url.path)
            status = next(statuses)
            return httpx.Response(status, json={"ok": status == 200})

        client = _client(handler)
        data = await client.request_json("POST", "/v1/things", operation="create", json={})
        await client.aclose()

        assert data == {"ok": True}
        assert len(calls) == 2

    async def test_exhausted_transient_errors_raise_unavailable(self):
        def handler(request):
            return httpx.Response(429, text="slow down")

        client = _client(handler)
        with pytest.raises(GatewayUnavailable) as exc_info:
            await client.request("GET", "/v1/things/1", operation="fetch")
        await client.aclose()

        assert exc_info.value.details["status"] == 429
        assert exc_info.value.details["gateway"] == "TEST"

    async def test_client_error_is_rejected_without_retry(self):
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(400, json={"error": {"description": "bad amount"}})

        client = _client(handler)
        with pytest.raises(GatewayRejected) as exc_info:
            await client.request("POST", "/v1/things", operation="create")
        await client.aclose()

        assert len(calls) == 1
        assert "bad amount" in exc_info.value.details["provider_response"]
        # el texto del proveedor no llega al mensaje de usuario
        assert "bad amount" not in exc_info.value.message

    async def test_transport_error_on_non_idempotent_post_is_not_retried(self):
        calls = []

        def handler(request):
            calls.append(1)
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(GatewayUnavailable):
            await client.request("POST", "/v1/things", operation="create")
        await client.aclose()

        assert len(calls) == 1

    async def test_transport_error_on_get_is_retried(self):
        attempts = []

        def handler(request):
            attempts.append(1)
            if len(attempts) == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={"id": "pay_1"})

        client = _client(handler)
        data = await client.request_json("GET", "/v1/payments/pay_1", operation="fetch")
        await client.aclose()

        assert data["id"] == "pay_1"
        assert len(attempts) == 2

    async def test_unknown_operation_is_a_programming_error(self):
        client = _client(lambda request: httpx.Response(200, json={}))
        with pytest.raises(ValueError):
            await client.request("GET", "/", operation="teleport")
