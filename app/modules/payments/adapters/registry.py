# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/registry.py

Registro de pasarelas: tabla PaymentGateway → adaptador, construida una
vez al arrancar. Solo se registran pasarelas habilitadas y configuradas.

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import httpx

from app.shared.config.settings_payments import PaymentsSettings
from app.modules.payments.adapters.base import GatewayAdapter
from app.modules.payments.adapters.http_client import GatewayHttpClient
from app.modules.payments.adapters.payu_adapter import PayUAdapter
from app.modules.payments.adapters.paypal_adapter import PayPalAdapter
from app.modules.payments.adapters.razorpay_adapter import RazorpayAdapter
from app.modules.payments.adapters.stripe_adapters import (
    StripeCheckoutAdapter,
    StripeIntentAdapter,
)
from app.modules.payments.enums import PaymentGateway
from app.modules.payments.errors import InvalidRequest

logger = logging.getLogger(__name__)


def _gateway_specs(settings: PaymentsSettings) -> list[tuple[PaymentGateway, type[GatewayAdapter], bool, str]]:
    """(pasarela, clase, habilitada, base_url)"""
    return [
        (PaymentGateway.RAZORPAY, RazorpayAdapter, settings.razorpay_enabled, settings.razorpay_base_url),
        # Stripe va por el SDK oficial; el cliente httpx no se usa
        (PaymentGateway.STRIPE, StripeIntentAdapter, settings.stripe_enabled, ""),
        (PaymentGateway.STRIPE_CHECKOUT, StripeCheckoutAdapter, settings.stripe_checkout_enabled, ""),
        # PayU usa URLs absolutas (form-post y postservice)
        (PaymentGateway.PAYU, PayUAdapter, settings.payu_enabled, ""),
        (PaymentGateway.PAYPAL, PayPalAdapter, settings.paypal_enabled, settings.paypal_base_url),
    ]


class GatewayRegistry:
    def __init__(
        self,
        adapters: dict[PaymentGateway, GatewayAdapter],
        *,
        status: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        self._adapters = dict(adapters)
        self._status = status or [
            {"gateway": g.value, "enabled": True, "configured": True, "available": True}
            for g in self._adapters
        ]

    @classmethod
    def build(
        cls,
        settings: PaymentsSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_base: Optional[float] = None,
    ) -> "GatewayRegistry":
        adapters: dict[PaymentGateway, GatewayAdapter] = {}
        status: list[dict[str, Any]] = []

        for gateway, adapter_cls, enabled, base_url in _gateway_specs(settings):
            client_kwargs: dict[str, Any] = {"base_url": base_url, "transport": transport}
            if backoff_base is not None:
                client_kwargs.update(backoff_base=backoff_base, backoff_429=backoff_base)
            http = GatewayHttpClient(gateway.value, settings, **client_kwargs)
            adapter = adapter_cls(settings, http)

            configured = adapter.is_configured
            available = bool(enabled and configured and settings.payments_enabled)
            status.append(
                {
                    "gateway": gateway.value,
                    "enabled": bool(enabled),
                    "configured": configured,
                    "available": available,
                }
            )
            if available:
                adapters[gateway] = adapter
            elif enabled and not configured:
                logger.warning("gateway %s habilitado pero sin credenciales", gateway.value)

        logger.info("gateway_registry available=%s", [g.value for g in adapters])
        return cls(adapters, status=status)

    def get(self, gateway: PaymentGateway | str) -> GatewayAdapter:
        try:
            key = PaymentGateway(str(gateway).upper())
        except ValueError:
            raise InvalidRequest(f"Unsupported payment gateway: {gateway}") from None
        adapter = self._adapters.get(key)
        if adapter is None:
            raise InvalidRequest(f"Payment gateway {key.value} is not available")
        return adapter

    def available(self) -> list[PaymentGateway]:
        return list(self._adapters)

    def status(self) -> list[dict[str, Any]]:
        return [dict(s) for s in self._status]

    def __contains__(self, gateway: object) -> bool:
        return gateway in self._adapters

    def adapters(self) -> Iterable[GatewayAdapter]:
        return self._adapters.values()

    async def aclose(self) -> None:
        for adapter in self._adapters.values():
            await adapter.aclose()


__all__ = ["GatewayRegistry"]

# Fin del archivo backend/app/modules/payments/adapters/registry.py
