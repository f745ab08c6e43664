# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/base.py

Contrato común de las pasarelas de pago.

Cada proveedor (Razorpay, Stripe intent, Stripe Checkout, PayU, PayPal)
implementa GatewayAdapter; orquestador y pipeline de verificación solo
conocen este contrato y nunca ramifican por nombre de proveedor.

Reglas del contrato:
- create_order: una llamada saliente (PayPal: token + orden).
  GatewayUnavailable (red/timeout/5xx) o GatewayRejected (4xx).
- verify_completion: False ante evidencia ambigua (campos faltantes, ids
  que no coinciden, estados no finales, 4xx del proveedor). Los fallos de
  transporte NUNCA son False: se propagan como GatewayUnavailable.
- fetch_settled_details: método normalizado vía method_mapping.
- create_refund: RefundRejected si el proveedor declina; idempotency_key se
  envía en el mecanismo de deduplicación propio de cada proveedor.

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from app.shared.config.settings_payments import PaymentsSettings
from app.modules.payments.adapters.http_client import GatewayHttpClient
from app.modules.payments.enums import PaymentGateway, PaymentMethod
from app.modules.payments.services.checkout_session_store import CheckoutSession


# ------------------------------------------------------------------ #
# DTOs neutrales al proveedor
# ------------------------------------------------------------------ #
@dataclass(frozen=True)
class OrderRequest:
    order_id: str
    amount: Decimal
    currency: str
    description: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    course_ids: tuple[int, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class GatewayOrder:
    external_id: str
    redirect_url: Optional[str] = None
    client_secret: Optional[str] = None
    form_payload: Optional[dict[str, Any]] = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class VerificationEvidence:
    """Lo que el cliente (o el callback) trae de vuelta tras pagar."""

    payment_id: Optional[str] = None
    gateway_order_id: Optional[str] = None
    signature: Optional[str] = None
    payer_id: Optional[str] = None
    status: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class ProviderPaymentInfo:
    external_id: str
    status: str
    amount: Optional[Decimal]
    method: PaymentMethod
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class RefundInfo:
    refund_id: str
    status: str
    amount: Decimal
    raw: dict[str, Any] = field(default_factory=dict)


def to_minor_units(amount: Decimal) -> int:
    """Monto en paise/centavos."""
    return int((Decimal(amount) * 100).quantize(Decimal("1")))


def from_minor_units(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return (Decimal(str(value)) / 100).quantize(Decimal("0.01"))


# ------------------------------------------------------------------ #
# Contrato
# ------------------------------------------------------------------ #
class GatewayAdapter(ABC):
    gateway: PaymentGateway

    def __init__(self, settings: PaymentsSettings, http: GatewayHttpClient) -> None:
        self.settings = settings
        self.http = http

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True si hay credenciales suficientes para operar."""

    def public_config(self) -> dict[str, Any]:
        """Datos no secretos que el cliente necesita (p.ej. publishable key)."""
        return {}

    def settlement_reference(
        self,
        evidence: VerificationEvidence,
        session: CheckoutSession,
    ) -> str:
        """Id que se consulta en fetch_settled_details tras verificar."""
        return evidence.payment_id or session.gateway_order_id

    @abstractmethod
    async def create_order(self, order: OrderRequest) -> GatewayOrder: ...

    @abstractmethod
    async def verify_completion(
        self,
        evidence: VerificationEvidence,
        expected: CheckoutSession,
    ) -> bool: ...

    @abstractmethod
    async def fetch_settled_details(self, external_id: str) -> ProviderPaymentInfo: ...

    @abstractmethod
    async def create_refund(
        self,
        external_id: str,
        amount: Decimal,
        note: str,
        *,
        idempotency_key: Optional[str] = None,
    ) -> RefundInfo: ...

    async def aclose(self) -> None:
        await self.http.aclose()


__all__ = [
    "GatewayAdapter",
    "GatewayOrder",
    "OrderRequest",
    "ProviderPaymentInfo",
    "RefundInfo",
    "VerificationEvidence",
    "from_minor_units",
    "to_minor_units",
]

# Fin del archivo backend/app/modules/payments/adapters/base.py
