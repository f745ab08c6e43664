# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/checkout_session_store.py

Sesión de checkout: entrada efímera `checkout:{orderId}` que correlaciona el
order id visible al cliente con el Payment interno.

La sesión habilita la verificación pero no es un lock: la verificación
exige sesión válida Y que el CAS del Payment aplique. Perder el caché
degrada a SessionInvalid, nunca a un fulfillment incorrecto.

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from app.shared.cache import CacheBackend, CacheUnavailableError
from app.modules.payments.errors import GatewayUnavailable

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "checkout:"


def session_key(order_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{order_id}"


@dataclass
class CheckoutSession:
    order_id: str
    payment_id: int
    gateway_order_id: str
    user_id: int
    course_ids: list[int] = field(default_factory=list)
    final_amount: Decimal = Decimal("0.00")
    gateway: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "orderId": self.order_id,
            "paymentId": self.payment_id,
            "gatewayOrderId": self.gateway_order_id,
            "userId": self.user_id,
            "courseIds": list(self.course_ids),
            "finalAmount": str(self.final_amount),
            "gateway": self.gateway,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CheckoutSession":
        return cls(
            order_id=str(data["orderId"]),
            payment_id=int(data["paymentId"]),
            gateway_order_id=str(data["gatewayOrderId"]),
            user_id=int(data["userId"]),
            course_ids=[int(c) for c in data.get("courseIds", [])],
            final_amount=Decimal(str(data.get("finalAmount", "0"))),
            gateway=str(data.get("gateway", "")),
        )


class CheckoutSessionStore:
    def __init__(self, cache: CacheBackend, ttl_seconds: int = 3600) -> None:
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    async def save(self, session: CheckoutSession) -> None:
        """
        Guarda la sesión con TTL.

        Raises:
            GatewayUnavailable: si el caché no pudo guardarla; el checkout
            debe deshacer su transacción.
        """
        try:
            await self.cache.set(session_key(session.order_id), session.to_dict(), ttl=self.ttl_seconds)
        except CacheUnavailableError as exc:
            logger.error("checkout_session_store_failed order=%s: %s", session.order_id, exc)
            raise GatewayUnavailable(
                "Checkout temporarily unavailable",
                details={"reason": "session_store_unavailable"},
            ) from exc

    async def load(self, order_id: str) -> Optional[CheckoutSession]:
        data = await self.cache.get(session_key(order_id))
        if not data:
            return None
        try:
            return CheckoutSession.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("checkout_session_corrupt order=%s: %s", order_id, exc)
            return None

    async def delete(self, order_id: str) -> bool:
        return await self.cache.delete(session_key(order_id))


__all__ = ["CheckoutSession", "CheckoutSessionStore", "session_key", "SESSION_KEY_PREFIX"]

# Fin del archivo backend/app/modules/payments/services/checkout_session_store.py
