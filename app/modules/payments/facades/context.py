# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/facades/context.py

Colaboradores de larga vida que consumen las fachadas de Payments.

Se construye una vez en el lifespan de la app (o en el fixture de tests) y
se inyecta por dependencia; la AsyncSession se pasa aparte por request.

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.cache import CacheBackend
from app.shared.config.settings_payments import PaymentsSettings
from app.shared.integrations.email_sender import IPurchaseEmailSender
from app.shared.services.notifications import NotificationDispatcher
from app.shared.tasks import DeferredTaskQueue
from app.modules.payments.adapters.registry import GatewayRegistry
from app.modules.payments.services import (
    CheckoutSessionStore,
    CouponService,
    FulfillmentService,
)

logger = logging.getLogger(__name__)


def fulfillment_job_id(payment_id: int) -> str:
    return f"fulfill:{payment_id}"


@dataclass
class PaymentsContext:
    settings: PaymentsSettings
    registry: GatewayRegistry
    cache: CacheBackend
    queue: DeferredTaskQueue
    notifier: NotificationDispatcher
    email_sender: IPurchaseEmailSender
    session_factory: async_sessionmaker[AsyncSession]
    coupons: CouponService = field(default_factory=CouponService)
    session_store: CheckoutSessionStore = field(init=False)
    fulfillment: FulfillmentService = field(init=False)

    def __post_init__(self) -> None:
        self.session_store = CheckoutSessionStore(
            self.cache, self.settings.checkout_session_ttl_seconds
        )
        self.fulfillment = FulfillmentService(
            self.session_factory,
            settings=self.settings,
            cache=self.cache,
            notifier=self.notifier,
            email_sender=self.email_sender,
        )

    async def enqueue_fulfillment(self, payment_id: int) -> None:
        """At-least-once: el fulfillment es idempotente por (alumno, curso, pago)."""
        await self.queue.enqueue(
            fulfillment_job_id(payment_id),
            self.fulfillment.fulfill_payment,
            payment_id=payment_id,
        )
        logger.info("fulfillment_enqueued payment=%s", payment_id)


__all__ = ["PaymentsContext", "fulfillment_job_id"]

# Fin del archivo backend/app/modules/payments/facades/context.py
