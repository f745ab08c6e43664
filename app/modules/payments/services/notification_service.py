# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/notification_service.py

DatabaseNotificationDispatcher: persiste notificaciones in-app en la tabla
notifications usando su propia sesión (nunca la transacción del pago).

Autor: CourseMart
Fecha: 2026-03-10
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.database.database import session_scope
from app.shared.services.notifications import NotificationType
from app.modules.payments.models.cart_models import Notification

logger = logging.getLogger(__name__)


def _json_safe(payload: Optional[Mapping[str, Any]]) -> Optional[dict]:
    if payload is None:
        return None
    return json.loads(json.dumps(dict(payload), default=str))


class DatabaseNotificationDispatcher:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def notify(
        self,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        payload: Optional[Mapping[str, Any]] = None,
        priority: str = "NORMAL",
    ) -> None:
        async with session_scope(self.session_factory) as session:
            session.add(
                Notification(
                    user_id=user_id,
                    type=str(type),
                    title=title,
                    message=message,
                    priority=priority,
                    data=_json_safe(payload),
                )
            )
            await session.commit()
        logger.debug("notification_stored user=%s type=%s", user_id, type)


__all__ = ["DatabaseNotificationDispatcher"]

# Fin del archivo backend/app/modules/payments/services/notification_service.py
