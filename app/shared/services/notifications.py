# -*- coding: utf-8 -*-
"""
backend/app/shared/services/notifications.py

Contrato de despacho de notificaciones in-app.

- NotificationDispatcher: protocolo `notify(user_id, type, title, message, payload)`
- safe_notify(): envoltorio fire-and-forget; errores se registran y no
  bloquean flujos de negocio

Autor: CourseMart
Fecha: 2026-03-05
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any, Mapping, Optional, Protocol

logger = logging.getLogger(__name__)


class NotificationType(StrEnum):
    NEW_ENROLLMENT = "NEW_ENROLLMENT"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    REFUND_REQUESTED = "REFUND_REQUESTED"
    REFUND_PROCESSED = "REFUND_PROCESSED"
    REFUND_REJECTED = "REFUND_REJECTED"


class NotificationDispatcher(Protocol):
    async def notify(
        self,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        payload: Optional[Mapping[str, Any]] = None,
        priority: str = "NORMAL",
    ) -> None: ...


async def safe_notify(
    dispatcher: NotificationDispatcher,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    payload: Optional[Mapping[str, Any]] = None,
    priority: str = "NORMAL",
) -> bool:
    """Best-effort: devuelve False si el despacho falló."""
    try:
        await dispatcher.notify(user_id, type, title, message, payload, priority)
        return True
    except Exception:
        logger.warning(
            "[notify] fallo despachando %s a user=%s", type, user_id, exc_info=True
        )
        return False


__all__ = [
    "NotificationType",
    "NotificationDispatcher",
    "safe_notify",
]

# Fin del archivo backend/app/shared/services/notifications.py
