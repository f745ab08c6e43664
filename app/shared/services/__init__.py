# -*- coding: utf-8 -*-
"""
backend/app/shared/services/__init__.py

Servicios compartidos (notificaciones in-app).
"""

from .notifications import (
    NotificationType,
    NotificationDispatcher,
    safe_notify,
)

__all__ = [
    "NotificationType",
    "NotificationDispatcher",
    "safe_notify",
]
