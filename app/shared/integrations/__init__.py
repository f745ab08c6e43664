# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/__init__.py

Integraciones con servicios externos (email).
"""

from .email_sender import (
    IPurchaseEmailSender,
    StubEmailSender,
    get_email_sender,
    set_email_sender,
    safe_send_purchase_confirmation,
    safe_send_refund_processed,
)

__all__ = [
    "IPurchaseEmailSender",
    "StubEmailSender",
    "get_email_sender",
    "set_email_sender",
    "safe_send_purchase_confirmation",
    "safe_send_refund_processed",
]
