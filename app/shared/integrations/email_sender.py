# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/email_sender.py

Contrato de envío de correos transaccionales de compra/reembolso.

El despacho real de correo es un colaborador externo; aquí se define:
- IPurchaseEmailSender: protocolo consumido por el pipeline de pagos
- StubEmailSender: implementación que solo loguea (modo console)
- get_email_sender(): factory con override para tests
- safe_send_*: envoltorios fire-and-forget (loguean y nunca propagan)

Autor: CourseMart
Actualizado: 2026-03-05
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class IPurchaseEmailSender(Protocol):
    """Protocolo para implementaciones de email de compras."""

    async def send_purchase_confirmation(
        self,
        *,
        email: str,
        first_name: str,
        amount: Decimal,
        currency: str,
        transaction_id: Optional[str],
        course_name: str,
        course_url: str,
    ) -> None: ...

    async def send_refund_processed(
        self,
        *,
        email: str,
        first_name: str,
        amount: Decimal,
        currency: str,
        course_name: str,
        refund_id: Optional[str],
    ) -> None: ...


class StubEmailSender:
    """Implementación que no envía correos; solo hace logging (modo console)."""

    async def send_purchase_confirmation(
        self,
        *,
        email: str,
        first_name: str,
        amount: Decimal,
        currency: str,
        transaction_id: Optional[str],
        course_name: str,
        course_url: str,
    ) -> None:
        logger.info(
            "[CONSOLE EMAIL] Compra → %s | %s %s | curso=%s | tx=%s",
            email, amount, currency, course_name, transaction_id,
        )

    async def send_refund_processed(
        self,
        *,
        email: str,
        first_name: str,
        amount: Decimal,
        currency: str,
        course_name: str,
        refund_id: Optional[str],
    ) -> None:
        logger.info(
            "[CONSOLE EMAIL] Reembolso → %s | %s %s | curso=%s | refund=%s",
            email, amount, currency, course_name, refund_id,
        )


_sender: Optional[IPurchaseEmailSender] = None


def get_email_sender() -> IPurchaseEmailSender:
    global _sender
    if _sender is None:
        _sender = StubEmailSender()
    return _sender


def set_email_sender(sender: Optional[IPurchaseEmailSender]) -> None:
    global _sender
    _sender = sender


async def safe_send_purchase_confirmation(sender: IPurchaseEmailSender, **kwargs) -> bool:
    """Best-effort: un fallo de email nunca bloquea el fulfillment."""
    try:
        await sender.send_purchase_confirmation(**kwargs)
        return True
    except Exception:
        logger.warning(
            "[EmailSender] confirmación de compra no enviada a %s",
            kwargs.get("email"),
            exc_info=True,
        )
        return False


async def safe_send_refund_processed(sender: IPurchaseEmailSender, **kwargs) -> bool:
    """Best-effort: un fallo de email nunca revierte un reembolso."""
    try:
        await sender.send_refund_processed(**kwargs)
        return True
    except Exception:
        logger.warning(
            "[EmailSender] aviso de reembolso no enviado a %s",
            kwargs.get("email"),
            exc_info=True,
        )
        return False


__all__ = [
    "IPurchaseEmailSender",
    "StubEmailSender",
    "get_email_sender",
    "set_email_sender",
    "safe_send_purchase_confirmation",
    "safe_send_refund_processed",
]

# Fin del archivo backend/app/shared/integrations/email_sender.py
