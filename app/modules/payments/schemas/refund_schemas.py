# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/schemas/refund_schemas.py

Contratos de solicitud y decisión de reembolsos.

Autor: CourseMart
Fecha: 2026-03-12
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.modules.payments.enums import RefundDecision

from .common_schemas import CamelModel, PageMeta


class RefundCreate(CamelModel):
    reason: str = Field(min_length=1, max_length=2000, description="Motivo del reembolso.")


class RefundDecisionIn(CamelModel):
    action: RefundDecision
    admin_notes: Optional[str] = Field(default=None, max_length=2000)


class RefundRequestOut(CamelModel):
    id: int
    payment_id: int
    user_id: int
    status: str
    reason: str
    requested_amount: Decimal
    admin_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    requested_at: datetime
    reviewed_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    gateway_refund_id: Optional[str] = None
    error_message: Optional[str] = None


class RefundProcessOut(CamelModel):
    payment_id: int
    action: str
    payment_status: str
    refund_amount: Optional[Decimal] = None
    refund_request: RefundRequestOut


class RefundQueueItem(RefundRequestOut):
    order_id: str
    payment_amount: Decimal
    payment_status: str
    gateway: str


class RefundQueueOut(CamelModel):
    refund_requests: list[RefundQueueItem]
    pagination: PageMeta


__all__ = [
    "RefundCreate",
    "RefundDecisionIn",
    "RefundProcessOut",
    "RefundQueueItem",
    "RefundQueueOut",
    "RefundRequestOut",
]

# Fin del archivo backend/app/modules/payments/schemas/refund_schemas.py
