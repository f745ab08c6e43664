# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/history.py

Consultas de compras del usuario y disponibilidad de pasarelas.

Endpoints:
- GET /payments/history
- GET /payments/details/{payment_id}
- GET /payments/gateways

Autor: CourseMart
Fecha: 2026-03-15
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.database import get_async_session
from app.modules.payments.facades import (
    PaymentsContext,
    get_gateway_status,
    get_payment_details,
    get_purchase_history,
)
from app.modules.payments.schemas import (
    ApiResponse,
    GatewayStatusOut,
    PaymentDetailsOut,
    PurchaseHistoryOut,
)

from .dependencies import get_payments_context, resolve_current_user_id

router = APIRouter(tags=["payments:history"])


@router.get("/history", response_model=ApiResponse[PurchaseHistoryOut])
async def history_route(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    status: Optional[str] = Query(default=None),
    gateway: Optional[str] = Query(default=None),
    session: AsyncSession = Depends(get_async_session),
    user_id: int = Depends(resolve_current_user_id),
):
    data = await get_purchase_history(
        session,
        user_id=user_id,
        page=page,
        limit=limit,
        status=status,
        gateway=gateway,
    )
    return ApiResponse(data=data)


@router.get("/details/{payment_id}", response_model=ApiResponse[PaymentDetailsOut])
async def details_route(
    payment_id: int,
    session: AsyncSession = Depends(get_async_session),
    user_id: int = Depends(resolve_current_user_id),
):
    data = await get_payment_details(session, user_id=user_id, payment_id=payment_id)
    return ApiResponse(data=data)


@router.get("/gateways", response_model=ApiResponse[GatewayStatusOut])
async def gateways_route(ctx: PaymentsContext = Depends(get_payments_context)):
    """Pasarelas habilitadas/configuradas; no requiere sesión."""
    return ApiResponse(data=get_gateway_status(ctx))


# Fin del archivo backend/app/modules/payments/routes/history.py
