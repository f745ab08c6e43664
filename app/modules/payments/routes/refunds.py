# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/refunds.py

Rutas de reembolsos.

Endpoints:
- POST /payments/refund/{payment_id}          (alumno)
- PUT  /payments/refund/{payment_id}/process  (admin)
- GET  /payments/admin/refunds                (admin)

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
    list_refund_requests,
    process_refund,
    request_refund,
)
from app.modules.payments.schemas import (
    ApiResponse,
    RefundCreate,
    RefundDecisionIn,
    RefundProcessOut,
    RefundQueueOut,
    RefundRequestOut,
)

from .dependencies import get_payments_context, require_admin, resolve_current_user_id

router = APIRouter(tags=["payments:refunds"])


@router.post("/refund/{payment_id}", response_model=ApiResponse[RefundRequestOut])
async def request_refund_route(
    payment_id: int,
    payload: RefundCreate,
    session: AsyncSession = Depends(get_async_session),
    ctx: PaymentsContext = Depends(get_payments_context),
    user_id: int = Depends(resolve_current_user_id),
):
    data = await request_refund(
        session, ctx, user_id=user_id, payment_id=payment_id, reason=payload.reason
    )
    return ApiResponse(message="Refund request submitted", data=data)


@router.put("/refund/{payment_id}/process", response_model=ApiResponse[RefundProcessOut])
async def process_refund_route(
    payment_id: int,
    payload: RefundDecisionIn,
    session: AsyncSession = Depends(get_async_session),
    ctx: PaymentsContext = Depends(get_payments_context),
    admin_id: int = Depends(require_admin),
):
    data = await process_refund(
        session,
        ctx,
        admin_id=admin_id,
        payment_id=payment_id,
        action=payload.action,
        admin_notes=payload.admin_notes,
    )
    message = "Refund processed" if data.action == "APPROVE" else "Refund request rejected"
    return ApiResponse(message=message, data=data)


@router.get("/admin/refunds", response_model=ApiResponse[RefundQueueOut])
async def refund_queue_route(
    status: Optional[str] = Query(default=None),
    page: int = Query(default=1),
    limit: int = Query(default=20),
    session: AsyncSession = Depends(get_async_session),
    _admin_id: int = Depends(require_admin),
):
    data = await list_refund_requests(session, status=status, page=page, limit=limit)
    return ApiResponse(data=data)


# Fin del archivo backend/app/modules/payments/routes/refunds.py
