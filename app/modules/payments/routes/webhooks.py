# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/webhooks.py

Receptor de webhooks de pasarelas.

Endpoints:
- POST /payments/webhooks             (proveedor detectado por headers)
- POST /payments/webhooks/{gateway}   (además valida que coincida)

Sin autenticación de usuario: la firma del proveedor es la credencial.
El body se lee crudo; la firma se calcula sobre los bytes exactos.

Autor: CourseMart
Fecha: 2026-03-15
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.database import get_async_session
from app.modules.payments.facades import PaymentsContext, handle_webhook
from app.modules.payments.schemas import ApiResponse, WebhookAck

from .dependencies import get_payments_context

router = APIRouter(tags=["payments:webhooks"])


async def _receive(
    request: Request,
    session: AsyncSession,
    ctx: PaymentsContext,
    gateway: Optional[str],
) -> ApiResponse[WebhookAck]:
    raw_body = await request.body()
    data = await handle_webhook(
        session,
        ctx,
        headers=dict(request.headers),
        raw_body=raw_body,
        gateway_hint=gateway,
    )
    return ApiResponse(message="Webhook processed", data=data)


@router.post("/webhooks", response_model=ApiResponse[WebhookAck])
async def webhook_route(
    request: Request,
    session: AsyncSession = Depends(get_async_session),
    ctx: PaymentsContext = Depends(get_payments_context),
):
    return await _receive(request, session, ctx, None)


@router.post("/webhooks/{gateway}", response_model=ApiResponse[WebhookAck])
async def webhook_gateway_route(
    gateway: str,
    request: Request,
    session: AsyncSession = Depends(get_async_session),
    ctx: PaymentsContext = Depends(get_payments_context),
):
    return await _receive(request, session, ctx, gateway)


# Fin del archivo backend/app/modules/payments/routes/webhooks.py
