# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/checkout.py

Rutas del ciclo de compra.

Endpoints:
- POST  /payments/checkout           (201)
- POST  /payments/verify
- POST  /payments/retry/{payment_id} (201)
- PATCH /payments/cancel/{payment_id}

Autor: CourseMart
Fecha: 2026-03-15
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.database import get_async_session
from app.modules.payments.facades import (
    PaymentsContext,
    cancel_payment,
    evidence_from_request,
    initiate_checkout,
    retry_payment,
    verify_payment,
)
from app.modules.payments.schemas import (
    ApiResponse,
    CancelOut,
    CheckoutOut,
    CheckoutRequest,
    VerifyOut,
    VerifyRequest,
)

from .dependencies import get_payments_context, resolve_current_user_id

router = APIRouter(tags=["payments:checkout"])


@router.post(
    "/checkout",
    response_model=ApiResponse[CheckoutOut],
    status_code=status.HTTP_201_CREATED,
)
async def checkout_route(
    payload: CheckoutRequest,
    session: AsyncSession = Depends(get_async_session),
    ctx: PaymentsContext = Depends(get_payments_context),
    user_id: int = Depends(resolve_current_user_id),
):
    """Crea un Payment PENDING y la orden en la pasarela elegida."""
    data = await initiate_checkout(
        session,
        ctx,
        user_id=user_id,
        course_ids=payload.course_ids,
        gateway=payload.gateway,
        coupon_code=payload.coupon_code,
        billing_address=payload.billing_address,
    )
    return ApiResponse(message="Checkout initiated", data=data)


@router.post("/verify", response_model=ApiResponse[VerifyOut])
async def verify_route(
    payload: VerifyRequest,
    session: AsyncSession = Depends(get_async_session),
    ctx: PaymentsContext = Depends(get_payments_context),
    user_id: int = Depends(resolve_current_user_id),
):
    """
    Verifica el pago con la evidencia del callback del cliente.
    Llamadas repetidas devuelven alreadyProcessed=true.
    """
    data = await verify_payment(
        session,
        ctx,
        user_id=user_id,
        order_id=payload.order_id,
        evidence=evidence_from_request(payload),
    )
    message = "Payment already processed" if data.already_processed else "Payment verified"
    return ApiResponse(message=message, data=data)


@router.post(
    "/retry/{payment_id}",
    response_model=ApiResponse[CheckoutOut],
    status_code=status.HTTP_201_CREATED,
)
async def retry_route(
    payment_id: int,
    session: AsyncSession = Depends(get_async_session),
    ctx: PaymentsContext = Depends(get_payments_context),
    user_id: int = Depends(resolve_current_user_id),
):
    data = await retry_payment(session, ctx, user_id=user_id, payment_id=payment_id)
    return ApiResponse(message="Payment retry initiated", data=data)


@router.patch("/cancel/{payment_id}", response_model=ApiResponse[CancelOut])
async def cancel_route(
    payment_id: int,
    session: AsyncSession = Depends(get_async_session),
    ctx: PaymentsContext = Depends(get_payments_context),
    user_id: int = Depends(resolve_current_user_id),
):
    data = await cancel_payment(session, ctx, user_id=user_id, payment_id=payment_id)
    return ApiResponse(message="Payment cancelled", data=data)


# Fin del archivo backend/app/modules/payments/routes/checkout.py
