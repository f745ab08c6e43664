# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/payment_models.py

Modelo ORM para la tabla payments (raíz del agregado de checkout).

Invariantes:
- amount == original_amount - discount_amount + tax (2 decimales)
- status solo avanza según ALLOWED_TRANSITIONS (vía PaymentRepository.transition)
- (gateway, transaction_id) único; order_id único (una sesión de checkout
  referencia a un único Payment)
- nunca se borra (auditoría)

Autor: CourseMart
Fecha: 2026-03-06
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK, JSONType, Money, utcnow
from app.modules.payments.enums import (
    Currency,
    PaymentGateway,
    PaymentMethod,
    PaymentStatus,
)


class Payment(Base):
    """Pago de un carrito de cursos a través de una pasarela."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    # El pago pertenece a la plataforma; user_id no tiene FK en cascada
    user_id: Mapped[int] = mapped_column(
        BigIntPK,
        nullable=False,
        index=True,
        doc="Comprador (app_users.id).",
    )

    order_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        doc="Identificador de orden visible al cliente (clave de la sesión de checkout).",
    )

    amount: Mapped[Decimal] = mapped_column(Money, nullable=False, doc="Monto final cobrado.")
    original_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, doc="Subtotal.")
    discount_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))
    tax: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))

    currency: Mapped[Currency] = mapped_column(
        Currency.as_pg_enum(), nullable=False, default=Currency.INR
    )

    status: Mapped[PaymentStatus] = mapped_column(
        PaymentStatus.as_pg_enum(),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )

    method: Mapped[PaymentMethod] = mapped_column(
        PaymentMethod.as_pg_enum(),
        nullable=False,
        default=PaymentMethod.CREDIT_CARD,
        doc="Método normalizado; se fija al verificar con los detalles liquidados.",
    )

    gateway: Mapped[PaymentGateway] = mapped_column(
        PaymentGateway.as_pg_enum(), nullable=False
    )

    transaction_id: Mapped[Optional[str]] = mapped_column(
        String(128),
        nullable=True,
        doc="Referencia del proveedor (orden/intent al crear, pago al verificar).",
    )

    gateway_response: Mapped[Optional[dict]] = mapped_column(
        JSONType,
        nullable=True,
        doc="Payload del proveedor conservado para auditoría.",
    )

    refund_amount: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    refund_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Snapshot del checkout: orderId, courseIds, orderItems, billingAddress,
    # couponCode, retryOf, errors, disputes. Reasignar el dict al modificarlo.
    payment_metadata: Mapped[dict] = mapped_column(
        "metadata",
        JSONType,
        nullable=False,
        default=dict,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    failed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    refunded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("gateway", "transaction_id", name="uq_payment_gateway_transaction"),
        Index("ix_payments_user_status", "user_id", "status"),
    )

    # ------------------------------------------------------------------ #
    # Accesores del snapshot
    # ------------------------------------------------------------------ #
    @property
    def course_ids(self) -> list[int]:
        return [int(c) for c in (self.payment_metadata or {}).get("courseIds", [])]

    @property
    def coupon_code(self) -> Optional[str]:
        return (self.payment_metadata or {}).get("couponCode")

    def __repr__(self) -> str:
        return f"<Payment id={self.id} order={self.order_id} gateway={self.gateway} status={self.status}>"

# Fin del archivo backend/app/modules/payments/models/payment_models.py
