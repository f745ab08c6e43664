# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/refund_request_models.py

Modelo ORM para la tabla refund_requests.

Una solicitud por pago (payment_id único). Una solicitud FAILED puede volver
a decidirse; una REJECTED puede reabrirse con una nueva solicitud del alumno.

Autor: CourseMart
Fecha: 2026-03-06
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK, Money, utcnow
from app.modules.payments.enums import RefundRequestStatus


class RefundRequest(Base):
    __tablename__ = "refund_requests"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    payment_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("payments.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )

    user_id: Mapped[int] = mapped_column(BigIntPK, nullable=False, index=True)

    status: Mapped[RefundRequestStatus] = mapped_column(
        RefundRequestStatus.as_pg_enum(),
        nullable=False,
        default=RefundRequestStatus.PENDING,
        index=True,
    )

    reason: Mapped[str] = mapped_column(Text, nullable=False)
    requested_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)

    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[Optional[int]] = mapped_column(BigIntPK, nullable=True)

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    gateway_refund_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<RefundRequest id={self.id} payment_id={self.payment_id} status={self.status}>"

# Fin del archivo backend/app/modules/payments/models/refund_request_models.py
