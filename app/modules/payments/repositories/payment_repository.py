# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/payment_repository.py

Repositorio para la tabla payments.

Responsabilidades:
- Búsqueda por order_id (sesión de checkout) y por referencia del proveedor
- Transiciones de estado como compare-and-set:
      UPDATE payments SET ... WHERE id = :id AND status = :expected
  Es el único camino para cambiar Payment.status.
- Listado paginable por usuario

Autor: CourseMart
Fecha: 2026-03-06
"""

import logging
from typing import Any, Optional

from sqlalchemy import Select, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.base import utcnow
from app.shared.database.repository import BaseRepository
from app.modules.payments.enums import PaymentGateway, PaymentStatus
from app.modules.payments.errors import InvalidStateTransition
from app.modules.payments.models.payment_models import Payment

logger = logging.getLogger(__name__)

# Columna de timestamp que se fija al entrar en cada estado
_STATUS_TIMESTAMP = {
    PaymentStatus.COMPLETED: "completed_at",
    PaymentStatus.FAILED: "failed_at",
    PaymentStatus.CANCELLED: "cancelled_at",
    PaymentStatus.REFUNDED: "refunded_at",
}


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self) -> None:
        super().__init__(Payment)

    # -----------------------------------------------------------
    # Búsquedas
    # -----------------------------------------------------------
    async def get_by_order_id(self, session: AsyncSession, order_id: str) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.order_id == order_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_for_user(
        self,
        session: AsyncSession,
        payment_id: int,
        user_id: int,
    ) -> Optional[Payment]:
        """Obtiene un pago solo si pertenece al usuario."""
        stmt = select(Payment).where(Payment.id == payment_id, Payment.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_by_transaction(
        self,
        session: AsyncSession,
        gateway: PaymentGateway,
        transaction_id: str,
    ) -> Optional[Payment]:
        stmt = select(Payment).where(
            Payment.gateway == gateway,
            Payment.transaction_id == transaction_id,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def find_for_webhook(
        self,
        session: AsyncSession,
        *,
        order_id: Optional[str],
        transaction_ids: list[str],
    ) -> Optional[Payment]:
        """
        Localiza el pago referido por un webhook: primero por order_id
        (metadata/notes/reference del proveedor), luego por transaction_id.
        """
        if order_id:
            payment = await self.get_by_order_id(session, order_id)
            if payment is not None:
                return payment

        ids = [t for t in transaction_ids if t]
        if not ids:
            return None
        stmt = (
            select(Payment)
            .where(or_(*(Payment.transaction_id == t for t in ids)))
            .order_by(Payment.id.desc())
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    # -----------------------------------------------------------
    # Transiciones (CAS)
    # -----------------------------------------------------------
    async def transition(
        self,
        session: AsyncSession,
        payment_id: int,
        *,
        expected: PaymentStatus,
        target: PaymentStatus,
        **values: Any,
    ) -> bool:
        """
        Aplica expected → target solo si la fila sigue en `expected`.

        Returns:
            True si la transición se aplicó; False si otro actor ya la movió.

        Raises:
            InvalidStateTransition: si expected → target no es legal.
        """
        if not expected.can_transition_to(target):
            raise InvalidStateTransition(
                f"Cannot move payment from {expected} to {target}",
                details={"payment_id": payment_id},
            )

        ts_column = _STATUS_TIMESTAMP.get(target)
        if ts_column and ts_column not in values:
            values[ts_column] = utcnow()

        stmt = (
            update(Payment)
            .where(Payment.id == payment_id, Payment.status == expected)
            .values(status=target, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        applied = result.rowcount == 1

        if applied:
            logger.info("payment_transition id=%s %s→%s", payment_id, expected, target)
        else:
            logger.info(
                "payment_transition_lost id=%s expected=%s target=%s",
                payment_id, expected, target,
            )
        return applied

    async def merge_metadata(
        self,
        session: AsyncSession,
        payment: Payment,
        **changes: Any,
    ) -> None:
        """Reasigna el dict de metadata para que el cambio se detecte."""
        payment.payment_metadata = {**(payment.payment_metadata or {}), **changes}
        await session.flush()

    # -----------------------------------------------------------
    # Listados
    # -----------------------------------------------------------
    def history_stmt(
        self,
        user_id: int,
        status: PaymentStatus | None = None,
        gateway: PaymentGateway | None = None,
    ) -> Select:
        stmt = select(Payment).where(Payment.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        if gateway is not None:
            stmt = stmt.where(Payment.gateway == gateway)
        return stmt.order_by(Payment.created_at.desc(), Payment.id.desc())

# Fin del archivo backend/app/modules/payments/repositories/payment_repository.py
