# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/refund_request_repository.py

Repositorio para la tabla refund_requests.

Autor: CourseMart
Fecha: 2026-03-06
"""

from typing import Any, Iterable, Optional

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.payments.enums import RefundRequestStatus
from app.modules.payments.models.refund_request_models import RefundRequest


class RefundRequestRepository(BaseRepository[RefundRequest]):
    def __init__(self) -> None:
        super().__init__(RefundRequest)

    async def get_by_payment(
        self, session: AsyncSession, payment_id: int
    ) -> Optional[RefundRequest]:
        stmt = select(RefundRequest).where(RefundRequest.payment_id == payment_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    def queue_stmt(self, status: RefundRequestStatus | None = None) -> Select:
        """Cola de administración, más antiguas primero."""
        stmt = select(RefundRequest)
        if status is not None:
            stmt = stmt.where(RefundRequest.status == status)
        return stmt.order_by(RefundRequest.requested_at.asc(), RefundRequest.id.asc())

    async def transition(
        self,
        session: AsyncSession,
        request_id: int,
        *,
        expected: Iterable[RefundRequestStatus],
        target: RefundRequestStatus,
        **values: Any,
    ) -> bool:
        """
        Mueve la solicitud a `target` solo si sigue en alguno de `expected`.

        Returns:
            True si se aplicó; False si otro administrador ya la movió.
        """
        result = await session.execute(
            update(RefundRequest)
            .where(RefundRequest.id == request_id, RefundRequest.status.in_(tuple(expected)))
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

# Fin del archivo backend/app/modules/payments/repositories/refund_request_repository.py
