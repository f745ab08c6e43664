# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/repositories/cart_repository.py

Repositorios auxiliares: cart_items, app_users y notifications.

Autor: CourseMart
Fecha: 2026-03-06
"""

from typing import Iterable

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository
from app.modules.payments.models.cart_models import CartItem, Notification
from app.modules.payments.models.user_models import AppUser


class CartRepository(BaseRepository[CartItem]):
    def __init__(self) -> None:
        super().__init__(CartItem)

    async def remove_courses(
        self,
        session: AsyncSession,
        student_id: int,
        course_ids: Iterable[int],
    ) -> int:
        ids = list(course_ids)
        if not ids:
            return 0
        result = await session.execute(
            delete(CartItem)
            .where(CartItem.student_id == student_id, CartItem.course_id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0


class UserRepository(BaseRepository[AppUser]):
    def __init__(self) -> None:
        super().__init__(AppUser)


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self) -> None:
        super().__init__(Notification)

# Fin del archivo backend/app/modules/payments/repositories/cart_repository.py
