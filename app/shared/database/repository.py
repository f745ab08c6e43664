# -*- coding: utf-8 -*-
"""
backend/app/shared/database/repository.py

Repositorio base para operaciones async con SQLAlchemy.

Además de get/create expone `paginate`, usado por los listados
paginados (historial de compras, cola de reembolsos).

Autor: CourseMart
Fecha: 2026-03-02
"""

from typing import Any, Generic, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")  # modelo ORM


class BaseRepository(Generic[T]):
    """Base de los repositorios de pagos: get/create con flush y paginación."""

    def __init__(self, model: Type[T]):
        self.model = model

    # -------------------------------------------------------------
    # Lectura / alta
    # -------------------------------------------------------------
    async def get(self, session: AsyncSession, obj_id: Any) -> Optional[T]:
        return await session.get(self.model, obj_id)

    async def create(self, session: AsyncSession, **kwargs) -> T:
        obj = self.model(**kwargs)
        session.add(obj)
        await session.flush()
        return obj

    # -------------------------------------------------------------
    # Paginación
    # -------------------------------------------------------------
    async def paginate(
        self,
        session: AsyncSession,
        stmt: Select,
        *,
        page: int,
        limit: int,
    ) -> Tuple[Sequence[Any], int]:
        """
        Ejecuta `stmt` paginado (page base 1) y devuelve (filas, total).
        """
        total = await session.scalar(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        )
        result = await session.execute(stmt.offset((page - 1) * limit).limit(limit))
        return result.scalars().all(), int(total or 0)

# Fin del archivo backend/app/shared/database/repository.py
