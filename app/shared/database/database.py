# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

Engine y sesiones async de SQLAlchemy para CourseMart.

Provee:
- engine (create_async_engine) construido desde settings.database_url
  (asyncpg en producción, aiosqlite en desarrollo/tests)
- SessionLocal (async_sessionmaker)
- Dependencia FastAPI: get_async_session
- context manager: session_scope()
- create_all() para bootstrap de desarrollo / tests
- check_database_health()

Autor: CourseMart
Fecha: 2026-03-02
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.shared.config import get_settings
from app.shared.database.base import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """
    Crea un AsyncEngine con parámetros según el dialecto.

    - SQLite: timeout de lock de 15s (checkouts concurrentes serializan escrituras).
    - PostgreSQL: pool_pre_ping y statement cache desactivado (PgBouncer).
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"timeout": 15},
        )
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args={"statement_cache_size": 0},
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


_settings = get_settings()

engine = build_engine(_settings.database_url, echo=_settings.db_echo_sql)
SessionLocal = build_session_factory(engine)

logger.info(
    "[DB] engine configurado → %s (echo=%s)",
    _settings.database_url.split("@")[-1],
    _settings.db_echo_sql,
)


# ── Dependencia FastAPI
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        try:
            yield session
        except SQLAlchemyError:
            # rollback para liberar cualquier transacción/lock
            await session.rollback()
            raise
        finally:
            if session.in_transaction():
                await session.rollback()


# ── Context manager reutilizable en workers/scripts/tests
@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Abre una sesión y garantiza rollback de lo no confirmado al salir.
    El commit es responsabilidad de quien usa el scope.
    """
    async with (factory or SessionLocal)() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


async def create_all(bind: AsyncEngine | None = None) -> None:
    """Crea las tablas de todos los modelos registrados (dev/tests)."""
    import app.modules.payments.models  # noqa: F401  (registra los modelos)

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Health check
async def check_database_health(timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
    """
    Verifica conectividad a la base de datos.

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with engine.connect() as conn:
                await conn.execute(text(sql))
        return True
    except (SQLAlchemyError, OSError, TimeoutError) as exc:
        logger.warning("[DB] health check falló: %s", exc)
        return False


__all__ = [
    "engine",
    "SessionLocal",
    "build_engine",
    "build_session_factory",
    "get_async_session",
    "session_scope",
    "create_all",
    "check_database_health",
]
# Fin del archivo backend/app/shared/database/database.py
