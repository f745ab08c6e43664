# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: CourseMart
Fecha: 2026-03-02
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, as_pg_enum, BigIntPK, JSONType, Money, utcnow
from .database import (
    engine,
    SessionLocal,
    build_engine,
    build_session_factory,
    get_async_session,
    session_scope,
    create_all,
    check_database_health,
)
from .repository import BaseRepository

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_pg_enum",
    "BigIntPK",
    "JSONType",
    "Money",
    "utcnow",
    "engine",
    "SessionLocal",
    "build_engine",
    "build_session_factory",
    "get_async_session",
    "session_scope",
    "create_all",
    "check_database_health",
    "BaseRepository",
]

# Fin del archivo backend/app/shared/database/__init__.py
