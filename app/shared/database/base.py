# -*- coding: utf-8 -*-
"""
backend/app/shared/database/base.py

Base declarativa, convención de nombres y tipos portables para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- as_pg_enum: helper genérico para mapear enums Python a ENUM de PostgreSQL
  (con variante VARCHAR para SQLite en desarrollo/tests)
- BigIntPK, JSONType, Money: tipos con variantes por dialecto

Autor: CourseMart
Fecha: 2026-03-02
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Type

from sqlalchemy import JSON, BigInteger, Enum as SAEnum, Integer, MetaData, Numeric
from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM, JSONB
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeEngine

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM de CourseMart.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ===== TIPOS PORTABLES =====
# SQLite solo autoincrementa INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")

JSONType = JSON().with_variant(JSONB(), "postgresql")

# Montos monetarios con 2 decimales (DECIMAL(10,2))
Money = Numeric(10, 2, asdecimal=True)


def utcnow() -> datetime:
    """Timestamp UTC timezone-aware (default Python-side de columnas)."""
    return datetime.now(timezone.utc)


# ===== HELPER GENÉRICO PARA ENUMS PG =====
def as_pg_enum(
    enum_cls: Type[Enum],
    name: str | None = None,
    schema: str | None = None,
) -> TypeEngine:
    """
    Devuelve un tipo Enum de SQLAlchemy que en PostgreSQL es un ENUM nombrado
    y en otros dialectos (SQLite) un VARCHAR con los valores del enum.

    Uso típico:

        from app.shared.database.base import Base, as_pg_enum
        from .enums import PaymentStatus

        class Payment(Base):
            status: Mapped[PaymentStatus] = mapped_column(
                as_pg_enum(PaymentStatus, name="payment_status_enum"),
                nullable=False,
            )

    - En PostgreSQL no crea el tipo (create_type=False): se asume que el ENUM
      ya existe creado vía scripts SQL / migraciones.
    - Si no se pasa `name`, intenta usar `__pg_enum_name__` del enum,
      o el nombre de la clase en minúsculas.
    """
    enum_name = name or getattr(enum_cls, "__pg_enum_name__", enum_cls.__name__.lower())

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    portable = SAEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        length=32,
        values_callable=_values,
        validate_strings=True,
    )
    return portable.with_variant(
        PG_ENUM(
            enum_cls,
            name=enum_name,
            schema=schema,
            create_type=False,
            values_callable=_values,
        ),
        "postgresql",
    )


__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_pg_enum",
    "BigIntPK",
    "JSONType",
    "Money",
    "utcnow",
]

# Fin del archivo backend/app/shared/database/base.py
