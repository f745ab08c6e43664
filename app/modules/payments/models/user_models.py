# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/models/user_models.py

Modelo ORM mínimo de usuarios (app_users): datos de contacto que el
checkout envía a las pasarelas y a los correos de confirmación.

Autor: CourseMart
Fecha: 2026-03-06
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, BigIntPK


class AppUser(Base):
    __tablename__ = "app_users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<AppUser id={self.id} email={self.email}>"

# Fin del archivo backend/app/modules/payments/models/user_models.py
