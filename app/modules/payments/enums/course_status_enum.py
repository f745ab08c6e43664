# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/enums/course_status_enum.py

Estado editorial de un curso (solo PUBLISHED es comprable).
Sincronizado con el tipo ENUM de PostgreSQL: course_status_enum.

Autor: CourseMart
Fecha: 2026-03-06
"""

from enum import StrEnum

from sqlalchemy.types import TypeEngine

from app.shared.database.base import as_pg_enum as _as_pg_enum


class CourseStatus(StrEnum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"

    __pg_enum_name__ = "course_status_enum"

    @classmethod
    def as_pg_enum(
        cls,
        name: str = "course_status_enum",
        schema: str | None = "public",
    ) -> TypeEngine:
        return _as_pg_enum(cls, name=name, schema=schema)


__all__ = ["CourseStatus"]

# Fin del archivo backend/app/modules/payments/enums/course_status_enum.py
