# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/utils/__init__.py

Autor: CourseMart
Fecha: 2026-03-06
"""

from .datetime_helpers import ensure_utc, is_within_window, to_iso8601, utcnow

__all__ = ["ensure_utc", "is_within_window", "to_iso8601", "utcnow"]

# Fin del archivo backend/app/modules/payments/utils/__init__.py
