# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/utils/datetime_helpers.py

Utilidades para manejo consistente de timestamps UTC.

SQLite devuelve datetimes naive aunque la columna sea timezone-aware;
toda comparación de fechas del módulo pasa por ensure_utc().

Autor: CourseMart
Fecha: 2026-03-06
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from app.shared.database.base import utcnow


def ensure_utc(dt: datetime) -> datetime:
    """
    Asegura que un datetime sea UTC timezone-aware.

    Examples:
        >>> dt_utc = ensure_utc(datetime(2026, 3, 6, 14, 30, 0))
        >>> dt_utc.tzinfo == timezone.utc
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    if dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def to_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """
    Convierte datetime a ISO 8601 con 'Z' para UTC (None si dt es None).

    Examples:
        >>> to_iso8601(datetime(2026, 3, 6, 14, 30, 0, tzinfo=timezone.utc))
        '2026-03-06T14:30:00Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


def is_within_window(start: datetime, days: int, now: Optional[datetime] = None) -> bool:
    """True si `now` no ha superado `start + days`."""
    now = now or utcnow()
    return ensure_utc(now) <= ensure_utc(start) + timedelta(days=days)


__all__ = ["utcnow", "ensure_utc", "to_iso8601", "is_within_window"]

# Fin del archivo backend/app/modules/payments/utils/datetime_helpers.py
