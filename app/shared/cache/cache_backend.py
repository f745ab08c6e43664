# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/cache_backend.py

Contrato de caché clave-valor async usado por pagos:

- checkout:{orderId}          sesión de checkout con TTL (CheckoutSessionStore)
- cart:{u}, cart_totals:{u},
  enrollments:{u}, course:{c} vistas invalidadas tras fulfillment/reembolso

Implementaciones: InMemoryCache (una réplica, tests) y RedisCache.

Autor: CourseMart
Fecha: 2026-03-02
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheUnavailableError(RuntimeError):
    """set() no pudo persistir la entrada."""


class CacheBackend(ABC):
    """
    Valores JSON-serializables. Lecturas y borrados son best-effort
    (None / False / 0 con backend caído); set() levanta
    CacheUnavailableError porque el checkout necesita saber que la sesión
    no quedó guardada.
    """

    @property
    @abstractmethod
    def default_ttl(self) -> Optional[int]: ...

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Valor o None si no existe o expiró."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """ttl en segundos; None usa default_ttl."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """True si la clave existía."""

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Número de claves borradas."""

    @abstractmethod
    def get_stats(self) -> dict: ...


__all__ = ["CacheBackend", "CacheUnavailableError"]

# Fin del archivo backend/app/shared/cache/cache_backend.py
