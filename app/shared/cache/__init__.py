# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/__init__.py

Módulo compartido de caché: interfaz, backends y factory.
"""

from __future__ import annotations

from typing import Optional

from app.shared.config import get_settings
from .cache_backend import CacheBackend, CacheUnavailableError
from .memory_cache import InMemoryCache
from .redis_cache import RedisCache

_cache: Optional[CacheBackend] = None


def get_cache() -> CacheBackend:
    """Redis si REDIS_URL está configurado; si no, caché en memoria del proceso."""
    global _cache
    if _cache is None:
        _cache = RedisCache() if get_settings().redis_url else InMemoryCache()
    return _cache


def set_cache(cache: Optional[CacheBackend]) -> None:
    """Reemplaza (o limpia con None) el caché global."""
    global _cache
    _cache = cache


__all__ = [
    "CacheBackend",
    "CacheUnavailableError",
    "InMemoryCache",
    "RedisCache",
    "get_cache",
    "set_cache",
]
