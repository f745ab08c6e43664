# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/memory_cache.py

Caché en memoria con TTL (reloj monotónico) que implementa CacheBackend.

Autor: CourseMart
Fecha: 2026-03-02
"""

from __future__ import annotations

import copy
import time
from typing import Any, Dict, Optional, Tuple

from .cache_backend import CacheBackend


class InMemoryCache(CacheBackend):
    """Caché por proceso. Los valores se copian al entrar y al salir."""

    def __init__(self, default_ttl: Optional[int] = None):
        self._default_ttl = default_ttl
        # key -> (valor, expira_en | None)
        self._data: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    @property
    def default_ttl(self) -> Optional[int]:
        return self._default_ttl

    def _expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and time.monotonic() >= expires_at

    async def get(self, key: str) -> Optional[Any]:
        entry = self._data.get(key)
        if entry is None:
            self._misses += 1
            return None
        value, expires_at = entry
        if self._expired(expires_at):
            del self._data[key]
            self._misses += 1
            return None
        self._hits += 1
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        effective = self._default_ttl if ttl is None else ttl
        expires_at = time.monotonic() + effective if effective else None
        self._data[key] = (copy.deepcopy(value), expires_at)
        self._sets += 1

    async def delete(self, key: str) -> bool:
        existed = self._data.pop(key, None) is not None
        if existed:
            self._deletes += 1
        return existed

    async def delete_prefix(self, prefix: str) -> int:
        keys = [k for k in self._data if k.startswith(prefix)]
        for k in keys:
            del self._data[k]
        self._deletes += len(keys)
        return len(keys)

    def clear(self) -> None:
        self._data.clear()

    def get_stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "backend": "memory",
            "size": len(self._data),
            "hits": self._hits,
            "misses": self._misses,
            "sets": self._sets,
            "deletes": self._deletes,
            "hit_rate_percent": round(self._hits * 100 / total, 2) if total else 0.0,
        }


__all__ = ["InMemoryCache"]

# Fin del archivo backend/app/shared/cache/memory_cache.py
