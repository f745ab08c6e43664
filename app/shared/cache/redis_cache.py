# -*- coding: utf-8 -*-
"""
backend/app/shared/cache/redis_cache.py

Implementación de CacheBackend sobre redis.asyncio.

- Valores serializados como JSON (Decimal/datetime → str).
- Lecturas y borrados fail-open; escrituras levantan CacheUnavailableError.

Autor: CourseMart
Fecha: 2026-03-02
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from redis.exceptions import RedisError

from app.shared.redis.client import RedisConnection, get_redis_connection
from .cache_backend import CacheBackend, CacheUnavailableError

logger = logging.getLogger(__name__)


class RedisCache(CacheBackend):

    def __init__(
        self,
        connection: Optional[RedisConnection] = None,
        default_ttl: Optional[int] = None,
    ):
        self._connection = connection or get_redis_connection()
        self._default_ttl = default_ttl
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    @property
    def default_ttl(self) -> Optional[int]:
        return self._default_ttl

    async def get(self, key: str) -> Optional[Any]:
        client = await self._connection.client()
        if client is None:
            self._misses += 1
            return None
        try:
            raw = await client.get(key)
        except RedisError as exc:
            logger.warning("RedisCache.get failed key=%s: %s", key, exc)
            self._misses += 1
            return None
        if raw is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(raw)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        client = await self._connection.client()
        if client is None:
            raise CacheUnavailableError("Redis no disponible")
        effective = self._default_ttl if ttl is None else ttl
        try:
            await client.set(key, json.dumps(value, default=str), ex=effective or None)
        except RedisError as exc:
            raise CacheUnavailableError(str(exc)) from exc
        self._sets += 1

    async def delete(self, key: str) -> bool:
        client = await self._connection.client()
        if client is None:
            return False
        try:
            removed = await client.delete(key)
        except RedisError as exc:
            logger.warning("RedisCache.delete failed key=%s: %s", key, exc)
            return False
        self._deletes += int(removed)
        return bool(removed)

    async def delete_prefix(self, prefix: str) -> int:
        client = await self._connection.client()
        if client is None:
            return 0
        removed = 0
        try:
            async for key in client.scan_iter(match=f"{prefix}*", count=200):
                removed += int(await client.delete(key))
        except RedisError as exc:
            logger.warning("RedisCache.delete_prefix failed prefix=%s: %s", prefix, exc)
        self._deletes += removed
        return removed

    def get_stats(self) -> dict:
        return {
            "backend": "redis",
            "connected": self._connection.available,
            "hits": self._hits,
            "misses": self._misses,
            "sets": self._sets,
            "deletes": self._deletes,
        }


__all__ = ["RedisCache"]

# Fin del archivo backend/app/shared/cache/redis_cache.py
