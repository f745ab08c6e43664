# -*- coding: utf-8 -*-
"""
backend/app/shared/redis/client.py

Conexión redis.asyncio compartida por el proceso (la usa RedisCache para
sesiones checkout:{orderId} e invalidación de carrito/inscripciones).

- Se conecta en el primer uso; REDIS_URL vacío deja la conexión en None.
- Un fallo de conexión se recuerda: no se reintenta en cada request.
  RedisCache decide qué hacer con None (lecturas vacías, escrituras con error).

Autor: CourseMart
Fecha: 2026-03-02
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.shared.config import get_settings

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_SECONDS = 2
SOCKET_TIMEOUT_SECONDS = 2


class RedisConnection:
    """Cliente perezoso con un solo intento de conexión por ciclo de vida."""

    def __init__(self, url: Optional[str] = None):
        self.url = url if url is not None else get_settings().redis_url
        self._client: Optional[aioredis.Redis] = None
        self._state: Optional[bool] = None  # None: sin intentar
        self._lock = asyncio.Lock()

    @property
    def available(self) -> bool:
        return self._state is True

    async def client(self) -> Optional[aioredis.Redis]:
        if self._state is not None:
            return self._client
        if not self.url:
            self._state = False
            return None

        async with self._lock:
            if self._state is not None:
                return self._client
            candidate = aioredis.from_url(
                self.url,
                decode_responses=True,
                socket_connect_timeout=CONNECT_TIMEOUT_SECONDS,
                socket_timeout=SOCKET_TIMEOUT_SECONDS,
            )
            try:
                await candidate.ping()
            except (RedisError, OSError) as exc:
                logger.warning("redis_unavailable url_set=%s error=%s", bool(self.url), exc)
                self._state = False
                await candidate.aclose()
                return None
            self._client = candidate
            self._state = True
            logger.info("redis_connected")
            return self._client

    async def close(self) -> None:
        client, self._client, self._state = self._client, None, None
        if client is None:
            return
        try:
            await client.aclose()
        except (RedisError, OSError) as exc:
            logger.warning("redis_close_failed: %s", exc)


_connection: Optional[RedisConnection] = None


def get_redis_connection() -> RedisConnection:
    global _connection
    if _connection is None:
        _connection = RedisConnection()
    return _connection


async def close_redis_connection() -> None:
    """Shutdown: cierra la conexión compartida si llegó a abrirse."""
    global _connection
    if _connection is not None:
        await _connection.close()
        _connection = None


__all__ = ["RedisConnection", "close_redis_connection", "get_redis_connection"]

# Fin del archivo backend/app/shared/redis/client.py
