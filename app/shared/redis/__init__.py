# -*- coding: utf-8 -*-
"""
backend/app/shared/redis/__init__.py

Conexión Redis compartida (backend de RedisCache).
"""

from .client import RedisConnection, close_redis_connection, get_redis_connection

__all__ = ["RedisConnection", "close_redis_connection", "get_redis_connection"]
