# -*- coding: utf-8 -*-
"""
backend/tests/shared/test_memory_cache.py

InMemoryCache: TTL, copias defensivas de valores y borrado por prefijo.

Autor: CourseMart
Fecha: 2026-03-19
"""
from types import SimpleNamespace

from app.shared.cache import InMemoryCache
from app.shared.cache import memory_cache


class TestInMemoryCache:
    async def test_ttl_expiry(self, monkeypatch):
        clock = {"now": 1000.0}
        monkeypatch.setattr(memory_cache, "time", SimpleNamespace(monotonic=lambda: clock["now"]))
        cache = InMemoryCache()

        await cache.set("checkout:ORD_1", {"paymentId": 1}, ttl=60)
        assert await cache.get("checkout:ORD_1") == {"paymentId": 1}

        clock["now"] += 61
        assert await cache.get("checkout:ORD_1") is None

    async def test_values_are_copied(self):
        cache = InMemoryCache()
        value = {"courseIds": [1]}
        await cache.set("k", value)

        value["courseIds"].append(2)
        fetched = await cache.get("k")
        fetched["courseIds"].append(3)

        assert await cache.get("k") == {"courseIds": [1]}

    async def test_delete_and_delete_prefix(self):
        cache = InMemoryCache()
        await cache.set("cart:1", [1])
        await cache.set("cart_totals:1", {})
        await cache.set("course:5", {})

        assert await cache.delete("course:5") is True
        assert await cache.delete("course:5") is False
        assert await cache.delete_prefix("cart") == 2
        assert cache.get_stats()["size"] == 0

# Fin del archivo backend/tests/shared/test_memory_cache.py
