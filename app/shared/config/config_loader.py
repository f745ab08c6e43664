# -*- coding: utf-8 -*-
"""
backend/app/shared/config/config_loader.py

Carga única (cacheada) de la configuración de la aplicación.

Autor: CourseMart
Fecha: 2026-03-02
"""

from __future__ import annotations

import logging
from functools import lru_cache

from .settings_base import BaseAppSettings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> BaseAppSettings:
    """Instancia BaseAppSettings una sola vez por proceso."""
    settings = BaseAppSettings()
    logger.debug(
        "[config] settings cargados env=%s db=%s redis=%s",
        settings.python_env,
        settings.database_url.split("@")[-1],
        bool(settings.redis_url),
    )
    return settings


def reset_settings_cache() -> None:
    """Limpia el cache de settings (útil en tests con monkeypatch de env)."""
    get_settings.cache_clear()


__all__ = ["get_settings", "reset_settings_cache"]

# Fin del archivo backend/app/shared/config/config_loader.py
