# -*- coding: utf-8 -*-
"""
backend/app/shared/config/logging_config.py

Configuración centralizada de logging para CourseMart.
Formatos: plain (default), pretty (desarrollo, con línea de origen) y
json (producción, python-json-logger con campos level/logger).

Autor: CourseMart
Fecha: 2026-03-02
"""

import importlib
import logging.config
from typing import Literal

# Librerías ruidosas que se fijan en WARNING salvo que se pida DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")


def _json_formatter_path() -> str:
    # python-json-logger v3 movió jsonlogger -> json
    try:
        importlib.import_module("pythonjsonlogger.json")
        return "pythonjsonlogger.json.JsonFormatter"
    except ImportError:  # pragma: no cover
        return "pythonjsonlogger.jsonlogger.JsonFormatter"


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain",
) -> None:
    """
    Configura el sistema de logging de la aplicación.

    Args:
        level: Nivel raíz (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Formato de salida (plain, pretty, json)

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json")
    """
    level = level.upper()  # type: ignore[assignment]
    formatter_name = {"json": "json", "pretty": "pretty"}.get(fmt, "default")

    formatters = {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "pretty": {
            "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            "datefmt": "%H:%M:%S",
        },
        "json": {
            "()": _json_formatter_path(),
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            "rename_fields": {"levelname": "level", "name": "logger"},
        },
    }

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": formatter_name,
            "stream": "ext://sys.stdout",
        }
    }

    noisy_level = "DEBUG" if level == "DEBUG" else "WARNING"
    loggers = {name: {"level": noisy_level} for name in _NOISY_LOGGERS}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "loggers": loggers,
            "root": {"handlers": ["console"], "level": level},
        }
    )


__all__ = ["setup_logging"]
# Fin del archivo backend/app/shared/config/logging_config.py
