# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_base.py

Configuración base de la aplicación (Pydantic v2) para CourseMart.
- Esta clase NO instancia singletons; eso lo hace config_loader.get_settings().
- Las variables de pagos viven en settings_payments.py.

Autor: CourseMart
Fecha: 2026-03-02
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="CourseMart", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos
    # =========================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./coursemart.db",
        validation_alias="DATABASE_URL",
    )
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_create_all: bool = Field(default=False, validation_alias="DB_CREATE_ALL")

    # =========================
    # Redis (sesiones de checkout / invalidación de caché)
    # =========================
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")

    # =========================
    # Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["plain", "pretty", "json"] = Field(
        default="plain", validation_alias="LOG_FORMAT"
    )

    # =========================
    # URLs públicas / CORS
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")
    frontend_url: str = Field(default="http://localhost:5173", validation_alias="FRONTEND_URL")
    backend_url: str = Field(default="http://localhost:8000", validation_alias="BACKEND_URL")

    @field_validator("database_url", mode="before")
    @classmethod
    def _normalize_database_url(cls, v: Optional[str]) -> str:
        """Normaliza esquemas postgres:// a postgresql+asyncpg://."""
        if not v:
            return "sqlite+aiosqlite:///./coursemart.db"
        if v.startswith("postgres://"):
            return "postgresql+asyncpg://" + v[len("postgres://"):]
        if v.startswith("postgresql://"):
            return "postgresql+asyncpg://" + v[len("postgresql://"):]
        return v

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.python_env == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName"]

# Fin del archivo backend/app/shared/config/settings_base.py
