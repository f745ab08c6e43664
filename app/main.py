# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada principal del backend CourseMart.

Ajustes clave:
- .env cargado antes de instanciar settings (override solo fuera de producción)
- Logging centralizado (plain / json vía python-json-logger)
- Lifespan: registry de pasarelas, caché, cola diferida de fulfillment y
  PaymentsContext en app.state; cierre ordenado en shutdown
- Middlewares: JSONExceptionMiddleware + RequestLoggingMiddleware + CORS
- Health principal en /health

Autor: CourseMart
Fecha: 2026-03-16
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

# ---------------------------------------------------------------------------
# Cargar .env ANTES de cualquier import que use settings
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_PYTHON_ENV = os.getenv("PYTHON_ENV", "development").strip().lower()
load_dotenv(dotenv_path=_ENV_PATH, override=_PYTHON_ENV != "production")

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import anyio
import uvicorn

from app.shared.cache import get_cache
from app.shared.config import get_payments_settings, get_settings, setup_logging
from app.shared.database.database import (
    SessionLocal,
    check_database_health,
    create_all,
)
from app.shared.integrations.email_sender import get_email_sender
from app.shared.middleware import JSONExceptionMiddleware, RequestLoggingMiddleware
from app.shared.redis import close_redis_connection
from app.shared.tasks import DeferredTaskQueue
from app.shared.utils.json_response import UTF8JSONResponse, success_envelope
from app.modules.payments.adapters.registry import GatewayRegistry
from app.modules.payments.facades import PaymentsContext
from app.modules.payments.routes import register_exception_handlers, router as payments_router
from app.modules.payments.services import DatabaseNotificationDispatcher

_settings = get_settings()
setup_logging(_settings.log_level, _settings.log_format)
logger = logging.getLogger(__name__)

logger.info("[dotenv] Loaded %s (PYTHON_ENV=%s)", _ENV_PATH, _PYTHON_ENV)


def build_payments_context() -> PaymentsContext:
    """Dependencias de proceso del módulo de pagos (una vez por app)."""
    payments_settings = get_payments_settings()
    return PaymentsContext(
        settings=payments_settings,
        registry=GatewayRegistry.build(payments_settings),
        cache=get_cache(),
        queue=DeferredTaskQueue(
            workers=payments_settings.fulfillment_workers,
            max_attempts=payments_settings.fulfillment_max_attempts,
            backoff_seconds=payments_settings.fulfillment_retry_backoff_seconds,
            inline=payments_settings.fulfillment_inline,
        ),
        notifier=DatabaseNotificationDispatcher(SessionLocal),
        email_sender=get_email_sender(),
        session_factory=SessionLocal,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ────────── STARTUP ──────────
    # Un contexto ya presente (tests) se respeta; solo se cierra lo propio.
    ctx = getattr(app.state, "payments", None)
    owns_context = ctx is None
    if owns_context:
        ctx = build_payments_context()
        app.state.payments = ctx

    if get_settings().db_create_all:
        await create_all()
        logger.info("🗄️ Tablas creadas (DB_CREATE_ALL=true)")

    await ctx.queue.start()
    logger.info(
        "🟢 Backend de CourseMart iniciado. Pasarelas: %s",
        [g.value for g in ctx.registry.available()],
    )
    try:
        yield
    finally:
        # ────────── SHUTDOWN ──────────
        logger.info("🔴 Iniciando shutdown ordenado...")
        with anyio.CancelScope(shield=True):
            await ctx.queue.stop()
            if ctx.queue.dead_jobs:
                logger.warning("Jobs de fulfillment sin completar: %s", ctx.queue.dead_jobs)
            if owns_context:
                await ctx.registry.aclose()
                app.state.payments = None
                await close_redis_connection()
        logger.info("🔴 Backend de CourseMart apagado.")


openapi_tags = [
    {"name": "payments:checkout", "description": "Checkout, verificación, reintento y cancelación"},
    {"name": "payments:history", "description": "Historial de compras y pasarelas"},
    {"name": "payments:refunds", "description": "Solicitudes y decisiones de reembolso"},
    {"name": "payments:webhooks", "description": "Webhooks de proveedores"},
]


def _configure_cors(app_instance: FastAPI) -> None:
    origins = get_settings().cors_origins or ["*"]
    wildcard = origins == ["*"]
    # "*" con allow_credentials=True es inválido en navegadores
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=600,
    )
    logger.info("🌐 CORS origins=%s credentials=%s", origins, not wildcard)


def create_app() -> FastAPI:
    settings = get_settings()
    app_instance = FastAPI(
        title=f"{settings.app_name} API",
        description="Checkout multi-pasarela, pagos y fulfillment de cursos",
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=openapi_tags,
        default_response_class=UTF8JSONResponse,
    )

    # El orden real de ejecución de middlewares es inverso al registro:
    # CORS se registra al final para ejecutarse primero.
    app_instance.add_middleware(RequestLoggingMiddleware)
    app_instance.add_middleware(JSONExceptionMiddleware)
    _configure_cors(app_instance)

    register_exception_handlers(app_instance)
    app_instance.include_router(payments_router)

    @app_instance.get("/health", tags=["health"])
    async def health():
        db_ok = await check_database_health()
        ctx = getattr(app_instance.state, "payments", None)
        gateways = [g.value for g in ctx.registry.available()] if ctx else []
        return success_envelope(
            {"status": "ok" if db_ok else "degraded", "database": db_ok, "gateways": gateways},
            message="Health check",
        )

    return app_instance


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=_settings.app_host,
        port=_settings.app_port,
        reload=_PYTHON_ENV == "development",
    )

# Fin del archivo backend/app/main.py
