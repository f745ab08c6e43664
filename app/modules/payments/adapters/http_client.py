# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/http_client.py

Cliente HTTP por pasarela (httpx.AsyncClient con keep-alive).

- Timeout explícito por operación (create 20s, verify 15s, fetch 15s,
  refund 30s; connect 5s).
- Reintento limitado (gateway_max_transient_retries) solo para errores
  transitorios {429, 502, 503, 504}, con backoff mayor para 429.
- Errores de transporte/timeout: se reintentan solo si la llamada es
  idempotente (GET o POST con clave de idempotencia).
- Traducción a errores de dominio:
      transporte / timeout / 5xx / transitorios agotados → GatewayUnavailable
      4xx                                                → GatewayRejected
  El texto del proveedor va a logs y a `details`, nunca al mensaje.

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from app.shared.config.settings_payments import PaymentsSettings
from app.modules.payments.errors import GatewayRejected, GatewayUnavailable

logger = logging.getLogger(__name__)

# Códigos de error HTTP que se consideran transitorios (retry permitido)
TRANSIENT_HTTP_ERRORS = frozenset({429, 502, 503, 504})

RETRY_BACKOFF_BASE = 0.5
RETRY_BACKOFF_429 = 2.0

HTTP_LIMITS = httpx.Limits(
    max_keepalive_connections=20,
    max_connections=50,
    keepalive_expiry=30.0,
)

OPERATIONS = ("create", "verify", "fetch", "refund")


def build_timeouts(settings: PaymentsSettings) -> dict[str, httpx.Timeout]:
    connect = settings.gateway_connect_timeout_seconds
    return {
        "create": httpx.Timeout(settings.gateway_create_timeout_seconds, connect=connect),
        "verify": httpx.Timeout(settings.gateway_verify_timeout_seconds, connect=connect),
        "fetch": httpx.Timeout(settings.gateway_fetch_timeout_seconds, connect=connect),
        "refund": httpx.Timeout(settings.gateway_refund_timeout_seconds, connect=connect),
    }


def _truncate(text: str, limit: int = 500) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class GatewayHttpClient:
    """Cliente singleton por pasarela; se cierra en el shutdown (aclose)."""

    def __init__(
        self,
        name: str,
        settings: PaymentsSettings,
        *,
        base_url: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_base: float = RETRY_BACKOFF_BASE,
        backoff_429: float = RETRY_BACKOFF_429,
    ) -> None:
        self.name = name
        self.max_retries = max(0, settings.gateway_max_transient_retries)
        self.timeouts = build_timeouts(settings)
        self.backoff_base = backoff_base
        self.backoff_429 = backoff_429
        self._base_url = base_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Crea el cliente en el primer uso (las pasarelas sin tráfico no abren pool)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                limits=HTTP_LIMITS,
                transport=self._transport,
                timeout=self.timeouts["fetch"],
            )
        return self._client

    def _backoff(self, status_code: Optional[int], attempt: int) -> float:
        base = self.backoff_429 if status_code == 429 else self.backoff_base
        return base * (2 ** attempt)

    async def request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        idempotent: Optional[bool] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Ejecuta la llamada con timeout de `operation` y devuelve la respuesta 2xx.

        Raises:
            GatewayUnavailable: red, timeout, 5xx o transitorios agotados
            GatewayRejected: 4xx (no transitorio)
        """
        if operation not in self.timeouts:
            raise ValueError(f"operation desconocida: {operation}")
        if idempotent is None:
            idempotent = method.upper() == "GET"

        timeout = self.timeouts[operation]
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            try:
                response = await self._get_client().request(method, url, timeout=timeout, **kwargs)
            except httpx.TransportError as exc:
                if idempotent and attempt < attempts - 1:
                    backoff = self._backoff(None, attempt)
                    logger.warning(
                        "%s %s %s: error de transporte (%s), reintentando en %.1fs",
                        self.name, operation, url, type(exc).__name__, backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                logger.error("%s %s %s: error de transporte - %s", self.name, operation, url, exc)
                raise GatewayUnavailable(
                    details={
                        "gateway": self.name,
                        "operation": operation,
                        "error": type(exc).__name__,
                    }
                ) from exc

            status_code = response.status_code

            if status_code in TRANSIENT_HTTP_ERRORS and attempt < attempts - 1:
                backoff = self._backoff(status_code, attempt)
                logger.warning(
                    "%s %s %s: error transitorio %s, reintentando en %.1fs (intento %s/%s)",
                    self.name, operation, url, status_code, backoff, attempt + 1, attempts,
                )
                await asyncio.sleep(backoff)
                continue

            if status_code >= 500 or status_code in TRANSIENT_HTTP_ERRORS:
                logger.error(
                    "%s %s %s: %s - %s",
                    self.name, operation, url, status_code, _truncate(response.text, 200),
                )
                raise GatewayUnavailable(
                    details={
                        "gateway": self.name,
                        "operation": operation,
                        "status": status_code,
                        "provider_response": _truncate(response.text),
                    }
                )

            if status_code >= 400:
                logger.warning(
                    "%s %s %s: rechazado %s - %s",
                    self.name, operation, url, status_code, _truncate(response.text, 200),
                )
                raise GatewayRejected(
                    details={
                        "gateway": self.name,
                        "operation": operation,
                        "status": status_code,
                        "provider_response": _truncate(response.text),
                    }
                )

            if attempt > 0:
                logger.info("%s %s: éxito tras %s intentos", self.name, operation, attempt + 1)
            return response

        # range() siempre retorna o lanza dentro del ciclo
        raise GatewayUnavailable(details={"gateway": self.name, "operation": operation})

    async def request_json(self, method: str, url: str, *, operation: str, **kwargs: Any) -> dict[str, Any]:
        response = await self.request(method, url, operation=operation, **kwargs)
        try:
            data = response.json()
        except ValueError as exc:
            raise GatewayUnavailable(
                details={"gateway": self.name, "operation": operation, "error": "invalid_json"}
            ) from exc
        return data if isinstance(data, dict) else {"data": data}

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["GatewayHttpClient", "TRANSIENT_HTTP_ERRORS", "build_timeouts"]

# Fin del archivo backend/app/modules/payments/adapters/http_client.py
