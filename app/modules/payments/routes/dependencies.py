# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/routes/dependencies.py

Dependencias FastAPI del router de pagos.

AUTH (stub, fuera de alcance del módulo):
- `X-User-Id: <id>` o `Authorization: Bearer user:<id>` → user_id
- `X-User-Role: admin` habilita las rutas de administración
Ambas dependencias se sobreescriben en tests con app.dependency_overrides.

Autor: CourseMart
Fecha: 2026-03-15
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from app.modules.payments.facades.context import PaymentsContext

_BEARER_PREFIX = "Bearer user:"


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def resolve_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> int:
    raw = x_user_id
    if raw is None and authorization and authorization.startswith(_BEARER_PREFIX):
        raw = authorization[len(_BEARER_PREFIX):]
    if raw is None:
        raise _unauthorized("Authentication required")
    try:
        user_id = int(raw.strip())
    except ValueError:
        raise _unauthorized("Invalid user identity") from None
    if user_id <= 0:
        raise _unauthorized("Invalid user identity")
    return user_id


async def require_admin(
    user_id: int = Depends(resolve_current_user_id),
    x_user_role: Optional[str] = Header(default=None, alias="X-User-Role"),
) -> int:
    if (x_user_role or "").strip().lower() != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user_id


def get_payments_context(request: Request) -> PaymentsContext:
    ctx = getattr(request.app.state, "payments", None)
    if ctx is None:
        raise RuntimeError("PaymentsContext no inicializado (lifespan no ejecutado)")
    return ctx


__all__ = ["get_payments_context", "require_admin", "resolve_current_user_id"]

# Fin del archivo backend/app/modules/payments/routes/dependencies.py
