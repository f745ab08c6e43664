# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_payments.py

Configuración de checkout, pasarelas de pago y reembolsos para CourseMart.

Descripción:
    Centraliza credenciales por pasarela (Razorpay, Stripe, PayU, PayPal),
    constantes de negocio (impuesto, comisión, ventana de reembolso),
    timeouts por operación y parámetros del worker de fulfillment.

Autor: CourseMart
Fecha: 2026-03-02
"""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaymentsSettings(BaseSettings):
    """Configuración del sistema de pagos."""

    # =========================================================================
    # FEATURE FLAGS
    # =========================================================================

    payments_enabled: bool = Field(
        default=True,
        description="Habilita el checkout globalmente"
    )

    refunds_enabled: bool = Field(
        default=True,
        description="Habilita solicitudes y decisiones de reembolso"
    )

    # =========================================================================
    # RAZORPAY
    # =========================================================================

    razorpay_enabled: bool = Field(default=True, description="Habilita Razorpay")
    razorpay_key_id: Optional[str] = Field(default=None, description="Razorpay key id (rzp_...)")
    razorpay_key_secret: Optional[str] = Field(default=None, description="Razorpay key secret")
    razorpay_webhook_secret: Optional[str] = Field(
        default=None,
        description="Secreto de firma de webhooks Razorpay"
    )
    razorpay_base_url: str = Field(default="https://api.razorpay.com")

    # =========================================================================
    # STRIPE (intent y checkout session comparten credenciales)
    # =========================================================================

    stripe_enabled: bool = Field(default=True, description="Habilita Stripe (intent)")
    stripe_checkout_enabled: bool = Field(default=True, description="Habilita Stripe Checkout")
    stripe_secret_key: Optional[str] = Field(
        default=None,
        description="Stripe secret key (sk_live_... o sk_test_...)"
    )
    stripe_publishable_key: Optional[str] = Field(
        default=None,
        description="Stripe publishable key (se entrega al SDK del cliente)"
    )
    stripe_webhook_secret: Optional[str] = Field(
        default=None,
        description="Stripe webhook signing secret (whsec_...)"
    )
    stripe_webhook_tolerance_seconds: int = Field(
        default=300,
        description="Tolerancia del timestamp de firma Stripe (5 minutos)"
    )

    # =========================================================================
    # PAYU
    # =========================================================================

    payu_enabled: bool = Field(default=True, description="Habilita PayU")
    payu_key: Optional[str] = Field(default=None, description="PayU merchant key")
    payu_salt: Optional[str] = Field(default=None, description="PayU salt")
    payu_base_url: str = Field(
        default="https://test.payu.in",
        description="URL base del form-post de PayU"
    )
    payu_info_url: str = Field(
        default="https://test.payu.in/merchant/postservice.php?form=2",
        description="Endpoint de consulta/reembolso de PayU"
    )

    # =========================================================================
    # PAYPAL
    # =========================================================================

    paypal_enabled: bool = Field(default=True, description="Habilita PayPal")
    paypal_client_id: Optional[str] = Field(default=None, description="PayPal client ID")
    paypal_client_secret: Optional[str] = Field(default=None, description="PayPal client secret")
    paypal_base_url: str = Field(
        default="https://api-m.sandbox.paypal.com",
        description="URL base de la REST API (sandbox o live)"
    )
    paypal_webhook_id: Optional[str] = Field(
        default=None,
        description="PayPal webhook ID para validación de firmas"
    )
    paypal_inr_per_usd: Decimal = Field(
        default=Decimal("80"),
        description="Tipo de cambio INR→USD aplicado a órdenes PayPal"
    )

    # =========================================================================
    # REGLAS DE NEGOCIO
    # =========================================================================

    currency: str = Field(default="INR", description="Moneda de cobro")
    tax_rate: Decimal = Field(
        default=Decimal("0.18"),
        description="Impuesto plano sobre (subtotal - descuento)"
    )
    instructor_commission_rate: Decimal = Field(
        default=Decimal("0.70"),
        description="Parte del precio efectivo que recibe el instructor"
    )
    refund_window_days: int = Field(
        default=30,
        description="Días desde la creación del pago en que se admite solicitar reembolso"
    )
    checkout_session_ttl_seconds: int = Field(
        default=3600,
        description="TTL de la sesión de checkout en caché"
    )

    # =========================================================================
    # TIMEOUTS Y REINTENTOS (por operación de pasarela)
    # =========================================================================

    gateway_connect_timeout_seconds: float = Field(default=5.0)
    gateway_create_timeout_seconds: float = Field(default=20.0)
    gateway_verify_timeout_seconds: float = Field(default=15.0)
    gateway_fetch_timeout_seconds: float = Field(default=15.0)
    gateway_refund_timeout_seconds: float = Field(default=30.0)
    gateway_max_transient_retries: int = Field(
        default=1,
        description="Reintentos ante 429/502/503/504"
    )

    # =========================================================================
    # WEBHOOKS
    # =========================================================================

    allow_insecure_webhooks: bool = Field(
        default=False,
        description="Permite webhooks sin validación de firma (SOLO DESARROLLO)"
    )

    # =========================================================================
    # FULFILLMENT (cola diferida)
    # =========================================================================

    fulfillment_workers: int = Field(default=2)
    fulfillment_max_attempts: int = Field(default=5)
    fulfillment_retry_backoff_seconds: float = Field(default=1.0)
    fulfillment_inline: bool = Field(
        default=False,
        description="Ejecuta el fulfillment en línea (tests / scripts)"
    )

    # =========================================================================
    # URLS DE RETORNO
    # =========================================================================

    frontend_url: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="URL base del frontend para success/cancel"
    )

    @field_validator("frontend_url", mode="before")
    @classmethod
    def _load_frontend_url(cls, v: Optional[str]) -> str:
        """Fallback a FRONTEND_URL / FRONTEND_BASE_URL."""
        if v:
            return v
        return (
            os.getenv("FRONTEND_URL")
            or os.getenv("FRONTEND_BASE_URL")
            or "http://localhost:5173"
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton global
_payments_settings: Optional[PaymentsSettings] = None


def get_payments_settings() -> PaymentsSettings:
    """
    Obtiene la instancia global de configuración de pagos.

    Returns:
        PaymentsSettings: Configuración de pagos
    """
    global _payments_settings
    if _payments_settings is None:
        _payments_settings = PaymentsSettings()
    return _payments_settings


def reset_payments_settings() -> None:
    """Descarta el singleton (tests que cambian variables de entorno)."""
    global _payments_settings
    _payments_settings = None


__all__ = [
    "PaymentsSettings",
    "get_payments_settings",
    "reset_payments_settings",
]
# Fin del archivo backend/app/shared/config/settings_payments.py
