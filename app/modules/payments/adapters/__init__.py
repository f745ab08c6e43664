# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/__init__.py

Adaptadores para integraciones con pasarelas de pago externas.
"""

from .base import (
    GatewayAdapter,
    GatewayOrder,
    OrderRequest,
    ProviderPaymentInfo,
    RefundInfo,
    VerificationEvidence,
)
from .http_client import GatewayHttpClient
from .payu_adapter import PayUAdapter
from .paypal_adapter import PayPalAdapter
from .razorpay_adapter import RazorpayAdapter
from .registry import GatewayRegistry
from .stripe_adapters import StripeCheckoutAdapter, StripeIntentAdapter

__all__ = [
    "GatewayAdapter",
    "GatewayHttpClient",
    "GatewayOrder",
    "GatewayRegistry",
    "OrderRequest",
    "PayPalAdapter",
    "PayUAdapter",
    "ProviderPaymentInfo",
    "RazorpayAdapter",
    "RefundInfo",
    "StripeCheckoutAdapter",
    "StripeIntentAdapter",
    "VerificationEvidence",
]
