# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/services/webhooks/webhook_events.py

Normalización de eventos de webhook a una forma neutral al proveedor.

Cada evento se clasifica en una categoría (completion, failure, refund,
dispute, ignored) y se extraen las referencias para localizar el Payment:
- order_id: nuestro ORD_... (metadata / notes / reference / custom_id)
- transaction_ids: ids del proveedor (intent, pago, captura)

Para auditoría se guarda un extracto mínimo (campos core + hash SHA-256 del
body crudo); nunca el payload completo en metadata.

Autor: CourseMart
Fecha: 2026-03-11
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from app.modules.payments.adapters.method_mapping import (
    map_paypal_method,
    map_razorpay_method,
    map_stripe_method,
)
from app.modules.payments.enums import PaymentGateway, PaymentMethod
from app.modules.payments.utils.datetime_helpers import to_iso8601, utcnow

COMPLETION = "completion"
FAILURE = "failure"
REFUND = "refund"
DISPUTE = "dispute"
IGNORED = "ignored"

EVENT_CATEGORIES: Dict[str, str] = {
    # completion
    "payment_intent.succeeded": COMPLETION,
    "checkout.session.completed": COMPLETION,
    "payment.captured": COMPLETION,
    "order.paid": COMPLETION,
    "PAYMENT.CAPTURE.COMPLETED": COMPLETION,
    # failure
    "payment_intent.payment_failed": FAILURE,
    "payment.failed": FAILURE,
    "PAYMENT.CAPTURE.DENIED": FAILURE,
    # refund
    "refund.processed": REFUND,
    "refund.created": REFUND,
    "charge.refunded": REFUND,
    # dispute
    "charge.dispute.created": DISPUTE,
    "payment.dispute.created": DISPUTE,
    "CUSTOMER.DISPUTE.CREATED": DISPUTE,
}

# Rutas (notación de punto) por proveedor; se usa el primer valor presente.
ORDER_ID_PATHS: Dict[PaymentGateway, list[str]] = {
    PaymentGateway.STRIPE: [
        "data.object.metadata.orderId",
        "data.object.client_reference_id",
    ],
    PaymentGateway.RAZORPAY: [
        "payload.payment.entity.notes.orderId",
        "payload.order.entity.notes.orderId",
        "payload.order.entity.receipt",
        "payload.refund.entity.notes.orderId",
    ],
    PaymentGateway.PAYPAL: [
        "resource.custom_id",
        "resource.purchase_units.0.custom_id",
        "resource.purchase_units.0.reference_id",
    ],
}

TRANSACTION_ID_PATHS: Dict[PaymentGateway, list[str]] = {
    PaymentGateway.STRIPE: [
        "data.object.payment_intent",
        "data.object.id",
        "data.object.charge",
    ],
    PaymentGateway.RAZORPAY: [
        "payload.payment.entity.id",
        "payload.refund.entity.payment_id",
        "payload.payment.entity.order_id",
        "payload.order.entity.id",
        "payload.dispute.entity.payment_id",
    ],
    PaymentGateway.PAYPAL: [
        "resource.id",
        "resource.supplementary_data.related_ids.order_id",
        "resource.disputed_transactions.0.seller_transaction_id",
    ],
}

OBJECT_PATHS: Dict[PaymentGateway, list[str]] = {
    PaymentGateway.STRIPE: ["data.object"],
    PaymentGateway.RAZORPAY: [
        "payload.refund.entity",
        "payload.dispute.entity",
        "payload.payment.entity",
        "payload.order.entity",
    ],
    PaymentGateway.PAYPAL: ["resource"],
}


def compute_payload_hash(raw_payload: bytes | str | dict) -> str:
    """SHA-256 del payload original para trazabilidad."""
    if isinstance(raw_payload, dict):
        payload_bytes = json.dumps(raw_payload, sort_keys=True).encode("utf-8")
    elif isinstance(raw_payload, str):
        payload_bytes = raw_payload.encode("utf-8")
    else:
        payload_bytes = raw_payload
    return hashlib.sha256(payload_bytes).hexdigest()


def get_nested_value(data: Any, path: str) -> Optional[Any]:
    """Valor anidado por notación de punto ("data.object.id", "items.0.id")."""
    current = data
    for key in path.split("."):
        if isinstance(current, dict):
            current = current.get(key)
        elif isinstance(current, list):
            try:
                idx = int(key)
            except ValueError:
                return None
            current = current[idx] if 0 <= idx < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def _first(data: Any, paths: list[str]) -> Optional[Any]:
    for path in paths:
        value = get_nested_value(data, path)
        if value not in (None, ""):
            return value
    return None


@dataclass
class WebhookEvent:
    gateway: PaymentGateway
    event_type: str
    category: str
    event_id: Optional[str] = None
    order_id: Optional[str] = None
    transaction_ids: list[str] = field(default_factory=list)
    object: Dict[str, Any] = field(default_factory=dict)
    status: Optional[str] = None
    payload_hash: Optional[str] = None

    @property
    def primary_transaction_id(self) -> Optional[str]:
        return self.transaction_ids[0] if self.transaction_ids else None

    def method(self) -> Optional[PaymentMethod]:
        """Método normalizado si el objeto del evento lo informa."""
        if self.gateway == PaymentGateway.RAZORPAY and self.object.get("method"):
            return map_razorpay_method(self.object)
        if self.gateway == PaymentGateway.STRIPE and self.object.get("payment_method_types"):
            return map_stripe_method(self.object)
        if self.gateway == PaymentGateway.PAYPAL:
            return map_paypal_method(self.object)
        return None

    def audit_entry(self) -> Dict[str, Any]:
        """Extracto mínimo para metadata (disputas, confirmaciones de reembolso)."""
        entry: Dict[str, Any] = {
            "gateway": self.gateway.value,
            "event": self.event_type,
            "eventId": self.event_id,
            "objectId": self.object.get("id"),
            "status": self.status,
            "amount": self.object.get("amount"),
            "reason": self.object.get("reason") or self.object.get("reason_code"),
            "receivedAt": to_iso8601(utcnow()),
        }
        if self.payload_hash:
            entry["payloadHash"] = self.payload_hash
        return {k: v for k, v in entry.items() if v is not None}


def parse_webhook_event(
    gateway: PaymentGateway,
    payload: Dict[str, Any],
    raw_body: bytes | None = None,
) -> WebhookEvent:
    """Clasifica el evento y extrae referencias; nunca levanta por forma inesperada."""
    event_type = str(payload.get("type") or payload.get("event") or payload.get("event_type") or "")
    category = EVENT_CATEGORIES.get(event_type, IGNORED)

    obj = _first(payload, OBJECT_PATHS.get(gateway, []))
    if not isinstance(obj, dict):
        obj = {}

    seen: list[str] = []
    for path in TRANSACTION_ID_PATHS.get(gateway, []):
        value = get_nested_value(payload, path)
        if isinstance(value, str) and value and value not in seen:
            seen.append(value)

    order_id = _first(payload, ORDER_ID_PATHS.get(gateway, []))
    status = obj.get("status") or obj.get("payment_status")

    return WebhookEvent(
        gateway=gateway,
        event_type=event_type,
        category=category,
        event_id=payload.get("id") if isinstance(payload.get("id"), str) else None,
        order_id=str(order_id) if order_id else None,
        transaction_ids=seen,
        object=obj,
        status=str(status) if status else None,
        payload_hash=compute_payload_hash(raw_body) if raw_body is not None else None,
    )


__all__ = [
    "COMPLETION",
    "DISPUTE",
    "EVENT_CATEGORIES",
    "FAILURE",
    "IGNORED",
    "REFUND",
    "WebhookEvent",
    "compute_payload_hash",
    "get_nested_value",
    "parse_webhook_event",
]

# Fin del archivo backend/app/modules/payments/services/webhooks/webhook_events.py
