# -*- coding: utf-8 -*-
"""
backend/app/modules/payments/adapters/payu_adapter.py

Adaptador PayU: form-post al hosted checkout con hash SHA-512 calculado en
el servidor. No hay llamada saliente al crear la orden.

    hash    = sha512(key|txnid|amount|productinfo|firstname|email|||||||||||salt)
    reverse = sha512(salt|status|||||||||||email|firstname|productinfo|amount|txnid|key)

Consulta y reembolso vía postservice (form=2):
    command=verify_payment, command=cancel_refund_transaction
    hash = sha512(key|command|var1|salt)

Autor: CourseMart
Fecha: 2026-03-09
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.modules.payments.adapters.base import (
    GatewayAdapter,
    GatewayOrder,
    OrderRequest,
    ProviderPaymentInfo,
    RefundInfo,
    VerificationEvidence,
)
from app.modules.payments.adapters.method_mapping import map_payu_method
from app.modules.payments.enums import PaymentGateway
from app.modules.payments.errors import GatewayRejected, GatewayUnavailable, RefundRejected
from app.modules.payments.services.checkout_session_store import CheckoutSession

logger = logging.getLogger(__name__)

# udf1..udf5 y cinco campos reservados vacíos
_EMPTY_UDFS = "|" * 11

DEFAULT_PRODUCT_INFO = "Course Purchase"


def _sha512(text: str) -> str:
    return hashlib.sha512(text.encode("utf-8")).hexdigest()


def format_payu_amount(amount: Decimal) -> str:
    return f"{Decimal(amount).quantize(Decimal('0.01'))}"


def payu_request_hash(
    *, key: str, txnid: str, amount: str, productinfo: str, firstname: str, email: str, salt: str
) -> str:
    return _sha512(f"{key}|{txnid}|{amount}|{productinfo}|{firstname}|{email}{_EMPTY_UDFS}{salt}")


def payu_response_hash(
    *,
    salt: str,
    status: str,
    email: str,
    firstname: str,
    productinfo: str,
    amount: str,
    txnid: str,
    key: str,
) -> str:
    return _sha512(
        f"{salt}|{status}{_EMPTY_UDFS}{email}|{firstname}|{productinfo}|{amount}|{txnid}|{key}"
    )


def generate_txnid() -> str:
    return f"TXN_{int(time.time() * 1000)}_{secrets.token_hex(5)[:9]}"


class PayUAdapter(GatewayAdapter):
    gateway = PaymentGateway.PAYU

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.payu_key and self.settings.payu_salt)

    def _credentials(self) -> tuple[str, str]:
        if not self.is_configured:
            raise GatewayUnavailable(details={"gateway": self.gateway.value, "reason": "not_configured"})
        return self.settings.payu_key, self.settings.payu_salt

    def public_config(self) -> dict:
        return {"key": self.settings.payu_key}

    async def create_order(self, order: OrderRequest) -> GatewayOrder:
        key, salt = self._credentials()
        frontend = self.settings.frontend_url.rstrip("/")

        txnid = generate_txnid()
        amount = format_payu_amount(order.amount)
        productinfo = order.description or DEFAULT_PRODUCT_INFO
        firstname = order.customer_name or "Customer"
        email = order.customer_email

        fields = {
            "key": key,
            "txnid": txnid,
            "amount": amount,
            "productinfo": productinfo,
            "firstname": firstname,
            "email": email,
            "phone": order.customer_phone or "",
            "surl": f"{frontend}/payment/success?order_id={order.order_id}",
            "furl": f"{frontend}/payment/failure?order_id={order.order_id}",
            "hash": payu_request_hash(
                key=key,
                txnid=txnid,
                amount=amount,
                productinfo=productinfo,
                firstname=firstname,
                email=email,
                salt=salt,
            ),
            "service_provider": "payu_paisa",
        }
        action = f"{self.settings.payu_base_url.rstrip('/')}/_payment"
        logger.info("payu_form_built order=%s txnid=%s", order.order_id, txnid)
        return GatewayOrder(
            external_id=txnid,
            form_payload={"action": action, "method": "POST", "fields": fields},
            raw={"txnid": txnid, "action": action},
        )

    async def verify_completion(
        self,
        evidence: VerificationEvidence,
        expected: CheckoutSession,
    ) -> bool:
        key, salt = self._credentials()

        txnid = evidence.payment_id
        if not txnid or not evidence.signature:
            return False
        if txnid != expected.gateway_order_id:
            logger.warning("payu_verify_txnid_mismatch order=%s", expected.order_id)
            return False

        status = (evidence.status or evidence.extra.get("status") or "").lower()
        if status != "success":
            return False

        extra = evidence.extra
        amount = str(extra.get("amount") or format_payu_amount(expected.final_amount))
        try:
            amount_matches = Decimal(amount) == Decimal(expected.final_amount)
        except InvalidOperation:
            amount_matches = False
        if not amount_matches:
            logger.warning("payu_verify_amount_mismatch order=%s", expected.order_id)
            return False

        computed = payu_response_hash(
            salt=salt,
            status=status,
            email=str(extra.get("email", "")),
            firstname=str(extra.get("firstname", "")),
            productinfo=str(extra.get("productinfo", DEFAULT_PRODUCT_INFO)),
            amount=amount,
            txnid=txnid,
            key=key,
        )
        return hmac.compare_digest(computed, evidence.signature.lower())

    async def _postservice(self, command: str, var1: str, *, operation: str, **extra_vars: str) -> dict[str, Any]:
        key, salt = self._credentials()
        form = {
            "key": key,
            "command": command,
            "var1": var1,
            "hash": _sha512(f"{key}|{command}|{var1}|{salt}"),
            **extra_vars,
        }
        return await self.http.request_json(
            "POST",
            self.settings.payu_info_url,
            operation=operation,
            idempotent=command == "verify_payment",
            data=form,
        )

    async def fetch_settled_details(self, external_id: str) -> ProviderPaymentInfo:
        data = await self._postservice("verify_payment", external_id, operation="fetch")
        details = (data.get("transaction_details") or {}).get(external_id) or {}
        amount = details.get("amt") or details.get("amount")
        return ProviderPaymentInfo(
            external_id=str(details.get("mihpayid") or external_id),
            status=str(details.get("status", "")),
            amount=Decimal(str(amount)).quantize(Decimal("0.01")) if amount else None,
            method=map_payu_method(details),
            raw=data,
        )

    async def create_refund(
        self,
        external_id: str,
        amount: Decimal,
        note: str,
        *,
        idempotency_key: Optional[str] = None,
    ) -> RefundInfo:
        # PayU rechaza un token repetido para la misma transacción
        token = idempotency_key or f"RFD_{int(time.time() * 1000)}_{secrets.token_hex(4)}"
        try:
            data = await self._postservice(
                "cancel_refund_transaction",
                external_id,
                operation="refund",
                var2=token,
                var3=format_payu_amount(amount),
            )
        except GatewayRejected as exc:
            raise RefundRejected(details=exc.details) from exc

        if str(data.get("status")) != "1":
            raise RefundRejected(
                details={"gateway": self.gateway.value, "provider_message": str(data.get("msg", ""))[:500]}
            )
        return RefundInfo(
            refund_id=str(data.get("request_id") or token),
            status="queued",
            amount=amount,
            raw=data,
        )


__all__ = [
    "PayUAdapter",
    "payu_request_hash",
    "payu_response_hash",
    "format_payu_amount",
]

# Fin del archivo backend/app/modules/payments/adapters/payu_adapter.py
