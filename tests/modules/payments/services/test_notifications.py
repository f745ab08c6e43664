# -*- coding: utf-8 -*-
"""
backend/tests/modules/payments/services/test_notifications.py

Despacho de notificaciones in-app y envoltorios best-effort de email.

Autor: CourseMart
Fecha: 2026-03-17
"""
from decimal import Decimal

from sqlalchemy import select

from app.shared.integrations.email_sender import (
    StubEmailSender,
    safe_send_purchase_confirmation,
    safe_send_refund_processed,
)
from app.shared.services.notifications import NotificationType, safe_notify
from app.modules.payments.models.cart_models import Notification
from app.modules.payments.services import DatabaseNotificationDispatcher


class _ExplodingNotifier:
    async def notify(self, *args, **kwargs):
        raise RuntimeError("notifications down")


class _ExplodingEmailSender:
    async def send_purchase_confirmation(self, **kwargs):
        raise ConnectionError("smtp down")

    async def send_refund_processed(self, **kwargs):
        raise ConnectionError("smtp down")


class TestDatabaseNotificationDispatcher:
    async def test_persiste_notificacion_con_payload_serializable(self, session_factory):
        dispatcher = DatabaseNotificationDispatcher(session_factory)

        await dispatcher.notify(
            7,
            NotificationType.PAYMENT_RECEIVED,
            "Payment Successful",
            "Your payment has been processed",
            {"paymentId": 3, "amount": Decimal("1180.00")},
            priority="HIGH",
        )

        async with session_factory() as session:
            rows = (await session.execute(select(Notification))).scalars().all()

        assert len(rows) == 1
        row = rows[0]
        assert row.user_id == 7
        assert row.type == "PAYMENT_RECEIVED"
        assert row.priority == "HIGH"
        assert row.is_read is False
        # Decimal se guarda como texto
        assert row.data == {"paymentId": 3, "amount": "1180.00"}

    async def test_payload_opcional(self, session_factory):
        dispatcher = DatabaseNotificationDispatcher(session_factory)
        await dispatcher.notify(1, NotificationType.NEW_ENROLLMENT, "New", "msg")

        async with session_factory() as session:
            row = (await session.execute(select(Notification))).scalars().one()
        assert row.data is None
        assert row.priority == "NORMAL"


class TestBestEffortWrappers:
    async def test_safe_notify_no_propaga(self):
        ok = await safe_notify(
            _ExplodingNotifier(), 1, NotificationType.PAYMENT_FAILED, "t", "m"
        )
        assert ok is False

    async def test_safe_notify_ok(self, notifier):
        ok = await safe_notify(notifier, 5, NotificationType.REFUND_REQUESTED, "t", "m")
        assert ok is True
        assert notifier.types_for(5) == ["REFUND_REQUESTED"]

    async def test_email_fallido_devuelve_false(self):
        sender = _ExplodingEmailSender()
        assert await safe_send_purchase_confirmation(sender, email="a@example.com") is False
        assert await safe_send_refund_processed(sender, email="a@example.com") is False

    async def test_stub_email_sender_solo_loguea(self, caplog):
        caplog.set_level("INFO", logger="app.shared.integrations.email_sender")
        ok = await safe_send_purchase_confirmation(
            StubEmailSender(),
            email="asha@example.com",
            first_name="Asha",
            amount=Decimal("1180.00"),
            currency="INR",
            transaction_id="pay_1",
            course_name="Python from Zero",
            course_url="/courses/python-from-zero",
        )
        assert ok is True
        assert "asha@example.com" in caplog.text
