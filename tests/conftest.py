# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests para CourseMart.

- Variables de entorno fijadas ANTES de importar app.* (settings cacheados)
- Engine aiosqlite sobre archivo en tmp_path por test: sesiones concurrentes
  usan conexiones distintas y realmente se intercalan
- Razorpay contra un API falso vía httpx.MockTransport; Stripe con su SDK
  parcheado (FakeStripeSDK)
- Notificador y email que registran llamadas
- Cola de fulfillment en modo inline
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="coursemart-tests-")

# -----------------------------------------------------------------------------
# 0) Defaults de entorno para la suite
# -----------------------------------------------------------------------------
os.environ.update(
    {
        "PYTHON_ENV": "test",
        "DATABASE_URL": f"sqlite+aiosqlite:///{_TMP_DIR}/app.db",
        "LOG_LEVEL": "WARNING",
        "RAZORPAY_KEY_ID": "rzp_test_key",
        "RAZORPAY_KEY_SECRET": "rzp_test_secret",
        "RAZORPAY_WEBHOOK_SECRET": "rzp_webhook_secret",
        "STRIPE_SECRET_KEY": "sk_test_123",
        "STRIPE_PUBLISHABLE_KEY": "pk_test_123",
        "STRIPE_WEBHOOK_SECRET": "whsec_test_123",
        "PAYU_ENABLED": "false",
        "PAYPAL_ENABLED": "false",
        "ALLOW_INSECURE_WEBHOOKS": "false",
        "FULFILLMENT_INLINE": "true",
        "FULFILLMENT_RETRY_BACKOFF_SECONDS": "0",
        "GATEWAY_MAX_TRANSIENT_RETRIES": "1",
    }
)
os.environ.pop("REDIS_URL", None)

import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

import httpx
import stripe
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from app.shared.cache import InMemoryCache
from app.shared.config import get_payments_settings, reset_payments_settings
from app.shared.database.database import (
    build_engine,
    build_session_factory,
    create_all,
    get_async_session,
)
from app.shared.tasks import DeferredTaskQueue
from app.modules.payments.adapters.registry import GatewayRegistry
from app.modules.payments.enums import (
    CouponApplicability,
    CouponType,
    CourseStatus,
)
from app.modules.payments.facades.context import PaymentsContext
from app.modules.payments.models import AppUser, Coupon, Course, Instructor


# -----------------------------------------------------------------------------
# 1) API falso de Razorpay para httpx.MockTransport
# -----------------------------------------------------------------------------
@dataclass
class FakeGatewayAPI:
    """
    Responde como Razorpay (api.razorpay.com).
    Los flags permiten simular rechazos del proveedor.
    """

    calls: list[tuple[str, str]] = field(default_factory=list)
    counter: int = 0
    fail_create: Optional[int] = None
    refund_status: str = "processed"
    refund_http_status: int = 200
    refund_bodies: list[dict] = field(default_factory=list)

    def _next(self) -> int:
        self.counter += 1
        return self.counter

    def __call__(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.calls.append((method, path))

        # ---- Razorpay ----
        if method == "POST" and path == "/v1/orders":
            if self.fail_create:
                return httpx.Response(self.fail_create, json={"error": {"description": "boom"}})
            body = json.loads(request.content)
            n = self._next()
            return httpx.Response(
                200,
                json={
                    "id": f"order_{n}",
                    "entity": "order",
                    "amount": body["amount"],
                    "receipt": body["receipt"],
                    "status": "created",
                },
            )
        if method == "GET" and path.startswith("/v1/payments/"):
            payment_id = path.rsplit("/", 1)[-1]
            return httpx.Response(
                200,
                json={"id": payment_id, "status": "captured", "amount": 100, "method": "upi"},
            )
        if method == "POST" and path.endswith("/refund"):
            if self.refund_http_status != 200:
                return httpx.Response(
                    self.refund_http_status,
                    json={"error": {"description": "refund declined"}},
                )
            body = json.loads(request.content)
            self.refund_bodies.append(body)
            return httpx.Response(
                200,
                json={"id": f"rfnd_{self._next()}", "status": self.refund_status, "amount": body["amount"]},
            )

        return httpx.Response(404, json={"error": {"message": f"no route {method} {path}"}})

    def count(self, method: str, prefix: str) -> int:
        return sum(1 for m, p in self.calls if m == method and p.startswith(prefix))


# -----------------------------------------------------------------------------
# 1b) SDK de Stripe falso (monkeypatch sobre stripe.PaymentIntent & co.)
# -----------------------------------------------------------------------------
@dataclass
class FakeStripeSDK:
    """
    Sustituye los métodos de clase del SDK de Stripe. Guarda intents y
    sesiones en memoria, respeta idempotency_key como Stripe (misma clave,
    mismo objeto) y registra cada llamada con sus parámetros.
    """

    calls: list[tuple[str, dict]] = field(default_factory=list)
    intents: dict[str, dict] = field(default_factory=dict)
    sessions: dict[str, dict] = field(default_factory=dict)
    idempotent: dict[str, dict] = field(default_factory=dict)
    counter: int = 0
    refund_status: str = "succeeded"
    fail_next: Optional[Exception] = None

    def install(self, monkeypatch) -> "FakeStripeSDK":
        monkeypatch.setattr(stripe.PaymentIntent, "create", self.create_intent)
        monkeypatch.setattr(stripe.PaymentIntent, "retrieve", self.retrieve_intent)
        monkeypatch.setattr(stripe.checkout.Session, "create", self.create_session)
        monkeypatch.setattr(stripe.checkout.Session, "retrieve", self.retrieve_session)
        monkeypatch.setattr(stripe.Refund, "create", self.create_refund)
        return self

    def _record(self, operation: str, params: dict) -> None:
        self.calls.append((operation, dict(params)))
        if self.fail_next is not None:
            error, self.fail_next = self.fail_next, None
            raise error

    def _next(self) -> int:
        self.counter += 1
        return self.counter

    def _replay(self, params: dict) -> Optional[dict]:
        key = params.get("idempotency_key")
        return dict(self.idempotent[key]) if key in self.idempotent else None

    def _remember(self, params: dict, obj: dict) -> dict:
        if params.get("idempotency_key"):
            self.idempotent[params["idempotency_key"]] = obj
        return dict(obj)

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def params(self, operation: str) -> list[dict]:
        return [params for op, params in self.calls if op == operation]

    # ---- PaymentIntent ----
    def create_intent(self, **params) -> dict:
        self._record("PaymentIntent.create", params)
        replay = self._replay(params)
        if replay is not None:
            return replay
        n = self._next()
        intent = {
            "id": f"pi_{n}",
            "object": "payment_intent",
            "client_secret": f"pi_{n}_secret_x",
            "amount": params["amount"],
            "currency": params["currency"],
            "status": "requires_payment_method",
            "metadata": dict(params.get("metadata") or {}),
            "payment_method_types": ["card"],
        }
        self.intents[intent["id"]] = intent
        return self._remember(params, intent)

    def retrieve_intent(self, intent_id, **params) -> dict:
        self._record("PaymentIntent.retrieve", {"id": intent_id, **params})
        if intent_id not in self.intents:
            raise stripe.InvalidRequestError(
                f"No such payment_intent: '{intent_id}'", "id", http_status=404
            )
        return dict(self.intents[intent_id])

    def succeed_intent(self, intent_id: str) -> dict:
        intent = self.intents[intent_id]
        intent.update(status="succeeded", amount_received=intent["amount"])
        return intent

    # ---- Checkout Session ----
    def create_session(self, **params) -> dict:
        self._record("checkout.Session.create", params)
        replay = self._replay(params)
        if replay is not None:
            return replay
        n = self._next()
        line = params["line_items"][0]
        session = {
            "id": f"cs_test_{n}",
            "object": "checkout.session",
            "url": f"https://checkout.stripe.com/c/pay/cs_test_{n}",
            "payment_status": "unpaid",
            "client_reference_id": params.get("client_reference_id"),
            "amount_total": line["price_data"]["unit_amount"] * line["quantity"],
            "payment_intent": None,
            "metadata": dict(params.get("metadata") or {}),
        }
        self.sessions[session["id"]] = session
        return self._remember(params, session)

    def retrieve_session(self, session_id, **params) -> dict:
        self._record("checkout.Session.retrieve", {"id": session_id, **params})
        if session_id not in self.sessions:
            raise stripe.InvalidRequestError(
                f"No such checkout.session: '{session_id}'", "id", http_status=404
            )
        session = dict(self.sessions[session_id])
        intent_id = session.get("payment_intent")
        if intent_id and "payment_intent" in (params.get("expand") or []):
            session["payment_intent"] = dict(self.intents[intent_id])
        return session

    def pay_session(self, session_id: str) -> dict:
        session = self.sessions[session_id]
        n = self._next()
        self.intents[f"pi_{n}"] = {
            "id": f"pi_{n}",
            "object": "payment_intent",
            "amount": session["amount_total"],
            "amount_received": session["amount_total"],
            "currency": "inr",
            "status": "succeeded",
            "metadata": {"orderId": session["client_reference_id"]},
            "payment_method_types": ["card"],
        }
        session.update(payment_status="paid", payment_intent=f"pi_{n}")
        return session

    # ---- Refund ----
    def create_refund(self, **params) -> dict:
        self._record("Refund.create", params)
        replay = self._replay(params)
        if replay is not None:
            return replay
        refund = {
            "id": f"re_{self._next()}",
            "object": "refund",
            "payment_intent": params["payment_intent"],
            "amount": params["amount"],
            "status": self.refund_status,
        }
        return self._remember(params, refund)


# -----------------------------------------------------------------------------
# 2) Colaboradores que registran llamadas
# -----------------------------------------------------------------------------
@dataclass
class SentNotification:
    user_id: int
    type: str
    title: str
    message: str
    payload: Optional[dict]
    priority: str


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    async def notify(self, user_id, type, title, message, payload=None, priority="NORMAL") -> None:
        self.sent.append(
            SentNotification(user_id, str(type), title, message, dict(payload or {}), priority)
        )

    def types_for(self, user_id: int) -> list[str]:
        return [n.type for n in self.sent if n.user_id == user_id]


class RecordingEmailSender:
    def __init__(self) -> None:
        self.purchases: list[dict[str, Any]] = []
        self.refunds: list[dict[str, Any]] = []

    async def send_purchase_confirmation(self, **kwargs) -> None:
        self.purchases.append(kwargs)

    async def send_refund_processed(self, **kwargs) -> None:
        self.refunds.append(kwargs)


# -----------------------------------------------------------------------------
# 3) Base de datos
# -----------------------------------------------------------------------------
@pytest.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'payments.db'}")
    await create_all(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# -----------------------------------------------------------------------------
# 4) Contexto de pagos
# -----------------------------------------------------------------------------
@pytest.fixture
def payments_settings():
    reset_payments_settings()
    yield get_payments_settings()
    reset_payments_settings()


@pytest.fixture
def gateway_api() -> FakeGatewayAPI:
    return FakeGatewayAPI()


@pytest.fixture
def stripe_sdk(monkeypatch) -> FakeStripeSDK:
    return FakeStripeSDK().install(monkeypatch)


@pytest.fixture
async def registry(payments_settings, gateway_api, stripe_sdk):
    reg = GatewayRegistry.build(
        payments_settings,
        transport=httpx.MockTransport(gateway_api),
        backoff_base=0,
    )
    yield reg
    await reg.aclose()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def ctx(payments_settings, registry, cache, notifier, email_sender, session_factory):
    return PaymentsContext(
        settings=payments_settings,
        registry=registry,
        cache=cache,
        queue=DeferredTaskQueue(inline=True, max_attempts=2, backoff_seconds=0),
        notifier=notifier,
        email_sender=email_sender,
        session_factory=session_factory,
    )


# -----------------------------------------------------------------------------
# 5) Datos de catálogo
# -----------------------------------------------------------------------------
@dataclass
class Catalog:
    student: AppUser
    other_student: AppUser
    instructor_user: AppUser
    instructor: Instructor
    course_a: Course
    course_b: Course


@pytest.fixture
async def catalog(db) -> Catalog:
    """courseA 1000; courseB 500 con precio rebajado 400."""
    student = AppUser(first_name="Asha", last_name="Rao", email="asha@example.com", phone="9999999999")
    other = AppUser(first_name="Ravi", last_name="Iyer", email="ravi@example.com")
    instructor_user = AppUser(first_name="Meera", last_name="Nair", email="meera@example.com")
    db.add_all([student, other, instructor_user])
    await db.flush()

    instructor = Instructor(user_id=instructor_user.id)
    db.add(instructor)
    await db.flush()

    course_a = Course(
        title="Python from Zero",
        slug="python-from-zero",
        price=Decimal("1000.00"),
        status=CourseStatus.PUBLISHED,
        instructor_id=instructor.id,
    )
    course_b = Course(
        title="Async Deep Dive",
        slug="async-deep-dive",
        price=Decimal("500.00"),
        discount_price=Decimal("400.00"),
        status=CourseStatus.PUBLISHED,
        instructor_id=instructor.id,
    )
    db.add_all([course_a, course_b])
    await db.commit()
    return Catalog(student, other, instructor_user, instructor, course_a, course_b)


@pytest.fixture
def make_coupon(db):
    async def _make(code: str = "SAVE10", **overrides) -> Coupon:
        values = dict(
            code=code,
            type=CouponType.PERCENTAGE,
            value=Decimal("10"),
            maximum_discount=Decimal("100"),
            usage_limit=None,
            is_active=True,
            applicable_to=CouponApplicability.ALL_COURSES,
            course_ids=[],
        )
        values.update(overrides)
        coupon = Coupon(**values)
        db.add(coupon)
        await db.commit()
        return coupon

    return _make


# -----------------------------------------------------------------------------
# 6) App FastAPI + cliente httpx (con ciclo de vida)
# -----------------------------------------------------------------------------
@pytest.fixture
async def async_client(ctx, session_factory):
    from app.main import create_app

    app = create_app()
    app.state.payments = ctx

    async def _session_override():
        async with session_factory() as session:
            try:
                yield session
            finally:
                if session.in_transaction():
                    await session.rollback()

    app.dependency_overrides[get_async_session] = _session_override

    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    app.dependency_overrides.clear()
