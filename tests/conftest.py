"""Shared pytest fixtures for Jokewall tests."""
import sys
sys.dont_write_bytecode = True

import asyncio  # noqa: E402
import random  # noqa: E402
from dataclasses import dataclass, field  # noqa: E402
from typing import Any  # noqa: E402
from urllib.parse import urlencode  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from jokewall.api.factory import create_app  # noqa: E402
from jokewall.config import Settings  # noqa: E402
from jokewall.infra.paid_store import InMemoryPaidIdentityStore  # noqa: E402

TEST_CUSTOMER = "+15555550123"
TEST_BOT_NUMBER = "+15555550199"
TEST_SESSION_ID = "cs_test_123"
TEST_CHECKOUT_URL = "https://checkout.stripe.com/c/pay/cs_test_123"


class FakeStripeClient:
    """Records calls; sessions are served from an in-memory dict."""

    def __init__(self) -> None:
        self.checkout_url = TEST_CHECKOUT_URL
        self.create_error: Exception | None = None
        self.created: list[dict[str, Any]] = []
        self.retrieved: list[str] = []
        self.sessions: dict[str, dict[str, Any]] = {}

    def create_checkout_session(self, **kwargs: Any) -> dict[str, Any]:
        self.created.append(kwargs)
        if self.create_error is not None:
            raise self.create_error
        return {"session_id": TEST_SESSION_ID, "url": self.checkout_url, "status": "open"}

    def retrieve_checkout_session(
        self, session_id: str, *, correlation_id: str | None = None
    ) -> dict[str, Any]:
        self.retrieved.append(session_id)
        if session_id not in self.sessions:
            raise RuntimeError(f"No such checkout.session: {session_id}")
        return self.sessions[session_id]

    def add_session(
        self,
        session_id: str = TEST_SESSION_ID,
        *,
        metadata: dict[str, str] | None = None,
        amount_total: int | None = 299,
    ) -> None:
        self.sessions[session_id] = {
            "session_id": session_id,
            "url": None,
            "status": "complete",
            "metadata": metadata or {},
            "amount_total": amount_total,
            "customer_email": "buyer@example.com",
        }


class FakeSender:
    """Records outbound messages instead of calling Twilio."""

    def __init__(self) -> None:
        self.texts: list[dict[str, Any]] = []
        self.templates: list[dict[str, Any]] = []
        self.error: Exception | None = None

    def send_text(self, **kwargs: Any) -> str:
        if self.error is not None:
            raise self.error
        self.texts.append(kwargs)
        return f"SM{len(self.texts):032d}"

    def send_template(self, **kwargs: Any) -> str:
        if self.error is not None:
            raise self.error
        self.templates.append(kwargs)
        return f"SM{len(self.templates):032d}"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        stripe_secret_key="sk_test_dummy",
        sender="jokewall_agent",
        base_url="https://jokes.example.com",
    )


@pytest.fixture
def store() -> InMemoryPaidIdentityStore:
    return InMemoryPaidIdentityStore()


@pytest.fixture
def fake_stripe() -> FakeStripeClient:
    return FakeStripeClient()


@pytest.fixture
def fake_sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def app(settings, store, fake_stripe, fake_sender):
    return create_app(
        settings,
        store=store,
        stripe_client=fake_stripe,
        sender=fake_sender,
        rng=random.Random(1234),
    )


@pytest.fixture
def client(app) -> TestClient:
    # The success page redirects to an sms: URI; never follow it
    return TestClient(app, follow_redirects=False)


@dataclass
class RawResponse:
    status_code: int = 0
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


def asgi_get(app, path: str, params: dict[str, str] | None = None) -> RawResponse:
    """Run one GET through the ASGI app and capture the raw response.

    httpx builds a follow-up request for every Location header, and an
    sms: deep link is not a URL it accepts, so redirects to the messaging
    app are checked here instead of through TestClient.
    """
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": urlencode(params or {}).encode(),
        "headers": [(b"host", b"testserver")],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    response = RawResponse()

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message: dict[str, Any]) -> None:
        if message["type"] == "http.response.start":
            response.status_code = message["status"]
            response.headers = {
                key.decode("latin-1"): value.decode("latin-1")
                for key, value in message["headers"]
            }
        elif message["type"] == "http.response.body":
            response.body += message.get("body", b"")

    asyncio.run(app(scope, receive, send))
    return response
