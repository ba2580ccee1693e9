"""FastAPI application factory."""

from __future__ import annotations

import random

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jokewall.api.services import build_services
from jokewall.config import Settings, load_settings
from jokewall.infra.paid_store import PaidIdentityStore
from jokewall.messaging.sender import TwilioSender
from jokewall.observability.correlation import (
    CORRELATION_ID_HEADER,
    bind_correlation_id,
    reset_correlation_id,
)
from jokewall.stripe.client import StripeClient

from .routers import public
from .routes import messaging, payments


def create_app(
    settings: Settings | None = None,
    *,
    store: PaidIdentityStore | None = None,
    stripe_client: StripeClient | None = None,
    sender: TwilioSender | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    """Create the FastAPI app with its own service instances.

    Args:
        settings: Explicit settings. If None, loaded from the environment
                  (raises ConfigMissing when required values are unset).
        store: Paid-identity store override (tests pass an isolated one).
        stripe_client: Stripe wrapper override.
        sender: Twilio sender override.
        rng: Random source for joke selection.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="Jokewall",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.services = build_services(
        settings, store=store, stripe_client=stripe_client, sender=sender, rng=rng
    )

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        cid, token = bind_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)

    # Unknown paths and wrong methods both read as plain "Not Found"
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    app.include_router(public.router)
    app.include_router(messaging.router)
    app.include_router(payments.router)

    return app
