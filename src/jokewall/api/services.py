"""Per-app service wiring, stored on app.state.services."""

from __future__ import annotations

import random
from dataclasses import dataclass

from fastapi import Request

from jokewall.config import Settings
from jokewall.domain.confirmation import PaymentConfirmationHandler
from jokewall.domain.replies import PaymentLinkIssuer, ReplySelector
from jokewall.infra.paid_store import PaidIdentityStore, build_paid_store
from jokewall.messaging.sender import TwilioSender
from jokewall.stripe.client import StripeClient


@dataclass
class Services:
    settings: Settings
    store: PaidIdentityStore
    replies: ReplySelector
    confirmation: PaymentConfirmationHandler


def build_services(
    settings: Settings,
    *,
    store: PaidIdentityStore | None = None,
    stripe_client: StripeClient | None = None,
    sender: TwilioSender | None = None,
    rng: random.Random | None = None,
) -> Services:
    """Wire collaborators. Anything not passed in is built from settings."""
    if store is None:
        store = build_paid_store(settings.database_url)
    if stripe_client is None:
        stripe_client = StripeClient(
            settings.stripe_secret_key, timeout=settings.provider_timeout
        )
    if sender is None:
        sender = TwilioSender(
            settings.twilio_account_sid,
            settings.twilio_auth_token,
            timeout=settings.provider_timeout,
        )

    return Services(
        settings=settings,
        store=store,
        replies=ReplySelector(
            store, PaymentLinkIssuer(stripe_client, sender, settings), rng=rng
        ),
        confirmation=PaymentConfirmationHandler(
            store, stripe_client, sender, settings, rng=rng
        ),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency returning the app's services."""
    return request.app.state.services
