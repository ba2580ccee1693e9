"""Payment confirmation: the success-page callback after checkout.

Flow:
1. No session_id -> MissingParameter (no provider call).
2. Retrieve session; any failure -> SessionLookupFailed (no state change).
3. No usable phone in metadata -> skip steps 4-5, warn.
4. mark_paid(phone).
5. Send the welcome message with a first joke. A failed send is logged and
   NOT rolled back: the identity stays paid.
6. Always hand back the deep-link redirect.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from jokewall.config import Settings
from jokewall.domain.jokes import random_joke
from jokewall.errors import MissingParameter, SessionLookupFailed
from jokewall.infra.paid_store import PaidIdentityStore
from jokewall.messaging.sender import TwilioSender
from jokewall.messaging.templates import format_cents, render
from jokewall.observability.logging import get_logger
from jokewall.observability.redaction import hash_identity, safe_log_context
from jokewall.stripe.client import StripeClient

logger = get_logger(__name__)

# Values a metadata field may carry when the phone was never known
UNAVAILABLE_PHONE_VALUES = frozenset({"", "undefined", "null", "n/a", "none"})


def extract_phone(metadata: dict[str, str] | None) -> str | None:
    """Phone from session metadata, or None if absent or a sentinel."""
    phone = (metadata or {}).get("phone")
    if phone is None:
        return None
    phone = str(phone).strip()
    if phone.casefold() in UNAVAILABLE_PHONE_VALUES:
        return None
    return phone


@dataclass(frozen=True)
class ConfirmationResult:
    redirect_url: str
    phone: str | None = None
    newly_paid: bool = False
    welcome_sent: bool = False


class PaymentConfirmationHandler:
    def __init__(
        self,
        store: PaidIdentityStore,
        stripe_client: StripeClient,
        sender: TwilioSender,
        settings: Settings,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._stripe = stripe_client
        self._sender = sender
        self._settings = settings
        self._rng = rng

    def confirm(
        self,
        session_id: str | None,
        *,
        correlation_id: str | None = None,
    ) -> ConfirmationResult:
        """Confirm a completed checkout and unlock the paying identity.

        Raises:
            MissingParameter: If session_id is absent or empty.
            SessionLookupFailed: If the session cannot be retrieved.
        """
        if not session_id:
            raise MissingParameter("session_id")

        try:
            session = self._stripe.retrieve_checkout_session(
                session_id, correlation_id=correlation_id
            )
        except Exception as exc:
            logger.error(
                "checkout session lookup failed",
                extra={
                    "extra_fields": safe_log_context(
                        correlationId=correlation_id or "",
                        session_id=session_id,
                        error_type=type(exc).__name__,
                    )
                },
            )
            raise SessionLookupFailed(session_id) from exc

        phone = extract_phone(session.get("metadata"))

        logger.info(
            "payment confirmed",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id or "",
                    session_id=session_id,
                    email=session.get("customer_email"),
                    phone=phone,
                    amount=format_cents(session.get("amount_total")),
                )
            },
        )

        redirect_url = self._settings.redirect_url

        if phone is None:
            logger.warning(
                "checkout session has no phone metadata - nothing unlocked",
                extra={
                    "extra_fields": safe_log_context(
                        correlationId=correlation_id or "",
                        session_id=session_id,
                    )
                },
            )
            return ConfirmationResult(redirect_url=redirect_url)

        newly_paid = self._store.mark_paid(phone)

        welcome_sent = False
        try:
            self._sender.send_text(
                from_=self._settings.welcome_from,
                to=phone,
                body=render("welcome", {"joke": random_joke(self._rng)}),
                correlation_id=correlation_id,
            )
            welcome_sent = True
        except Exception as exc:
            # Paid stays paid; the user can still text in for jokes
            logger.error(
                "welcome message failed",
                extra={
                    "extra_fields": safe_log_context(
                        correlationId=correlation_id or "",
                        to_hash=hash_identity(phone),
                        error_type=type(exc).__name__,
                    )
                },
            )

        return ConfirmationResult(
            redirect_url=redirect_url,
            phone=phone,
            newly_paid=newly_paid,
            welcome_sent=welcome_sent,
        )
