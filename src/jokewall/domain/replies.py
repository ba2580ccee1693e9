"""Reply selection for inbound messages.

The reply depends only on the normalized body and whether the sender has
paid. Rules are evaluated in order and the first match wins:

    silence > onboarding keyword > paid (premium joke) > unpaid (payment link)

A paid user who sends a greeting keyword still gets the onboarding pitch.
"""

from __future__ import annotations

import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from jokewall.config import Settings
from jokewall.domain.jokes import random_joke
from jokewall.errors import PaymentLinkCreationFailed
from jokewall.infra.paid_store import PaidIdentityStore
from jokewall.messaging.sender import TwilioSender
from jokewall.messaging.templates import (
    CURRENCY,
    PRICE_CENTS,
    PRODUCT_DESCRIPTION,
    PRODUCT_NAME,
    onboarding_message,
    render,
)
from jokewall.observability.logging import get_logger
from jokewall.observability.redaction import hash_identity, safe_log_context
from jokewall.stripe.client import StripeClient

logger = get_logger(__name__)

# Payload of the "Get more jokes" button on the payment-link card
ACKNOWLEDGEMENT_TOKEN = "get more jokes"
GREETING_KEYWORDS = frozenset({"help", "hello", "start"})

CHECKOUT_URL_PREFIX = "https://checkout.stripe.com/c/pay/"


class ReplyAction(str, Enum):
    SILENCE = "silence"
    ONBOARDING = "onboarding"
    PREMIUM_JOKE = "premium_joke"
    PAYMENT_LINK = "payment_link"


@dataclass(frozen=True)
class InboundMessage:
    """One inbound webhook call. Addresses are opaque identities."""

    sender: str
    recipient: str
    body: str

    @property
    def normalized_body(self) -> str:
        return normalize_body(self.body)


@dataclass(frozen=True)
class ReplyRule:
    action: ReplyAction
    matches: Callable[[str, Callable[[], bool]], bool]


REPLY_RULES: tuple[ReplyRule, ...] = (
    ReplyRule(ReplyAction.SILENCE, lambda body, is_paid: body == ACKNOWLEDGEMENT_TOKEN),
    ReplyRule(ReplyAction.ONBOARDING, lambda body, is_paid: body in GREETING_KEYWORDS),
    ReplyRule(ReplyAction.PREMIUM_JOKE, lambda body, is_paid: is_paid()),
    ReplyRule(ReplyAction.PAYMENT_LINK, lambda body, is_paid: True),
)


def normalize_body(body: str | None) -> str:
    return (body or "").strip().casefold()


def select_action(body: str, paid: bool | Callable[[], bool]) -> ReplyAction:
    """Return the action of the first rule matching (normalized body, paid).

    ``paid`` may be a zero-argument callable. It is only called once a rule
    needs it, so silence and greeting keywords never reach the store.
    """
    is_paid = paid if callable(paid) else (lambda: paid)
    for rule in REPLY_RULES:
        if rule.matches(body, is_paid):
            return rule.action
    raise AssertionError("REPLY_RULES must end with a catch-all rule")


def checkout_reference(url: str) -> str:
    """Strip the hosted-checkout prefix, leaving the short session reference.

    https://checkout.stripe.com/c/pay/cs_test_123 -> cs_test_123
    """
    return url.replace(CHECKOUT_URL_PREFIX, "", 1)


class PaymentLinkIssuer:
    """Creates a checkout session for a sender and texts them the link."""

    def __init__(
        self,
        stripe_client: StripeClient,
        sender: TwilioSender,
        settings: Settings,
    ) -> None:
        self._stripe = stripe_client
        self._sender = sender
        self._settings = settings

    def issue(
        self,
        *,
        customer: str,
        reply_from: str,
        correlation_id: str | None = None,
    ) -> str:
        """Create the session and dispatch the payment-link template.

        Args:
            customer: Identity paying (inbound From). Stored in session metadata.
            reply_from: Address to send from (inbound To).
            correlation_id: Optional correlation ID for tracing.

        Returns:
            The checkout reference sent in the template.

        Raises:
            PaymentLinkCreationFailed: If either provider call fails.
        """
        try:
            session = self._stripe.create_checkout_session(
                amount_cents=PRICE_CENTS,
                currency=CURRENCY,
                product_name=PRODUCT_NAME,
                product_description=PRODUCT_DESCRIPTION,
                # per request: retries of this call reuse it, new messages don't
                idempotency_key=f"checkout:{uuid.uuid4()}",
                success_url=self._settings.success_url,
                cancel_url=self._settings.cancel_url,
                metadata={"phone": customer},
                correlation_id=correlation_id,
            )
            reference = checkout_reference(session["url"])
            self._sender.send_template(
                from_=reply_from,
                to=customer,
                content_sid=self._settings.payment_content_sid,
                variables={"1": reference},
                correlation_id=correlation_id,
            )
        except Exception as exc:
            raise PaymentLinkCreationFailed(str(exc)) from exc

        return reference


class ReplySelector:
    """Turns an inbound message into the text of the reply (or None)."""

    def __init__(
        self,
        store: PaidIdentityStore,
        link_issuer: PaymentLinkIssuer,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._link_issuer = link_issuer
        self._rng = rng

    def reply(
        self,
        message: InboundMessage,
        *,
        correlation_id: str | None = None,
    ) -> str | None:
        """Select and perform the reply action.

        Returns:
            Reply text for the TwiML response, or None for no reply. The
            payment link is sent as a separate template message, so that
            action also returns None unless issuing it failed.
        """
        body = message.normalized_body
        action = select_action(body, lambda: self._store.is_paid(message.sender))

        logger.info(
            "reply selected",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id or "",
                    from_hash=hash_identity(message.sender),
                    body_len=len(body),
                    action=action.value,
                )
            },
        )

        if action is ReplyAction.SILENCE:
            return None
        if action is ReplyAction.ONBOARDING:
            return onboarding_message()
        if action is ReplyAction.PREMIUM_JOKE:
            return render("premium_joke", {"joke": random_joke(self._rng)})

        try:
            self._link_issuer.issue(
                customer=message.sender,
                reply_from=message.recipient,
                correlation_id=correlation_id,
            )
        except PaymentLinkCreationFailed as exc:
            logger.error(
                "payment link creation failed",
                extra={
                    "extra_fields": safe_log_context(
                        correlationId=correlation_id or "",
                        from_hash=hash_identity(message.sender),
                        error_type=type(exc.__cause__).__name__,
                    )
                },
            )
            return render("checkout_error")
        return None
