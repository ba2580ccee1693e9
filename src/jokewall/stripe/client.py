"""Thin wrapper around Stripe SDK.

Purpose:
- Encapsulate Stripe API calls so domain code doesn't import stripe.* directly.
- Bound every call with a timeout and a single network retry.
- Never log full Stripe payloads (only IDs + correlation metadata).
"""

from __future__ import annotations

from typing import Any

import stripe

from jokewall.observability.logging import get_logger
from jokewall.observability.redaction import safe_log_context

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0
# Stripe retries only network errors and 409/5xx, reusing the idempotency key
MAX_NETWORK_RETRIES = 1


class StripeClient:
    """Wrapper for Stripe Checkout operations.

    Usage:
        client = StripeClient("sk_test_...")
        session = client.create_checkout_session(
            amount_cents=299,
            currency="usd",
            product_name="Premium Dad Jokes - Lifetime Access",
            idempotency_key="checkout:3f2a...",
            success_url="https://example.com/success?session_id={CHECKOUT_SESSION_ID}",
            cancel_url="https://example.com/cancel",
            metadata={"phone": "+15555550123"},
        )
        print(session["session_id"], session["url"])
    """

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_network_retries: int = MAX_NETWORK_RETRIES,
    ) -> None:
        """Initialize the Stripe client.

        Args:
            api_key: Stripe secret key.
            timeout: Per-request timeout in seconds.
            max_network_retries: Retries on network errors.

        Raises:
            RuntimeError: If no API key is provided.
        """
        if not api_key:
            raise RuntimeError("Stripe API key not provided.")
        self._client = stripe.StripeClient(
            api_key,
            http_client=stripe.RequestsClient(timeout=timeout),
            max_network_retries=max_network_retries,
        )

    def create_checkout_session(
        self,
        *,
        amount_cents: int,
        currency: str,
        product_name: str,
        idempotency_key: str,
        success_url: str,
        cancel_url: str,
        product_description: str | None = None,
        metadata: dict[str, str] | None = None,
        correlation_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a one-time-payment Checkout Session.

        Args:
            amount_cents: Amount in cents.
            currency: Currency code (e.g., 'usd').
            product_name: Line item name shown on the hosted page.
            idempotency_key: Idempotency key for safe retries.
            success_url: Redirect URL on success.
            cancel_url: Redirect URL on cancel.
            product_description: Optional line item description.
            metadata: Optional metadata to attach to session.
            correlation_id: Optional correlation ID for logging.

        Returns:
            Dict with session_id, url, and status.
        """
        product_data: dict[str, Any] = {"name": product_name}
        if product_description:
            product_data["description"] = product_description

        params: dict[str, Any] = {
            "payment_method_types": ["card"],
            "mode": "payment",
            "line_items": [
                {
                    "price_data": {
                        "currency": currency.lower(),
                        "unit_amount": amount_cents,
                        "product_data": product_data,
                    },
                    "quantity": 1,
                }
            ],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "customer_creation": "always",
        }

        if metadata:
            params["metadata"] = metadata

        session = self._client.v1.checkout.sessions.create(
            params=params,
            options={"idempotency_key": idempotency_key},
        )

        # Log only IDs, never full payload
        logger.info(
            "stripe_checkout_session_created",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id or "",
                    session_id=session.id,
                )
            },
        )

        return {
            "session_id": session.id,
            "url": session.url or "",
            "status": session.status,
        }

    def retrieve_checkout_session(
        self,
        session_id: str,
        *,
        correlation_id: str | None = None,
    ) -> dict[str, Any]:
        """Retrieve an existing Checkout Session.

        Args:
            session_id: The Stripe session ID.
            correlation_id: Optional correlation ID for logging.

        Returns:
            Dict with session_id, url, status, metadata (plain dict),
            amount_total (cents or None) and customer_email (or None).
        """
        session = self._client.v1.checkout.sessions.retrieve(session_id)

        logger.info(
            "stripe_checkout_session_retrieved",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id or "",
                    session_id=session.id,
                )
            },
        )

        customer_details = getattr(session, "customer_details", None)
        metadata = getattr(session, "metadata", None)

        return {
            "session_id": session.id,
            "url": getattr(session, "url", None),
            "status": getattr(session, "status", None),
            "metadata": dict(metadata) if metadata else {},
            "amount_total": getattr(session, "amount_total", None),
            "customer_email": getattr(customer_details, "email", None)
            if customer_details
            else None,
        }
