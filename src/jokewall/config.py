"""Environment-sourced configuration.

Required:
- STRIPE_SECRET_KEY: Stripe secret key
- SENDER: RCS agent / sender name, used for outbound messages and the
  deep link the success page redirects to

Optional:
- TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN: Twilio credentials (default: empty)
- BASE_URL: public URL of this service (default: http://localhost:3000)
- TWILIO_PAYMENT_CONTENT_SID: content template carrying the checkout link
- PROVIDER_TIMEOUT_SECONDS: timeout for Stripe and Twilio calls (default: 10)
- DATABASE_URL: enables the PostgreSQL paid-identity store
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from jokewall.errors import ConfigMissing
from jokewall.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_PAYMENT_CONTENT_SID = "HXa9f820df155dad36b03a757e97137e64"
DEFAULT_PROVIDER_TIMEOUT = 10.0

REDIRECT_BODY = "I want my dad jokes!"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration. Build with load_settings() outside tests."""

    stripe_secret_key: str
    sender: str
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    base_url: str = DEFAULT_BASE_URL
    payment_content_sid: str = DEFAULT_PAYMENT_CONTENT_SID
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    database_url: str | None = None

    @property
    def success_url(self) -> str:
        # Stripe substitutes the literal {CHECKOUT_SESSION_ID} placeholder
        return f"{self.base_url}/success?session_id={{CHECKOUT_SESSION_ID}}"

    @property
    def cancel_url(self) -> str:
        return f"{self.base_url}/cancel"

    @property
    def welcome_from(self) -> str:
        return f"rcs:{self.sender}"

    @property
    def redirect_url(self) -> str:
        """Deep link opening a chat with the sender, message pre-filled."""
        return f"sms:{self.sender}@rbm.goog?body={REDIRECT_BODY}"


def _parse_timeout(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigMissing(
            f"Invalid PROVIDER_TIMEOUT_SECONDS='{raw}'. Must be a number of seconds."
        ) from None
    if value <= 0:
        raise ConfigMissing("PROVIDER_TIMEOUT_SECONDS must be positive")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from the environment, failing fast on missing secrets.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Raises:
        ConfigMissing: If STRIPE_SECRET_KEY or SENDER is unset, or a
            numeric value does not parse.
    """
    env = os.environ if environ is None else environ

    stripe_secret_key = env.get("STRIPE_SECRET_KEY", "")
    sender = env.get("SENDER", "")

    missing = []
    if not stripe_secret_key:
        missing.append("STRIPE_SECRET_KEY")
    if not sender:
        missing.append("SENDER")

    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        logger.error(msg)
        raise ConfigMissing(msg)

    return Settings(
        stripe_secret_key=stripe_secret_key,
        sender=sender,
        twilio_account_sid=env.get("TWILIO_ACCOUNT_SID", ""),
        twilio_auth_token=env.get("TWILIO_AUTH_TOKEN", ""),
        base_url=(env.get("BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        payment_content_sid=env.get("TWILIO_PAYMENT_CONTENT_SID")
        or DEFAULT_PAYMENT_CONTENT_SID,
        provider_timeout=_parse_timeout(
            env.get("PROVIDER_TIMEOUT_SECONDS", str(DEFAULT_PROVIDER_TIMEOUT))
        ),
        database_url=env.get("DATABASE_URL") or None,
    )
