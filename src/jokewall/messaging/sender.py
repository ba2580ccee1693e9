"""Outbound SMS/RCS messaging via Twilio.

Security: NEVER log recipient, sender or body. Only log hashes and lengths.
"""

from __future__ import annotations

import json
import time
from typing import Any

from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import Timeout
from twilio.base.exceptions import TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from jokewall.observability.logging import get_logger
from jokewall.observability.redaction import hash_identity, safe_log_context

logger = get_logger(__name__)

# Timeout for HTTP requests (seconds)
HTTP_TIMEOUT = 10.0

# Retry config
MAX_RETRIES = 1
RETRY_DELAY = 0.2


def _is_retryable(exc: Exception) -> bool:
    """Network errors and Twilio 5xx are retryable; 4xx are not."""
    if isinstance(exc, TwilioRestException):
        return exc.status is not None and 500 <= exc.status < 600
    return isinstance(exc, (RequestsConnectionError, Timeout))


class TwilioSender:
    """Sends freeform and content-template messages through Twilio.

    The underlying twilio.rest.Client is built on first use, so a process
    without Twilio credentials still starts; sends then fail and callers
    decide how to degrade.
    """

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        *,
        timeout: float = HTTP_TIMEOUT,
        client: Client | None = None,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = Client(
                self._account_sid,
                self._auth_token,
                http_client=TwilioHttpClient(timeout=self._timeout),
            )
        return self._client

    def send_text(
        self,
        *,
        from_: str,
        to: str,
        body: str,
        correlation_id: str | None = None,
    ) -> str:
        """Send a freeform message.

        Args:
            from_: Sender address (phone or rcs:<agent>). NEVER logged.
            to: Recipient address. NEVER logged.
            body: Message text. NEVER logged.
            correlation_id: Optional correlation ID for tracing.

        Returns:
            Twilio message SID.

        Raises:
            TwilioRestException: On API errors after retry.
            requests.exceptions.RequestException: On network errors after retry.
        """
        log_ctx = safe_log_context(
            correlationId=correlation_id or "",
            to_hash=hash_identity(to),
            kind="text",
            text_len=len(body),
        )
        return self._create(log_ctx, from_=from_, to=to, body=body)

    def send_template(
        self,
        *,
        from_: str,
        to: str,
        content_sid: str,
        variables: dict[str, str],
        correlation_id: str | None = None,
    ) -> str:
        """Send a pre-registered content template with substitution variables.

        Args:
            from_: Sender address. NEVER logged.
            to: Recipient address. NEVER logged.
            content_sid: Twilio Content SID (HX...).
            variables: Template variables keyed by position ("1", "2", ...).
            correlation_id: Optional correlation ID for tracing.

        Returns:
            Twilio message SID.
        """
        log_ctx = safe_log_context(
            correlationId=correlation_id or "",
            to_hash=hash_identity(to),
            kind="template",
            content_sid=content_sid,
            variable_count=len(variables),
        )
        return self._create(
            log_ctx,
            from_=from_,
            to=to,
            content_sid=content_sid,
            content_variables=json.dumps(variables),
        )

    def _create(self, log_ctx: dict[str, str], **params: Any) -> str:
        logger.info("sending outbound message", extra={"extra_fields": log_ctx})

        client = self._get_client()

        for attempt in range(MAX_RETRIES + 1):
            try:
                message = client.messages.create(**params)
            except (TwilioRestException, RequestsConnectionError, Timeout) as e:
                if attempt < MAX_RETRIES and _is_retryable(e):
                    logger.warning(
                        "outbound send failed, retrying",
                        extra={
                            "extra_fields": {
                                **log_ctx,
                                **safe_log_context(
                                    attempt=attempt, error_type=type(e).__name__
                                ),
                            }
                        },
                    )
                    time.sleep(RETRY_DELAY)
                    continue

                logger.error(
                    "outbound send failed",
                    extra={
                        "extra_fields": {
                            **log_ctx,
                            **safe_log_context(
                                attempt=attempt, error_type=type(e).__name__
                            ),
                        }
                    },
                )
                raise

            logger.info(
                "outbound message sent",
                extra={
                    "extra_fields": {
                        **log_ctx,
                        **safe_log_context(attempt=attempt, sid=message.sid),
                    }
                },
            )
            return message.sid

        raise RuntimeError("unreachable: retry loop exited without result")
