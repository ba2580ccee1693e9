"""Inbound message webhook - Twilio Messaging integration.

Twilio only expects a 200 with a TwiML document, so every failure here is
turned into a conversational reply instead of an HTTP error.
"""

from fastapi import APIRouter, Depends, Form, Response
from twilio.twiml.messaging_response import MessagingResponse

from jokewall.api.services import Services, get_services
from jokewall.domain.replies import InboundMessage
from jokewall.messaging.templates import render
from jokewall.observability.correlation import get_correlation_id
from jokewall.observability.logging import get_logger
from jokewall.observability.redaction import hash_identity, safe_log_context

router = APIRouter(tags=["webhooks"])

logger = get_logger(__name__)


@router.post("/messaging")
def messaging_webhook(
    from_: str = Form("", alias="From"),
    to: str = Form("", alias="To"),
    body: str = Form("", alias="Body"),
    services: Services = Depends(get_services),
) -> Response:
    """Receive an inbound SMS/RCS message and answer with TwiML.

    Returns:
        200 text/xml MessagingResponse; empty when no reply is due.
    """
    correlation_id = get_correlation_id()
    message = InboundMessage(sender=from_, recipient=to, body=body)

    logger.info(
        "inbound message received",
        extra={
            "extra_fields": safe_log_context(
                correlationId=correlation_id,
                from_hash=hash_identity(from_),
                body_len=len(body),
            )
        },
    )

    try:
        text = services.replies.reply(message, correlation_id=correlation_id)
    except Exception as exc:
        # e.g. paid-identity store unavailable
        logger.error(
            "reply selection failed",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id,
                    error_type=type(exc).__name__,
                )
            },
        )
        text = render("checkout_error")

    twiml = MessagingResponse()
    if text:
        twiml.message(text)

    return Response(content=str(twiml), media_type="text/xml")
