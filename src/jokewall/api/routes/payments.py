"""Checkout success callback.

The caller is the customer's browser coming back from Stripe, so failures
surface as HTTP status codes.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse, RedirectResponse

from jokewall.api.services import Services, get_services
from jokewall.errors import MissingParameter, SessionLookupFailed
from jokewall.observability.correlation import get_correlation_id
from jokewall.observability.logging import get_logger
from jokewall.observability.redaction import safe_log_context

router = APIRouter(tags=["payments"])

logger = get_logger(__name__)


@router.get("/success")
def payment_success(
    session_id: str | None = None,
    services: Services = Depends(get_services),
) -> Response:
    """Unlock the paying identity and redirect back into the chat.

    Returns:
        302 to the sms: deep link.
        400 if session_id is missing.
        500 if the session cannot be retrieved.
    """
    correlation_id = get_correlation_id()

    try:
        result = services.confirmation.confirm(
            session_id, correlation_id=correlation_id
        )
    except MissingParameter:
        return PlainTextResponse("Missing session_id", status_code=400)
    except SessionLookupFailed:
        return PlainTextResponse(
            "Error retrieving payment information", status_code=500
        )
    except Exception as exc:
        logger.error(
            "payment confirmation failed",
            extra={
                "extra_fields": safe_log_context(
                    correlationId=correlation_id,
                    error_type=type(exc).__name__,
                )
            },
        )
        return PlainTextResponse(
            "Error retrieving payment information", status_code=500
        )

    return RedirectResponse(result.redirect_url, status_code=302)
