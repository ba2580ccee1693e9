"""Correlation ID management for request tracing."""

import uuid
from contextvars import ContextVar, Token

# Visible to sync endpoints too: the threadpool runs them in a copied context
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    """Get current correlation ID from context."""
    return correlation_id_var.get()


def bind_correlation_id(incoming: str | None) -> tuple[str, Token[str]]:
    """Bind the incoming correlation ID (or a fresh one) to the current context.

    Returns:
        The bound ID and the token needed to unbind it.
    """
    cid = incoming or generate_correlation_id()
    return cid, correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    """Reset correlation ID to previous value."""
    correlation_id_var.reset(token)
