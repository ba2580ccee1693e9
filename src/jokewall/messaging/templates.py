"""Outbound message copy.

Templates contain static text with placeholders. Params are validated
against allowed_params so identities never end up in a message body.
"""

from typing import Any

PRICE_CENTS = 299
CURRENCY = "usd"

PRODUCT_NAME = "Premium Dad Jokes - Lifetime Access"
PRODUCT_DESCRIPTION = (
    "Unlock unlimited access to the finest, corniest dad jokes known to mankind! 🤣"
)

TEMPLATES: dict[str, dict[str, Any]] = {
    "onboarding": {
        "text": (
            "👋 Welcome to the ULTIMATE Dad Joke Generator! 🎉\n\n"
            "For just ${price}, you'll unlock LIFETIME access to the corniest, "
            "most groan-worthy dad jokes on the planet! 🌎\n\n"
            "Why pay? Because FREE dad jokes are like free hugs from strangers... "
            "slightly uncomfortable and probably not worth it. 😅\n\n"
            "Reply with ANY message to get started!"
        ),
        "allowed_params": ["price"],
    },
    "premium_joke": {
        "text": (
            "🎭 HERE'S YOUR PREMIUM DAD JOKE:\n\n"
            "{joke}\n\n"
            "😂 Want another? Just text me again!"
        ),
        "allowed_params": ["joke"],
    },
    "welcome": {
        "text": (
            "🎉 Thank you for your purchase! You've unlocked PREMIUM DAD JOKES! 🎉\n\n"
            "Here's your first joke:\n\n"
            "{joke}\n\n"
            "😂 Text me anytime for more!"
        ),
        "allowed_params": ["joke"],
    },
    "checkout_error": {
        "text": (
            "🤖 Error: Even robots need to eat... I mean, process payments! "
            "Try again later."
        ),
        "allowed_params": [],
    },
}


def format_cents(amount_cents: int | None) -> str:
    """Format an amount in cents as dollars with two decimals (299 -> '2.99')."""
    if not amount_cents:
        return "0.00"
    return f"{amount_cents / 100:.2f}"


def render(template_key: str, params: dict[str, Any] | None = None) -> str:
    """Render template with params. Validates allowed_params.

    Args:
        template_key: Template identifier.
        params: Parameters to interpolate (must be in allowed_params).

    Returns:
        Rendered text string.

    Raises:
        ValueError: If template_key unknown or params contains disallowed
            or missing keys.
    """
    if template_key not in TEMPLATES:
        raise ValueError(f"Unknown template: {template_key}")

    params = params or {}
    template = TEMPLATES[template_key]
    allowed = set(template["allowed_params"])
    provided = set(params.keys())

    extras = provided - allowed
    if extras:
        raise ValueError(f"Disallowed params for {template_key}: {extras}")

    missing = allowed - provided
    if missing:
        raise ValueError(f"Missing params for {template_key}: {missing}")

    return template["text"].format(**params)


def onboarding_message() -> str:
    return render("onboarding", {"price": format_cents(PRICE_CENTS)})
