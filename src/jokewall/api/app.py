"""ASGI entry point: `uvicorn jokewall.api.app:app`.

Settings are loaded at import, so a missing STRIPE_SECRET_KEY or SENDER
stops the process before it accepts traffic.
"""

from jokewall.api.factory import create_app

app = create_app()
