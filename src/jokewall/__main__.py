"""Run the service: `python -m jokewall`."""

import os

import uvicorn

from jokewall.observability.logging import get_logger

logger = get_logger("jokewall")

DEFAULT_PORT = 3000


def main() -> None:
    port = int(os.environ.get("PORT", DEFAULT_PORT))
    logger.info("server starting", extra={"extra_fields": {"port": port}})
    uvicorn.run("jokewall.api.app:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
