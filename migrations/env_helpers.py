"""Database URL helpers for Alembic migrations.

Kept apart from env.py so they can be tested without triggering
alembic.context at import time.
"""

from __future__ import annotations

import os
from urllib.parse import quote_plus, urlparse, urlunparse


def _get_database_url() -> str:
    """DATABASE_URL normalized to a SQLAlchemy psycopg2 URL.

    Raises:
        RuntimeError: If DATABASE_URL is not set or is not a URL.
    """
    url = os.environ.get("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is required to run migrations")
    if "://" not in url:
        raise RuntimeError("DATABASE_URL must be a postgres:// or postgresql:// URL")

    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url[len("postgresql://"):]

    # Inject DB_PASSWORD if URL has empty password
    db_password = os.environ.get("DB_PASSWORD", "")
    if db_password:
        parsed = urlparse(url)
        if not parsed.password:
            replaced = parsed._replace(
                netloc=f"{quote_plus(parsed.username or '')}:{quote_plus(db_password)}@{parsed.hostname}"
                + (f":{parsed.port}" if parsed.port else "")
            )
            url = urlunparse(replaced)
    return url
