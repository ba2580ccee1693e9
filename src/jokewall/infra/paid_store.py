"""Paid-identity store.

Membership is monotonic: an identity, once marked paid, is never removed.
Two implementations share the PaidIdentityStore interface:

- InMemoryPaidIdentityStore: process-local set, lost on restart.
- PostgresPaidIdentityStore: paid_identities table (see migrations), shared
  across instances and restarts.
"""

from __future__ import annotations

import threading
from typing import Protocol

from jokewall.infra.db import fetchone, txn
from jokewall.observability.logging import get_logger

logger = get_logger(__name__)


class PaidIdentityStore(Protocol):
    def is_paid(self, identity: str) -> bool: ...

    def mark_paid(self, identity: str) -> bool:
        """Insert identity if absent. Returns True only if it was newly added."""
        ...


class InMemoryPaidIdentityStore:
    """Thread-safe set of paid identities."""

    def __init__(self) -> None:
        self._paid: set[str] = set()
        self._lock = threading.Lock()

    def is_paid(self, identity: str) -> bool:
        with self._lock:
            return identity in self._paid

    def mark_paid(self, identity: str) -> bool:
        with self._lock:
            if identity in self._paid:
                return False
            self._paid.add(identity)
            return True

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._paid

    def __len__(self) -> int:
        with self._lock:
            return len(self._paid)


class PostgresPaidIdentityStore:
    """Paid identities persisted in PostgreSQL.

    Each call runs in its own short transaction. Database errors propagate.
    """

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn

    def is_paid(self, identity: str) -> bool:
        with txn(self._dsn) as cur:
            row = fetchone(
                cur,
                "SELECT 1 FROM paid_identities WHERE identity = %s",
                (identity,),
            )
        return row is not None

    def mark_paid(self, identity: str) -> bool:
        with txn(self._dsn) as cur:
            cur.execute(
                """
                INSERT INTO paid_identities (identity)
                VALUES (%s)
                ON CONFLICT (identity) DO NOTHING
                """,
                (identity,),
            )
            return cur.rowcount == 1


def build_paid_store(database_url: str | None) -> PaidIdentityStore:
    """PostgreSQL store when a database is configured, in-memory otherwise."""
    if database_url:
        logger.info("using postgres paid-identity store")
        return PostgresPaidIdentityStore(database_url)
    logger.warning("DATABASE_URL not set - paid identities are kept in memory only")
    return InMemoryPaidIdentityStore()
