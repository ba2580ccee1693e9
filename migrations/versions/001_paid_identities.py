"""paid_identities table.

Revision ID: 001_paid_identities
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op


revision = "001_paid_identities"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    conn = op.get_bind()
    conn.exec_driver_sql(
        """
        CREATE TABLE paid_identities (
            identity TEXT PRIMARY KEY,
            paid_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
        """
    )


def downgrade() -> None:
    conn = op.get_bind()
    conn.exec_driver_sql("DROP TABLE paid_identities;")
