"""Tests for migrations/env_helpers.py URL normalization."""

from __future__ import annotations

import os
import sys
from unittest.mock import patch

import pytest

# Make migrations importable without alembic context
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from migrations.env_helpers import _get_database_url  # noqa: E402


class TestGetDatabaseUrl:
    def test_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(RuntimeError):
                _get_database_url()

    def test_rejects_non_url(self):
        with patch.dict(os.environ, {"DATABASE_URL": "dbname=x user=y"}, clear=True):
            with pytest.raises(RuntimeError):
                _get_database_url()

    @pytest.mark.parametrize(
        "raw",
        ["postgres://u:p@h/db", "postgresql://u:p@h/db", "postgresql+psycopg2://u:p@h/db"],
    )
    def test_normalizes_scheme(self, raw):
        with patch.dict(os.environ, {"DATABASE_URL": raw}, clear=True):
            assert _get_database_url() == "postgresql+psycopg2://u:p@h/db"

    def test_injects_db_password(self):
        env = {"DATABASE_URL": "postgresql://u@h:5433/db", "DB_PASSWORD": "s3cret"}
        with patch.dict(os.environ, env, clear=True):
            assert _get_database_url() == "postgresql+psycopg2://u:s3cret@h:5433/db"

    def test_keeps_existing_password(self):
        env = {"DATABASE_URL": "postgresql://u:p@h/db", "DB_PASSWORD": "other"}
        with patch.dict(os.environ, env, clear=True):
            assert _get_database_url() == "postgresql+psycopg2://u:p@h/db"
