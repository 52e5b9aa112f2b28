"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add backend directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    backend_path = project_root / "backend"
    if str(backend_path) not in sys.path:
        sys.path.insert(0, str(backend_path))


@pytest.fixture()
def db(tmp_path):
    from database import Database

    database = Database(str(tmp_path / "opportunities.db"))
    try:
        yield database
    finally:
        database.close()
