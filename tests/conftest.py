"""Shared fixtures for tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from schema_database import SchemaDatabase, reset_default_database


@pytest.fixture(autouse=True)
def clear_default_database() -> Iterator[None]:
    """Reset the process-wide database before and after each test."""
    reset_default_database()
    yield
    reset_default_database()


@pytest.fixture
def database() -> Iterator[SchemaDatabase]:
    """Provide a fresh, isolated database."""
    with SchemaDatabase() as db:
        yield db
