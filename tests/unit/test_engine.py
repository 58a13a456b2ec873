"""Unit tests for database URL handling."""

import pytest

from backend.docqa.config import Settings
from backend.docqa.db.engine import (
    create_async_engine_from_settings,
    normalize_async_url,
    normalize_sync_url,
)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("sqlite:///./docqa.db", "sqlite+aiosqlite:///./docqa.db"),
        ("postgresql://u:p@db/docqa", "postgresql+asyncpg://u:p@db/docqa"),
        ("sqlite+aiosqlite:///./docqa.db", "sqlite+aiosqlite:///./docqa.db"),
    ],
)
def test_normalize_async_url(url: str, expected: str) -> None:
    """Test sync driver URLs gain the async driver the service uses."""
    assert normalize_async_url(url) == expected


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("sqlite+aiosqlite:///./docqa.db", "sqlite:///./docqa.db"),
        ("postgresql+asyncpg://u:p@db/docqa", "postgresql://u:p@db/docqa"),
        ("postgresql://u:p@db/docqa", "postgresql://u:p@db/docqa"),
    ],
)
def test_normalize_sync_url(url: str, expected: str) -> None:
    """Test migration URLs drop the async driver."""
    assert normalize_sync_url(url) == expected


def test_engine_requires_database_url() -> None:
    """Test a missing DATABASE_URL is rejected before connecting."""
    with pytest.raises(ValueError):
        create_async_engine_from_settings(Settings(database_url=None))
