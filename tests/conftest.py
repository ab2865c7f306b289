# tests/conftest.py

"""Shared pytest fixtures for the affiliate_bot test suite."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from src.config.settings import Settings


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[None, None, None]:
    """Patch time.sleep globally so retry waits run instantly."""
    with patch("time.sleep"):
        yield


@pytest.fixture(autouse=True)
def no_owner_accounts() -> Generator[None, None, None]:
    """Ignore OWNER_EMAILS / OWNER_USERNAMES from a developer's .env."""
    with (
        patch.object(Settings, "OWNER_EMAILS", []),
        patch.object(Settings, "OWNER_USERNAMES", []),
    ):
        yield
