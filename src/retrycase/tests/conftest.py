"""Shared fixtures for retrycase tests."""

import pytest

from retrycase import clear_settings_cache, reset_category_registry


@pytest.fixture(autouse=True)
def clean_globals() -> object:
    """Reset cached settings and category registrations around each test."""
    clear_settings_cache()
    reset_category_registry()
    yield
    clear_settings_cache()
    reset_category_registry()
