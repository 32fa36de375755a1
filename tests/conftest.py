"""
tests.conftest

Shared fixtures for the order tracker test-suite.
"""

from __future__ import annotations

import pytest

from .fakes import FakeGeocoder


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


# --- Module Notes -----------------------------------------------------------
# Builders and fakes live in tests.fakes so test modules can import them directly.
