"""Global test fixtures for abortable."""

from __future__ import annotations

from typing import Any

import pytest

from abortable import AbortController


@pytest.fixture
def controller() -> AbortController:
    """Provide a fresh external abort controller."""
    return AbortController()


@pytest.fixture
def recorded() -> list[Any]:
    """Collect values passed to listeners, in call order."""
    return []
