"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition tests.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from src.adapters.repository.json_file import JsonFileIdentityRepository

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def reopen(users_file: Path) -> Callable[[], JsonFileIdentityRepository]:
    """Open a fresh repository on the same snapshot (simulated restart)."""

    def _reopen() -> JsonFileIdentityRepository:
        fresh = JsonFileIdentityRepository(users_file)
        fresh.load()
        return fresh

    return _reopen
