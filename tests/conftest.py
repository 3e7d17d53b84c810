"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A low-cost bcrypt hasher (cost 4) to keep tests fast
- A JSON file repository rooted in a per-test temporary directory
- An identity service wired to both
"""

from pathlib import Path

import pytest

from src.adapters.ids.uuid_generator import UuidGenerator
from src.adapters.repository.json_file import JsonFileIdentityRepository
from src.adapters.security.bcrypt_hasher import BcryptPasswordHasher
from src.domain.identity import IdentityService

TEST_BCRYPT_COST = 4


@pytest.fixture
def hasher() -> BcryptPasswordHasher:
    """bcrypt hasher at the minimum cost factor."""
    return BcryptPasswordHasher(rounds=TEST_BCRYPT_COST)


@pytest.fixture
def users_file(tmp_path: Path) -> Path:
    """Snapshot path inside the test's temporary directory."""
    return tmp_path / "users.json"


@pytest.fixture
def repository(users_file: Path) -> JsonFileIdentityRepository:
    """Loaded (empty) repository backed by users_file."""
    repo = JsonFileIdentityRepository(users_file)
    repo.load()
    return repo


@pytest.fixture
def service(
    repository: JsonFileIdentityRepository, hasher: BcryptPasswordHasher
) -> IdentityService:
    """Identity service over the real file repository."""
    return IdentityService(repository=repository, hasher=hasher, id_generator=UuidGenerator())
