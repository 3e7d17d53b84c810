"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Request

from src.adapters.ids.uuid_generator import UuidGenerator
from src.adapters.repository.json_file import JsonFileIdentityRepository
from src.adapters.security.bcrypt_hasher import BcryptPasswordHasher
from src.config.settings import get_settings
from src.domain.identity import IdentityService

# Module-level singleton - UuidGenerator is stateless
_id_generator = UuidGenerator()


def get_repository(request: Request) -> JsonFileIdentityRepository:
    """
    Get the identity repository from app state.

    The repository is created and loaded during app lifespan startup.
    """
    return request.app.state.repository


def get_hasher(request: Request) -> BcryptPasswordHasher:
    """Get the password hasher from app state."""
    return request.app.state.hasher


def get_id_generator() -> UuidGenerator:
    """Get UUID generator (singleton)."""
    return _id_generator


def get_identity_service(request: Request) -> IdentityService:
    """
    Create identity service with injected dependencies.

    Wires together the repository, hasher and id generator for the domain service.
    """
    return IdentityService(
        repository=get_repository(request),
        hasher=get_hasher(request),
        id_generator=get_id_generator(),
        id_max_attempts=get_settings().id_max_attempts,
    )
