"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for identity records.
It defines its own port interfaces for infrastructure abstraction,
ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    EmailAlreadyRegistered,
    IdentifierExhausted,
    IdentityError,
    InvalidCredentials,
    MissingRequiredFields,
    NoUsersFound,
    PasswordTooLong,
    StorageError,
    UserNotFound,
)
from .identity import IdentityService
from .models import IdentityRecord, UserUpdate
from .ports import IdGenerator, IdentityRepository, PasswordHasher

__all__ = [
    "EmailAlreadyRegistered",
    "IdGenerator",
    "IdentifierExhausted",
    "IdentityError",
    "IdentityRecord",
    "IdentityRepository",
    "IdentityService",
    "InvalidCredentials",
    "MissingRequiredFields",
    "NoUsersFound",
    "PasswordHasher",
    "PasswordTooLong",
    "StorageError",
    "UserNotFound",
    "UserUpdate",
]
