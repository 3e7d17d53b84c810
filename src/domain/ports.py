"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from contextlib import AbstractContextManager
from typing import Protocol

from .models import IdentityRecord


class IdentityRepository(Protocol):
    """
    Port interface for identity record persistence.

    Implementations own the authoritative id -> record mapping and
    persist it durably before a mutation returns.
    """

    def list_all(self) -> list[IdentityRecord]:
        """Return all live records in no particular order."""
        ...

    def get_by_id(self, user_id: str) -> IdentityRecord | None:
        """Return the record with this id, or None."""
        ...

    def get_by_email(self, email: str) -> IdentityRecord | None:
        """Return the record with this email (exact match), or None."""
        ...

    def insert(self, record: IdentityRecord) -> None:
        """
        Add a new record and persist.

        Raises:
            EmailAlreadyRegistered: If the id or email is already present
            StorageError: If the snapshot could not be written
        """
        ...

    def replace(self, user_id: str, record: IdentityRecord) -> None:
        """
        Replace the record stored under user_id and persist.

        Raises:
            UserNotFound: If user_id is absent
            EmailAlreadyRegistered: If record.email belongs to another record
            StorageError: If the snapshot could not be written
        """
        ...

    def delete(self, user_id: str) -> None:
        """
        Remove the record stored under user_id and persist.

        Raises:
            UserNotFound: If user_id is absent
            StorageError: If the snapshot could not be written
        """
        ...

    def locked(self) -> AbstractContextManager[None]:
        """
        Hold the single-writer lock.

        Lets the caller run a check-then-act sequence that no other
        mutation can interleave with.
        """
        ...


class PasswordHasher(Protocol):
    """Port interface for one-way password hashing."""

    def hash(self, password: str) -> str:
        """Return a salted digest of password."""
        ...

    def verify(self, password: str, password_hash: str) -> bool:
        """Return True if password matches password_hash."""
        ...


class IdGenerator(Protocol):
    """Port interface for record id generation."""

    def generate(self) -> str:
        """Return a random, statistically unique id."""
        ...
