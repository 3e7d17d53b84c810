"""
Identity domain service - Public operation contract for identity records.

This module contains the core business logic for user identity
management: registration, lookup, authentication, update and deletion.

Concurrency
===========

Password hashing is CPU-bound and runs before the writer lock is taken.
Every check-then-act sequence (uniqueness check + insert, read + replace)
runs inside repository.locked(), so two concurrent registrations for the
same email cannot both pass the uniqueness check.

Reads take no lock; the repository guarantees they never observe a
mapping mid-mutation.
"""

import logging
from dataclasses import dataclass, replace

from .exceptions import (
    EmailAlreadyRegistered,
    IdentifierExhausted,
    InvalidCredentials,
    MissingRequiredFields,
    NoUsersFound,
    PasswordTooLong,
    UserNotFound,
)
from .models import IdentityRecord, UserUpdate
from .ports import IdGenerator, IdentityRepository, PasswordHasher

logger = logging.getLogger(__name__)

# bcrypt only reads the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


@dataclass
class IdentityService:
    """
    Domain service for identity records.

    Orchestrates the id generator, password hasher and repository into
    the six public operations. All failures are raised as IdentityError
    subclasses for the transport layer to translate.
    """

    repository: IdentityRepository
    hasher: PasswordHasher
    id_generator: IdGenerator
    id_max_attempts: int = 5

    def list_users(self) -> list[IdentityRecord]:
        """
        Return all live records.

        Raises:
            NoUsersFound: If the store is empty
        """
        records = self.repository.list_all()
        if not records:
            raise NoUsersFound("No users at this time")
        return records

    def get_user(self, user_id: str) -> IdentityRecord:
        """
        Return the record with this id.

        Raises:
            UserNotFound: If no record has this id
        """
        record = self.repository.get_by_id(user_id)
        if record is None:
            raise UserNotFound(user_id)
        return record

    def register(self, username: str, email: str, password: str) -> IdentityRecord:
        """
        Create a new identity record.

        Args:
            username: Display name
            email: Login key, must not be registered yet (exact match)
            password: Plaintext password (will be hashed)

        Returns:
            The created record, digest included

        Raises:
            MissingRequiredFields: If any argument is empty
            PasswordTooLong: If password exceeds MAX_PASSWORD_BYTES
            EmailAlreadyRegistered: If email is already registered
            IdentifierExhausted: If no free id was found
            StorageError: If the snapshot could not be written
        """
        missing = [
            name
            for name, value in (("username", username), ("email", email), ("password", password))
            if not value
        ]
        if missing:
            raise MissingRequiredFields(missing)
        self._check_password_length(password)

        password_hash = self.hasher.hash(password)

        with self.repository.locked():
            if self.repository.get_by_email(email) is not None:
                raise EmailAlreadyRegistered(email)

            record = IdentityRecord(
                id=self._new_id(),
                username=username,
                email=email,
                password_hash=password_hash,
            )
            self.repository.insert(record)

        logger.info(f"Registered user {record.id}")
        return record

    def authenticate(self, email: str, password: str) -> IdentityRecord:
        """
        Verify a password for the record registered under email.

        The returned record includes its digest; stripping it is the
        transport layer's job.

        Raises:
            UserNotFound: If no record has this email
            InvalidCredentials: If the password does not match
        """
        record = self.repository.get_by_email(email)
        if record is None:
            raise UserNotFound(email)

        if not self.hasher.verify(password, record.password_hash):
            logger.info(f"Failed authentication for {email}")
            raise InvalidCredentials(email)

        return record

    def update_user(self, user_id: str, update: UserUpdate) -> IdentityRecord:
        """
        Overlay the fields present in update onto the current record.

        A new password is re-hashed. Fields left as None keep their
        prior value; fields that are present must not be empty.

        Raises:
            MissingRequiredFields: If a present field is empty
            PasswordTooLong: If the new password exceeds MAX_PASSWORD_BYTES
            UserNotFound: If no record has this id
            EmailAlreadyRegistered: If the new email belongs to another record
            StorageError: If the snapshot could not be written
        """
        empty = [
            name
            for name, value in (
                ("username", update.username),
                ("email", update.email),
                ("password", update.password),
            )
            if value is not None and not value
        ]
        if empty:
            raise MissingRequiredFields(empty)

        changes: dict[str, str] = {}
        if update.username is not None:
            changes["username"] = update.username
        if update.email is not None:
            changes["email"] = update.email
        if update.password is not None:
            self._check_password_length(update.password)
            changes["password_hash"] = self.hasher.hash(update.password)

        with self.repository.locked():
            current = self.get_user(user_id)
            updated = replace(current, **changes)
            self.repository.replace(user_id, updated)

        fields = ", ".join(sorted(changes)) or "no changes"
        logger.info(f"Updated user {user_id} ({fields})")
        return updated

    def delete_user(self, user_id: str) -> None:
        """
        Remove the record with this id.

        Raises:
            UserNotFound: If no record has this id
            StorageError: If the snapshot could not be written
        """
        self.repository.delete(user_id)
        logger.info(f"Deleted user {user_id}")

    def _new_id(self) -> str:
        """
        Draw ids until one is free.

        Must be called with the repository lock held.
        """
        for _ in range(self.id_max_attempts):
            candidate = self.id_generator.generate()
            if self.repository.get_by_id(candidate) is None:
                return candidate
        raise IdentifierExhausted(f"No free id after {self.id_max_attempts} attempts")

    def _check_password_length(self, password: str) -> None:
        """Reject passwords bcrypt would truncate or refuse."""
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            raise PasswordTooLong(MAX_PASSWORD_BYTES)
