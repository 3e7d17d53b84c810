"""
Domain exceptions - Semantic error types for identity management.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Messages may name an id or email, never a password or digest.
"""


class IdentityError(Exception):
    """Base class for identity domain errors."""

    pass


class UserNotFound(IdentityError):
    """No live record matches the given id or email."""

    pass


class EmailAlreadyRegistered(IdentityError):
    """Email (or id) is already held by another live record."""

    pass


class InvalidCredentials(IdentityError):
    """Password does not match the stored digest."""

    pass


class NoUsersFound(IdentityError):
    """The store holds zero records."""

    pass


class MissingRequiredFields(IdentityError):
    """A required registration field is missing or empty."""

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(f"Missing required fields: {', '.join(fields)}")


class IdentifierExhausted(IdentityError):
    """Every generated id collided with an existing record."""

    pass


class StorageError(IdentityError):
    """Snapshot could not be read or written."""

    pass


class PasswordTooLong(IdentityError):
    """Password exceeds the hasher's input limit."""

    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes
        super().__init__(f"Password longer than {max_bytes} bytes")
