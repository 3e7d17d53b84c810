"""
Domain models - Identity record and partial update types.

Plain dataclasses with no framework dependencies.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class IdentityRecord:
    """
    Stored representation of one user.

    password_hash is always a one-way digest; the plaintext never
    reaches this type.
    """

    id: str
    username: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class UserUpdate:
    """
    Partial update for an identity record.

    Fields left as None keep their current value.
    """

    username: str | None = None
    email: str | None = None
    password: str | None = None
