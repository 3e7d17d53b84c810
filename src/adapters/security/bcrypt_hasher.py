"""
bcrypt password hasher adapter - Implements PasswordHasher protocol.

Each hash() call draws a fresh salt, which bcrypt embeds in the
digest ($2b$<cost>$<salt+hash>). verify() recovers the salt from the
digest and compares in constant time via bcrypt.checkpw().
"""

import bcrypt


class BcryptPasswordHasher:
    """
    Implements PasswordHasher protocol via bcrypt.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, rounds: int = 10) -> None:
        """
        Args:
            rounds: bcrypt cost factor (work = 2**rounds)
        """
        self._rounds = rounds

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self._rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except ValueError:
            # Malformed digest (e.g. hand-edited snapshot)
            return False
