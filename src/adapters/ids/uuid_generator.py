"""
UUID id generator adapter - Implements IdGenerator protocol.

Random UUID4 strings: 122 random bits, so collisions are possible
but negligible. The domain service still checks each id against the
repository before use.
"""

import uuid


class UuidGenerator:
    """Implements IdGenerator protocol via uuid.uuid4()."""

    def generate(self) -> str:
        return str(uuid.uuid4())
