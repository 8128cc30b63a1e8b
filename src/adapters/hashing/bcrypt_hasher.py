"""
bcrypt credential hasher - Implements PasswordHasher protocol.

bcrypt salts every hash and its work factor makes offline guessing
expensive. Both hash() and verify() are deliberately slow, so callers
running inside an event loop must push them to a worker thread.
"""

import bcrypt

# bcrypt only reads the first 72 bytes of its input.
_MAX_SECRET_BYTES = 72


class BcryptPasswordHasher:
    """
    Implements PasswordHasher protocol via the bcrypt package.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, rounds: int = 10) -> None:
        """
        Args:
            rounds: bcrypt cost factor (10 or more in production)
        """
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        secret = plaintext.encode()[:_MAX_SECRET_BYTES]
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=self._rounds)).decode()

    def verify(self, plaintext: str, verifier: str) -> bool:
        """Constant-time comparison; a malformed verifier never matches."""
        secret = plaintext.encode()[:_MAX_SECRET_BYTES]
        try:
            return bcrypt.checkpw(secret, verifier.encode())
        except ValueError:
            return False
