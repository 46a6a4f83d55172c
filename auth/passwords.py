"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error. Direct bcrypt usage is simpler and has no
compatibility shim.

Each hash string is self-describing: "$2b$<cost>$<salt><digest>". verify()
reads the salt and cost out of the stored hash, so changing the configured
rounds only affects hashes written afterwards.

Layer rule: no imports from api/ or blog/.
"""

from __future__ import annotations

import bcrypt


class PasswordHasher:
    """One-way salted password hashing with a tunable work factor.

    Usage:
        hasher = PasswordHasher(rounds=12)
        hashed = hasher.hash("secret1")
        hasher.verify("secret1", hashed)   # True
        hasher.verify("nope", hashed)      # False
    """

    MAX_BYTES = 72

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        # Timing equalization dummy hash. Computed once so the first failed
        # login is not measurably slower than later ones. See dummy_verify().
        self._dummy_hash = self.hash("inkwell_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of plain, salted freshly on every call.

        Raises ValueError if plain is longer than MAX_BYTES once UTF-8 encoded.
        bcrypt cannot hash past that; request models reject such passwords first.
        """
        encoded = plain.encode("utf-8")
        if len(encoded) > self.MAX_BYTES:
            raise ValueError(f"Password is longer than {self.MAX_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches hashed. Malformed hashes return False."""
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    def dummy_verify(self, plain: str) -> None:
        """Burn one verification's worth of time.

        Called when the username does not exist so the response time matches a
        wrong-password attempt and does not reveal which case occurred.
        """
        self.verify(plain, self._dummy_hash)
