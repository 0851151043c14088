"""bcrypt password hashing."""

import bcrypt

DEFAULT_ROUNDS = 10
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Hashes and verifies passwords with bcrypt.

    Args:
        rounds: bcrypt cost factor.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        # Valid hash at the configured cost that matches no real password
        self.dummy_hash = self.hash(bcrypt.gensalt().decode("ascii"))

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt.

        Raises:
            ValueError: If the password is longer than 72 bytes.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify(self, password: str, hashed: str) -> bool:
        """Check a password against a bcrypt hash.

        Malformed hashes and over-long passwords verify as False.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("ascii"))
        except (ValueError, UnicodeEncodeError):
            return False

