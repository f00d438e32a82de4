"""Port for password hashing and verification."""

from __future__ import annotations

from typing import Protocol


class PasswordHashingError(ValueError):
    """Raised when a plaintext password cannot be hashed."""


class PasswordHasherPort(Protocol):
    """Password hashing/verification contract."""

    @property
    def cost_factor(self) -> int:
        """Return configured work factor used for new hashes."""

    def hash_password(self, password: str, *, cost_factor: int | None = None) -> str:
        """Hash plaintext password for storage."""

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        """Verify plaintext password against stored hash."""
