"""Bcrypt password hasher adapter."""

from __future__ import annotations

import bcrypt

from zoo_auth.application.ports.password_hasher_port import (
    PasswordHasherPort,
    PasswordHashingError,
)
from zoo_auth.domain.auth.credentials import MAX_PASSWORD_BYTES

DEFAULT_COST_FACTOR = 10
MIN_COST_FACTOR = 10
MAX_COST_FACTOR = 15


def validate_cost_factor(cost_factor: int) -> int:
    """Return cost factor when it lies within the supported interactive range."""

    if not MIN_COST_FACTOR <= cost_factor <= MAX_COST_FACTOR:
        raise ValueError(
            f"bcrypt cost factor must be between {MIN_COST_FACTOR} and {MAX_COST_FACTOR}"
        )
    return cost_factor


class BcryptPasswordHasher(PasswordHasherPort):
    """Password hashing adapter using bcrypt."""

    def __init__(self, *, cost_factor: int = DEFAULT_COST_FACTOR) -> None:
        self._cost_factor = validate_cost_factor(cost_factor)

    @property
    def cost_factor(self) -> int:
        return self._cost_factor

    def hash_password(self, password: str, *, cost_factor: int | None = None) -> str:
        rounds = self._cost_factor if cost_factor is None else validate_cost_factor(cost_factor)
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise PasswordHashingError(f"password exceeds {MAX_PASSWORD_BYTES} bytes")
        try:
            return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("utf-8")
        except ValueError as exc:
            raise PasswordHashingError("password cannot be hashed") from exc

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(
                password.encode("utf-8")[:MAX_PASSWORD_BYTES],
                password_hash.encode("utf-8"),
            )
        except ValueError:
            return False
