"""Shared normalization helpers for customer credential inputs."""

from __future__ import annotations

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72


class CredentialInputError(ValueError):
    """Raised when one credential input fails validation."""


def normalize_customer_email(*, email: str) -> str:
    """Normalize one customer email and reject blank values."""

    normalized = email.strip().lower()
    if not normalized:
        raise CredentialInputError("email cannot be blank")
    return normalized


def require_supplied_password(*, password: str) -> str:
    """Reject blank supplied passwords without altering the value."""

    if not password:
        raise CredentialInputError("password cannot be blank")
    return password


def validate_new_password(*, password: str) -> str:
    """Validate one password about to be hashed and stored."""

    if len(password) < MIN_PASSWORD_LENGTH:
        raise CredentialInputError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise CredentialInputError(f"password cannot exceed {MAX_PASSWORD_BYTES} bytes")
    return password
