from __future__ import annotations

import logging

import bcrypt
import pytest

from zoo_auth.application.ports.password_hasher_port import PasswordHashingError
from zoo_auth.application.services.credential_service import CredentialService
from zoo_auth.domain.auth.secret_format import is_bcrypt_prefixed
from zoo_auth.infrastructure.security.password_hasher import BcryptPasswordHasher


class RecordingPasswordHasher:
    def __init__(self) -> None:
        self.verify_calls: list[tuple[str, str]] = []
        self.hash_calls: list[str] = []

    @property
    def cost_factor(self) -> int:
        return 10

    def hash_password(self, password: str, *, cost_factor: int | None = None) -> str:
        _ = cost_factor
        self.hash_calls.append(password)
        if len(password) > 72:
            raise PasswordHashingError("too long")
        return "$2b$10$" + "a" * 53

    def verify_password(self, *, password: str, password_hash: str) -> bool:
        self.verify_calls.append((password, password_hash))
        return False


@pytest.fixture(scope="module")
def service() -> CredentialService:
    return CredentialService(password_hasher=BcryptPasswordHasher())


def test_hashed_secret_matches_without_rehash(service: CredentialService) -> None:
    stored = service.hash("hunter2")

    result = service.verify(supplied_secret="hunter2", stored_secret=stored)

    assert result.matched is True
    assert result.rehash_needed is False
    assert result.new_hash is None


def test_different_secret_does_not_match_hash(service: CredentialService) -> None:
    stored = service.hash("correct-horse")

    result = service.verify(supplied_secret="battery-staple", stored_secret=stored)

    assert result.matched is False
    assert result.rehash_needed is False
    assert result.new_hash is None


def test_plaintext_match_returns_verifiable_new_hash(service: CredentialService) -> None:
    result = service.verify(supplied_secret="hunter2", stored_secret="hunter2")

    assert result.matched is True
    assert result.rehash_needed is True
    assert result.new_hash is not None
    assert is_bcrypt_prefixed(result.new_hash)
    assert result.new_hash.startswith("$2b$10$")

    upgraded = service.verify(supplied_secret="hunter2", stored_secret=result.new_hash)
    assert upgraded.matched is True
    assert upgraded.rehash_needed is False


def test_plaintext_comparison_is_bit_exact(service: CredentialService) -> None:
    assert service.verify(supplied_secret="hunter2 ", stored_secret="hunter2").matched is False
    assert service.verify(supplied_secret="Hunter2", stored_secret="hunter2").matched is False
    # NFC vs NFD forms of the same visible text.
    assert service.verify(supplied_secret="caf\u00e9", stored_secret="cafe\u0301").matched is False


def test_malformed_hash_equal_to_supplied_secret_falls_back_to_plaintext(
    caplog: pytest.LogCaptureFixture,
) -> None:
    hasher = RecordingPasswordHasher()
    service = CredentialService(password_hasher=hasher)
    malformed = "$2b$10$not-a-real-digest"

    with caplog.at_level(logging.WARNING):
        result = service.verify(supplied_secret=malformed, stored_secret=malformed)

    assert result.matched is True
    assert result.rehash_needed is True
    assert result.new_hash == "$2b$10$" + "a" * 53
    assert hasher.verify_calls == []
    assert "credential_malformed_hash_matched_as_plaintext" in caplog.text


def test_malformed_hash_never_raises_and_does_not_match(service: CredentialService) -> None:
    result = service.verify(supplied_secret="hunter2", stored_secret="$2b$10$broken")

    assert result.matched is False


@pytest.mark.parametrize("stored", [None, ""])
def test_missing_stored_secret_never_matches(
    service: CredentialService, stored: str | None
) -> None:
    assert service.verify(supplied_secret="hunter2", stored_secret=stored).matched is False


def test_empty_supplied_secret_never_matches_empty_stored_secret() -> None:
    hasher = RecordingPasswordHasher()
    service = CredentialService(password_hasher=hasher)

    result = service.verify(supplied_secret="", stored_secret="")

    assert result.matched is False
    assert hasher.hash_calls == []


def test_unhashable_plaintext_match_still_authenticates_without_new_hash() -> None:
    hasher = RecordingPasswordHasher()
    service = CredentialService(password_hasher=hasher)
    legacy = "p" * 80

    result = service.verify(supplied_secret=legacy, stored_secret=legacy)

    assert result.matched is True
    assert result.rehash_needed is True
    assert result.new_hash is None


def test_hash_accepts_explicit_cost_factor(service: CredentialService) -> None:
    digest = service.hash("hunter2", cost_factor=11)

    assert digest.startswith("$2b$11$")
    assert service.cost_factor == 10
    assert service.verify(supplied_secret="hunter2", stored_secret=digest).matched is True


def test_digest_of_truncated_secret_matches_full_long_secret(service: CredentialService) -> None:
    supplied = "z" * 80
    stored = bcrypt.hashpw(supplied.encode("utf-8")[:72], bcrypt.gensalt(rounds=10)).decode()

    result = service.verify(supplied_secret=supplied, stored_secret=stored)

    assert result.matched is True
    assert result.rehash_needed is False
