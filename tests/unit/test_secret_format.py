from __future__ import annotations

import pytest

from zoo_auth.domain.auth.credentials import (
    CredentialInputError,
    normalize_customer_email,
    require_supplied_password,
    validate_new_password,
)
from zoo_auth.domain.auth.secret_format import (
    StoredSecretFormat,
    classify_stored_secret,
    is_bcrypt_prefixed,
)

VALID_DIGEST = "$2b$10$" + "N9qo8uLOickgx2ZMRZoMye" + "IjZAgcfl7p92ldGxad68LJZdL17lhWy"


@pytest.mark.parametrize("prefix", ["$2a$", "$2b$", "$2y$"])
def test_all_bcrypt_version_prefixes_classify_as_hash(prefix: str) -> None:
    stored = prefix + VALID_DIGEST[4:]

    assert is_bcrypt_prefixed(stored) is True
    assert classify_stored_secret(stored) is StoredSecretFormat.BCRYPT_HASH


@pytest.mark.parametrize("stored", ["hunter2", "", None, "$2x$10$abc", "2b$10$abc", " $2b$10$"])
def test_values_without_bcrypt_prefix_are_not_hashes(stored: str | None) -> None:
    assert is_bcrypt_prefixed(stored) is False
    assert classify_stored_secret(stored) is StoredSecretFormat.NOT_A_HASH


@pytest.mark.parametrize(
    "stored",
    [
        "$2b$",
        "$2b$10$tooshort",
        "$2b$1$" + VALID_DIGEST[7:],
        "$2b$99$" + VALID_DIGEST[7:],
        VALID_DIGEST + "x",
        VALID_DIGEST[:-1] + "!",
    ],
)
def test_prefixed_values_that_do_not_parse_are_malformed(stored: str) -> None:
    assert is_bcrypt_prefixed(stored) is True
    assert classify_stored_secret(stored) is StoredSecretFormat.MALFORMED


def test_email_is_trimmed_and_lowercased() -> None:
    assert normalize_customer_email(email="  Visitor@Zoo.Example ") == "visitor@zoo.example"


def test_blank_email_is_rejected() -> None:
    with pytest.raises(CredentialInputError):
        normalize_customer_email(email="   ")


def test_supplied_password_is_returned_unchanged() -> None:
    assert require_supplied_password(password=" hunter2 ") == " hunter2 "

    with pytest.raises(CredentialInputError):
        require_supplied_password(password="")


@pytest.mark.parametrize("password", ["short", "ü" * 37])
def test_new_password_length_bounds(password: str) -> None:
    with pytest.raises(CredentialInputError):
        validate_new_password(password=password)


def test_new_password_at_minimum_length_is_accepted() -> None:
    assert validate_new_password(password="sixsix") == "sixsix"
