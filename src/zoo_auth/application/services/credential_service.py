"""Credential verification with transparent plaintext-to-bcrypt migration."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from zoo_auth.application.ports.password_hasher_port import (
    PasswordHasherPort,
    PasswordHashingError,
)
from zoo_auth.domain.auth.secret_format import StoredSecretFormat, classify_stored_secret

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of checking one supplied secret against one stored value.

    `new_hash` is set only when `rehash_needed` is true and the supplied secret
    could be hashed; persisting it is the caller's job.
    """

    matched: bool
    rehash_needed: bool = False
    new_hash: str | None = None


NO_MATCH = VerificationResult(matched=False)


class CredentialService:
    """Verify supplied secrets and compute digests for storage.

    Stored values are either bcrypt digests or, for accounts created before
    hashing was introduced, the plaintext itself. A plaintext match is accepted
    once and reported as needing a rehash so the caller can upgrade the row.
    """

    def __init__(self, *, password_hasher: PasswordHasherPort) -> None:
        self._password_hasher = password_hasher

    @property
    def cost_factor(self) -> int:
        return self._password_hasher.cost_factor

    def hash(self, secret: str, *, cost_factor: int | None = None) -> str:
        """Return a salted bcrypt digest of `secret`."""

        return self._password_hasher.hash_password(secret, cost_factor=cost_factor)

    def verify(self, *, supplied_secret: str, stored_secret: str | None) -> VerificationResult:
        """Check `supplied_secret` against a stored digest or legacy plaintext.

        Never raises for malformed stored values: anything that is not a
        well-formed bcrypt digest falls through to exact plaintext comparison.
        """

        if not supplied_secret or stored_secret is None:
            return NO_MATCH

        stored_format = classify_stored_secret(stored_secret)
        if stored_format is StoredSecretFormat.BCRYPT_HASH:
            hash_matched = self._password_hasher.verify_password(
                password=supplied_secret,
                password_hash=stored_secret,
            )
            if hash_matched:
                return VerificationResult(matched=True)

        # Bit-exact comparison; no unicode or whitespace normalization.
        if supplied_secret != stored_secret:
            return NO_MATCH

        if stored_format is StoredSecretFormat.MALFORMED:
            logger.warning("credential_malformed_hash_matched_as_plaintext")

        try:
            new_hash = self.hash(supplied_secret)
        except PasswordHashingError:
            logger.warning("credential_rehash_skipped reason=unhashable_plaintext")
            new_hash = None
        return VerificationResult(matched=True, rehash_needed=True, new_hash=new_hash)
