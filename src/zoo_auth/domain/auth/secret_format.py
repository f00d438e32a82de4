"""Format classification for stored customer secrets."""

from __future__ import annotations

import re
from enum import StrEnum

BCRYPT_PREFIX_PATTERN = re.compile(r"^\$2[aby]\$")
BCRYPT_HASH_PATTERN = re.compile(r"^\$2[aby]\$(?P<cost>\d{2})\$[./A-Za-z0-9]{53}$")


class StoredSecretFormat(StrEnum):
    """Tri-state classification of one stored secret value."""

    BCRYPT_HASH = "bcrypt_hash"
    NOT_A_HASH = "not_a_hash"
    MALFORMED = "malformed"


def is_bcrypt_prefixed(stored: str | None) -> bool:
    """Return whether the stored value carries a bcrypt version prefix."""

    if not stored:
        return False
    return BCRYPT_PREFIX_PATTERN.match(stored) is not None


def classify_stored_secret(stored: str | None) -> StoredSecretFormat:
    """Classify a stored secret as bcrypt hash, legacy plaintext, or malformed hash."""

    if stored is None or not is_bcrypt_prefixed(stored):
        return StoredSecretFormat.NOT_A_HASH
    match = BCRYPT_HASH_PATTERN.match(stored)
    if match is None:
        return StoredSecretFormat.MALFORMED
    # bcrypt accepts log rounds 4..31 only.
    if not 4 <= int(match.group("cost")) <= 31:
        return StoredSecretFormat.MALFORMED
    return StoredSecretFormat.BCRYPT_HASH
