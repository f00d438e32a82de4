"""Port for customer account and credential persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


class CredentialStoreError(RuntimeError):
    """Raised when the customer store cannot be reached or rejects an operation."""


class DuplicateCustomerEmailError(ValueError):
    """Raised when a write would duplicate an existing customer email."""

    def __init__(self, *, email: str) -> None:
        super().__init__(f"email already registered: {email}")
        self.email = email


@dataclass(frozen=True)
class CustomerRecord:
    """Customer profile persistence model, never carrying the stored secret."""

    customer_id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class CredentialRecord:
    """Credential persistence model for one customer account."""

    customer_id: int
    email: str
    secret: str
    updated_at: datetime


@dataclass(frozen=True)
class CustomerCreateInput:
    """Input payload for creating one customer account."""

    first_name: str
    last_name: str
    email: str
    phone: str | None
    password_hash: str


@dataclass(frozen=True)
class CustomerProfileUpdateInput:
    """Input payload for updating one customer profile."""

    customer_id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None


class CustomerRepositoryPort(Protocol):
    """Customer repository contract."""

    async def get_customer(self, *, customer_id: int) -> CustomerRecord | None:
        """Return customer profile by id or None."""

    async def get_credential_by_id(self, *, customer_id: int) -> CredentialRecord | None:
        """Return stored credential for one customer id or None."""

    async def get_credential_by_email(self, *, email: str) -> CredentialRecord | None:
        """Return stored credential for one normalized email or None."""

    async def list_credentials(self) -> list[CredentialRecord]:
        """Return every stored credential ordered by customer id."""

    async def email_in_use(self, *, email: str, exclude_customer_id: int | None = None) -> bool:
        """Return whether email belongs to a customer other than the excluded one."""

    async def create_customer(self, payload: CustomerCreateInput) -> CustomerRecord:
        """Insert one customer account and return the persisted profile."""

    async def update_profile(self, payload: CustomerProfileUpdateInput) -> CustomerRecord | None:
        """Update profile fields and return the persisted profile or None."""

    async def update_secret(
        self,
        *,
        customer_id: int,
        new_secret: str,
        expected_secret: str | None = None,
    ) -> bool:
        """Replace stored secret, optionally only while it still equals `expected_secret`.

        Returns whether a row was written.
        """
