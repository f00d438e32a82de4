"""Application authentication service for customer accounts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from zoo_auth.application.ports.customer_repository_port import (
    CredentialRecord,
    CredentialStoreError,
    CustomerCreateInput,
    CustomerProfileUpdateInput,
    CustomerRecord,
    CustomerRepositoryPort,
    DuplicateCustomerEmailError,
)
from zoo_auth.application.services.credential_service import CredentialService
from zoo_auth.domain.auth.credentials import (
    CredentialInputError,
    normalize_customer_email,
    require_supplied_password,
    validate_new_password,
)

logger = logging.getLogger(__name__)


class AuthOutcome(StrEnum):
    """Supported authentication outcomes."""

    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_FOUND = "not_found"
    EMAIL_TAKEN = "email_taken"


@dataclass(frozen=True)
class AuthResult:
    """Authentication result model."""

    outcome: AuthOutcome
    customer: CustomerRecord | None = None


@dataclass(frozen=True)
class RegistrationInput:
    """Raw registration fields supplied by a customer."""

    first_name: str
    last_name: str
    email: str
    phone: str | None
    password: str


class CustomerAuthService:
    """Register, authenticate and manage customer credentials."""

    def __init__(
        self,
        *,
        customers: CustomerRepositoryPort,
        credentials: CredentialService,
    ) -> None:
        self._customers = customers
        self._credentials = credentials

    async def register(self, payload: RegistrationInput) -> AuthResult:
        """Create one customer account storing only a hashed secret."""

        first_name = _require_name(payload.first_name, field="first name")
        last_name = _require_name(payload.last_name, field="last name")
        email = normalize_customer_email(email=payload.email)
        password = validate_new_password(password=payload.password)

        if await self._customers.email_in_use(email=email):
            return AuthResult(outcome=AuthOutcome.EMAIL_TAKEN)

        try:
            customer = await self._customers.create_customer(
                CustomerCreateInput(
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                    phone=_optional_phone(payload.phone),
                    password_hash=self._credentials.hash(password),
                )
            )
        except DuplicateCustomerEmailError:
            return AuthResult(outcome=AuthOutcome.EMAIL_TAKEN)

        logger.info("customer_registered customer_id=%s", customer.customer_id)
        return AuthResult(outcome=AuthOutcome.SUCCESS, customer=customer)

    async def authenticate(self, *, email: str, password: str) -> AuthResult:
        """Authenticate customer credentials, upgrading legacy plaintext storage.

        Unknown accounts and wrong secrets yield the same outcome. Storage
        failures while loading the account propagate as `CredentialStoreError`.
        """

        normalized_email = normalize_customer_email(email=email)
        require_supplied_password(password=password)

        credential = await self._customers.get_credential_by_email(email=normalized_email)
        if credential is None:
            logger.info("customer_login_failed reason=invalid_credentials")
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        result = self._credentials.verify(
            supplied_secret=password,
            stored_secret=credential.secret,
        )
        if not result.matched:
            logger.info(
                "customer_login_failed customer_id=%s reason=invalid_credentials",
                credential.customer_id,
            )
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        if result.new_hash is not None:
            await self._persist_rehash(credential=credential, new_hash=result.new_hash)

        customer = await self._customers.get_customer(customer_id=credential.customer_id)
        if customer is None:
            # Account deleted between credential read and profile read.
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        logger.info(
            "customer_login_success customer_id=%s rehashed=%s",
            customer.customer_id,
            result.rehash_needed,
        )
        return AuthResult(outcome=AuthOutcome.SUCCESS, customer=customer)

    async def change_password(
        self,
        *,
        customer_id: int,
        current_password: str,
        new_password: str,
    ) -> AuthResult:
        """Replace a customer's secret after verifying the current one."""

        require_supplied_password(password=current_password)
        validate_new_password(password=new_password)

        credential = await self._customers.get_credential_by_id(customer_id=customer_id)
        if credential is None:
            return AuthResult(outcome=AuthOutcome.NOT_FOUND)

        result = self._credentials.verify(
            supplied_secret=current_password,
            stored_secret=credential.secret,
        )
        if not result.matched:
            logger.info(
                "customer_password_change_rejected customer_id=%s reason=invalid_credentials",
                customer_id,
            )
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        written = await self._customers.update_secret(
            customer_id=customer_id,
            new_secret=self._credentials.hash(new_password),
            expected_secret=credential.secret,
        )
        if not written:
            # Stored secret changed after it was verified; the caller must retry.
            logger.info(
                "customer_password_change_rejected customer_id=%s reason=concurrent_update",
                customer_id,
            )
            return AuthResult(outcome=AuthOutcome.INVALID_CREDENTIALS)

        logger.info(
            "customer_password_changed customer_id=%s from_plaintext=%s",
            customer_id,
            result.rehash_needed,
        )
        return AuthResult(outcome=AuthOutcome.SUCCESS)

    async def get_profile(self, *, customer_id: int) -> AuthResult:
        """Return one customer profile."""

        customer = await self._customers.get_customer(customer_id=customer_id)
        if customer is None:
            return AuthResult(outcome=AuthOutcome.NOT_FOUND)
        return AuthResult(outcome=AuthOutcome.SUCCESS, customer=customer)

    async def update_profile(
        self,
        *,
        customer_id: int,
        first_name: str,
        last_name: str,
        email: str,
        phone: str | None,
    ) -> AuthResult:
        """Update profile fields while keeping emails unique."""

        payload = CustomerProfileUpdateInput(
            customer_id=customer_id,
            first_name=_require_name(first_name, field="first name"),
            last_name=_require_name(last_name, field="last name"),
            email=normalize_customer_email(email=email),
            phone=_optional_phone(phone),
        )
        if await self._customers.email_in_use(
            email=payload.email,
            exclude_customer_id=customer_id,
        ):
            return AuthResult(outcome=AuthOutcome.EMAIL_TAKEN)

        try:
            customer = await self._customers.update_profile(payload)
        except DuplicateCustomerEmailError:
            return AuthResult(outcome=AuthOutcome.EMAIL_TAKEN)
        if customer is None:
            return AuthResult(outcome=AuthOutcome.NOT_FOUND)
        return AuthResult(outcome=AuthOutcome.SUCCESS, customer=customer)

    async def _persist_rehash(self, *, credential: CredentialRecord, new_hash: str) -> None:
        """Write upgraded digest; failures never affect the login decision."""

        try:
            written = await self._customers.update_secret(
                customer_id=credential.customer_id,
                new_secret=new_hash,
                expected_secret=credential.secret,
            )
        except CredentialStoreError:
            logger.warning(
                "customer_rehash_persist_failed customer_id=%s",
                credential.customer_id,
                exc_info=True,
            )
            return
        logger.info(
            "customer_rehash_persisted customer_id=%s written=%s",
            credential.customer_id,
            written,
        )


def _require_name(value: str, *, field: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise CredentialInputError(f"{field} cannot be blank")
    return normalized


def _optional_phone(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
