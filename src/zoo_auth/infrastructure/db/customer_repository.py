"""SQLAlchemy adapter for customer accounts and stored credentials."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, cast

import sqlalchemy as sa
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from zoo_auth.application.ports.customer_repository_port import (
    CredentialRecord,
    CredentialStoreError,
    CustomerCreateInput,
    CustomerProfileUpdateInput,
    CustomerRecord,
    CustomerRepositoryPort,
    DuplicateCustomerEmailError,
)
from zoo_auth.infrastructure.db.metadata import customers

_PROFILE_COLUMNS = (
    customers.c.customer_id,
    customers.c.first_name,
    customers.c.last_name,
    customers.c.email,
    customers.c.phone,
    customers.c.created_at,
    customers.c.updated_at,
)
_CREDENTIAL_COLUMNS = (
    customers.c.customer_id,
    customers.c.email,
    customers.c.customer_password,
    customers.c.updated_at,
)


def _email_matches(email: str) -> sa.ColumnElement[bool]:
    # Legacy rows keep the email as typed at signup.
    return sa.func.lower(customers.c.email) == email


def _is_duplicate_email_error(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "uq_customers_email" in message or "customers.email" in message


class SqlAlchemyCustomerRepository(CustomerRepositoryPort):
    """Customer repository backed by SQLAlchemy async sessions.

    Driver and connection failures are raised as `CredentialStoreError` so
    callers can tell an unreachable store apart from a failed login.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_customer(self, *, customer_id: int) -> CustomerRecord | None:
        """Return customer profile by id or None."""

        statement = (
            sa.select(*_PROFILE_COLUMNS)
            .where(customers.c.customer_id == customer_id)
            .limit(1)
        )
        row = await self._fetch_one(statement)
        if row is None:
            return None
        return _to_customer_record(row)

    async def get_credential_by_id(self, *, customer_id: int) -> CredentialRecord | None:
        """Return stored credential for one customer id or None."""

        statement = (
            sa.select(*_CREDENTIAL_COLUMNS)
            .where(customers.c.customer_id == customer_id)
            .limit(1)
        )
        row = await self._fetch_one(statement)
        if row is None:
            return None
        return _to_credential_record(row)

    async def get_credential_by_email(self, *, email: str) -> CredentialRecord | None:
        """Return stored credential for one normalized email or None."""

        statement = sa.select(*_CREDENTIAL_COLUMNS).where(_email_matches(email)).limit(1)
        row = await self._fetch_one(statement)
        if row is None:
            return None
        return _to_credential_record(row)

    async def list_credentials(self) -> list[CredentialRecord]:
        """Return every stored credential ordered by customer id."""

        statement = sa.select(*_CREDENTIAL_COLUMNS).order_by(customers.c.customer_id.asc())
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                rows = result.mappings().all()
        except SQLAlchemyError as exc:
            raise CredentialStoreError("failed to list customer credentials") from exc
        return [_to_credential_record(row) for row in rows]

    async def email_in_use(self, *, email: str, exclude_customer_id: int | None = None) -> bool:
        """Return whether email belongs to a customer other than the excluded one."""

        statement = sa.select(customers.c.customer_id).where(_email_matches(email))
        if exclude_customer_id is not None:
            statement = statement.where(customers.c.customer_id != exclude_customer_id)
        row = await self._fetch_one(statement.limit(1))
        return row is not None

    async def create_customer(self, payload: CustomerCreateInput) -> CustomerRecord:
        """Insert one customer account and return the persisted profile."""

        statement = (
            sa.insert(customers)
            .values(
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
                phone=payload.phone,
                customer_password=payload.password_hash,
            )
        )
        try:
            async with self._session_factory() as session:
                result = cast(CursorResult[Any], await session.execute(statement))
                await session.commit()
        except IntegrityError as exc:
            if _is_duplicate_email_error(exc):
                raise DuplicateCustomerEmailError(email=payload.email) from exc
            raise CredentialStoreError("failed to create customer") from exc
        except SQLAlchemyError as exc:
            raise CredentialStoreError("failed to create customer") from exc

        inserted_key = result.inserted_primary_key
        if inserted_key is None:  # pragma: no cover - insert always yields a key here.
            raise CredentialStoreError("customer insert returned no primary key")
        created = await self.get_customer(customer_id=int(inserted_key[0]))
        if created is None:  # pragma: no cover - row was just committed.
            raise CredentialStoreError("created customer could not be reloaded")
        return created

    async def update_profile(self, payload: CustomerProfileUpdateInput) -> CustomerRecord | None:
        """Update profile fields and return the persisted profile or None."""

        statement = (
            sa.update(customers)
            .where(customers.c.customer_id == payload.customer_id)
            .values(
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
                phone=payload.phone,
                updated_at=_utcnow(),
            )
        )
        try:
            async with self._session_factory() as session:
                result = cast(CursorResult[Any], await session.execute(statement))
                await session.commit()
        except IntegrityError as exc:
            if _is_duplicate_email_error(exc):
                raise DuplicateCustomerEmailError(email=payload.email) from exc
            raise CredentialStoreError("failed to update customer profile") from exc
        except SQLAlchemyError as exc:
            raise CredentialStoreError("failed to update customer profile") from exc

        if int(result.rowcount or 0) == 0:
            return None
        return await self.get_customer(customer_id=payload.customer_id)

    async def update_secret(
        self,
        *,
        customer_id: int,
        new_secret: str,
        expected_secret: str | None = None,
    ) -> bool:
        """Replace stored secret, optionally only while it still equals `expected_secret`."""

        statement = sa.update(customers).where(customers.c.customer_id == customer_id)
        if expected_secret is not None:
            statement = statement.where(customers.c.customer_password == expected_secret)
        statement = statement.values(customer_password=new_secret, updated_at=_utcnow())

        try:
            async with self._session_factory() as session:
                result = cast(CursorResult[Any], await session.execute(statement))
                await session.commit()
        except SQLAlchemyError as exc:
            raise CredentialStoreError(
                f"failed to update credential for customer {customer_id}"
            ) from exc
        return int(result.rowcount or 0) > 0

    async def _fetch_one(self, statement: sa.Select[tuple[object, ...]]) -> sa.RowMapping | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                return result.mappings().first()
        except SQLAlchemyError as exc:
            raise CredentialStoreError("customer store query failed") from exc


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _to_customer_record(row: sa.RowMapping) -> CustomerRecord:
    return CustomerRecord(
        customer_id=int(row["customer_id"]),
        first_name=cast(str, row["first_name"]),
        last_name=cast(str, row["last_name"]),
        email=cast(str, row["email"]),
        phone=cast(str | None, row["phone"]),
        created_at=cast(datetime, row["created_at"]),
        updated_at=cast(datetime, row["updated_at"]),
    )


def _to_credential_record(row: sa.RowMapping) -> CredentialRecord:
    return CredentialRecord(
        customer_id=int(row["customer_id"]),
        email=cast(str, row["email"]),
        secret=cast(str | None, row["customer_password"]) or "",
        updated_at=cast(datetime, row["updated_at"]),
    )
