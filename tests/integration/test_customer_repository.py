from __future__ import annotations

from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.config import Config

from alembic import command
from zoo_auth.application.ports.customer_repository_port import (
    CredentialStoreError,
    CustomerCreateInput,
    CustomerProfileUpdateInput,
    DuplicateCustomerEmailError,
)
from zoo_auth.application.services.auth_service import AuthOutcome, CustomerAuthService
from zoo_auth.application.services.credential_service import CredentialService
from zoo_auth.infrastructure.db.customer_repository import SqlAlchemyCustomerRepository
from zoo_auth.infrastructure.db.session import create_session_factory
from zoo_auth.infrastructure.security.password_hasher import BcryptPasswordHasher


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


def _insert_customer(
    connection: sa.Connection,
    *,
    email: str,
    password: str,
    first_name: str = "Ada",
) -> int:
    result = connection.execute(
        sa.text(
            "INSERT INTO customers (first_name, last_name, email, customer_password) "
            "VALUES (:first_name, 'Keeper', :email, :password)"
        ),
        {"first_name": first_name, "email": email, "password": password},
    )
    return int(result.lastrowid)


def _read_password(sync_url: str, customer_id: int) -> str:
    with sa.create_engine(sync_url).begin() as connection:
        return str(
            connection.execute(
                sa.text("SELECT customer_password FROM customers WHERE customer_id = :id"),
                {"id": customer_id},
            ).scalar_one()
        )


@pytest.mark.asyncio
async def test_credential_lookup_by_email_and_id(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "repo_lookup.db")
    with sa.create_engine(sync_url).begin() as connection:
        customer_id = _insert_customer(connection, email="ada@zoo.example", password="hunter2")

    repo = SqlAlchemyCustomerRepository(create_session_factory(async_url))

    by_email = await repo.get_credential_by_email(email="ada@zoo.example")
    by_id = await repo.get_credential_by_id(customer_id=customer_id)
    missing = await repo.get_credential_by_email(email="nobody@zoo.example")

    assert by_email is not None
    assert by_email.secret == "hunter2"
    assert by_email == by_id
    assert missing is None


@pytest.mark.asyncio
async def test_profile_record_does_not_expose_password(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "repo_profile.db")
    with sa.create_engine(sync_url).begin() as connection:
        customer_id = _insert_customer(connection, email="ada@zoo.example", password="hunter2")

    repo = SqlAlchemyCustomerRepository(create_session_factory(async_url))
    profile = await repo.get_customer(customer_id=customer_id)

    assert profile is not None
    assert profile.email == "ada@zoo.example"
    assert "hunter2" not in repr(profile)


@pytest.mark.asyncio
async def test_update_secret_respects_expected_value_guard(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "repo_guard.db")
    with sa.create_engine(sync_url).begin() as connection:
        customer_id = _insert_customer(connection, email="ada@zoo.example", password="hunter2")

    repo = SqlAlchemyCustomerRepository(create_session_factory(async_url))

    stale = await repo.update_secret(
        customer_id=customer_id,
        new_secret="$2b$10$stale",
        expected_secret="not-the-current-value",
    )
    fresh = await repo.update_secret(
        customer_id=customer_id,
        new_secret="$2b$10$fresh",
        expected_secret="hunter2",
    )
    unguarded = await repo.update_secret(customer_id=customer_id, new_secret="$2b$10$final")
    missing = await repo.update_secret(customer_id=customer_id + 100, new_secret="x")

    assert stale is False
    assert fresh is True
    assert unguarded is True
    assert missing is False
    assert _read_password(sync_url, customer_id) == "$2b$10$final"


@pytest.mark.asyncio
async def test_list_credentials_is_ordered_by_customer_id(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "repo_list.db")
    with sa.create_engine(sync_url).begin() as connection:
        first = _insert_customer(connection, email="a@zoo.example", password="one")
        second = _insert_customer(connection, email="b@zoo.example", password="two")

    repo = SqlAlchemyCustomerRepository(create_session_factory(async_url))
    records = await repo.list_credentials()

    assert [(r.customer_id, r.secret) for r in records] == [(first, "one"), (second, "two")]


@pytest.mark.asyncio
async def test_create_customer_and_duplicate_email(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "repo_create.db")
    repo = SqlAlchemyCustomerRepository(create_session_factory(async_url))
    payload = CustomerCreateInput(
        first_name="Ada",
        last_name="Keeper",
        email="ada@zoo.example",
        phone="555-0100",
        password_hash="$2b$10$digest",
    )

    created = await repo.create_customer(payload)

    assert created.customer_id > 0
    assert created.phone == "555-0100"
    assert await repo.email_in_use(email="ada@zoo.example") is True
    assert (
        await repo.email_in_use(email="ada@zoo.example", exclude_customer_id=created.customer_id)
        is False
    )
    with pytest.raises(DuplicateCustomerEmailError):
        await repo.create_customer(payload)


@pytest.mark.asyncio
async def test_update_profile_returns_none_for_unknown_customer(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "repo_update_profile.db")
    repo = SqlAlchemyCustomerRepository(create_session_factory(async_url))

    result = await repo.update_profile(
        CustomerProfileUpdateInput(
            customer_id=404,
            first_name="Nobody",
            last_name="Here",
            email="nobody@zoo.example",
            phone=None,
        )
    )

    assert result is None


@pytest.mark.asyncio
async def test_unreachable_database_raises_credential_store_error(tmp_path: Path) -> None:
    missing_dir = tmp_path / "does-not-exist"
    repo = SqlAlchemyCustomerRepository(
        create_session_factory(f"sqlite+aiosqlite:///{missing_dir / 'zoo.db'}")
    )

    with pytest.raises(CredentialStoreError):
        await repo.get_credential_by_email(email="ada@zoo.example")
    with pytest.raises(CredentialStoreError):
        await repo.list_credentials()


@pytest.mark.asyncio
async def test_mixed_case_legacy_email_logs_in_and_counts_as_taken(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "repo_mixed_case.db")
    with sa.create_engine(sync_url).begin() as connection:
        customer_id = _insert_customer(connection, email="Ada@Zoo.example", password="hunter2")

    repo = SqlAlchemyCustomerRepository(create_session_factory(async_url))
    service = CustomerAuthService(
        customers=repo,
        credentials=CredentialService(password_hasher=BcryptPasswordHasher()),
    )

    result = await service.authenticate(email="Ada@Zoo.example", password="hunter2")

    assert result.outcome == AuthOutcome.SUCCESS
    assert result.customer is not None
    assert result.customer.customer_id == customer_id
    assert await repo.email_in_use(email="ada@zoo.example") is True
    excluded = await repo.email_in_use(email="ada@zoo.example", exclude_customer_id=customer_id)
    assert excluded is False


@pytest.mark.asyncio
async def test_non_email_integrity_error_is_store_error(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "repo_not_null.db")
    repo = SqlAlchemyCustomerRepository(create_session_factory(async_url))
    payload = CustomerCreateInput(
        first_name=None,  # type: ignore[arg-type]
        last_name="Keeper",
        email="ada@zoo.example",
        phone=None,
        password_hash="$2b$10$" + "a" * 53,
    )

    with pytest.raises(CredentialStoreError):
        await repo.create_customer(payload)
