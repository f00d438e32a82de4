"""Password migration sweep entrypoint (plaintext -> bcrypt)."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from pydantic import ValidationError

from zoo_auth.application.ports.customer_repository_port import (
    CredentialStoreError,
    CustomerRepositoryPort,
)
from zoo_auth.application.services.credential_migration_service import (
    CredentialMigrationService,
    MigrationOutcome,
    MigrationReport,
)
from zoo_auth.application.services.credential_service import CredentialService
from zoo_auth.config.settings import load_settings
from zoo_auth.infrastructure.db.customer_repository import SqlAlchemyCustomerRepository
from zoo_auth.infrastructure.db.session import create_session_factory, dispose_session_factory
from zoo_auth.infrastructure.logging import configure_logging
from zoo_auth.infrastructure.security.password_hasher import BcryptPasswordHasher

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_arg_parser() -> argparse.ArgumentParser:
    """Build command-line parser for the sweep."""

    parser = argparse.ArgumentParser(
        prog="zoo-auth-migrate-passwords",
        description="Re-hash customer passwords still stored as plaintext.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="report records that would be migrated without writing",
    )
    return parser


def format_report(report: MigrationReport) -> list[str]:
    """Render one line per record plus an aggregate summary line."""

    lines = [
        f"customer_id={result.customer_id} outcome={result.outcome.value}"
        + (f" detail={result.detail}" if result.detail else "")
        for result in report.results
    ]
    counts = report.counts()
    lines.append(
        f"checked={report.total} needing_migration={report.needing_migration} "
        f"migrated={counts[MigrationOutcome.MIGRATED]} "
        f"would_migrate={counts[MigrationOutcome.WOULD_MIGRATE]} "
        f"skipped={counts[MigrationOutcome.SKIPPED]} "
        f"failed={counts[MigrationOutcome.FAILED]} "
        f"dry_run={str(report.dry_run).lower()}"
    )
    return lines


async def run_sweep(
    *,
    customers: CustomerRepositoryPort,
    credentials: CredentialService,
    dry_run: bool,
    out: TextIO,
) -> int:
    """Run one sweep, print its report and return the process exit code."""

    service = CredentialMigrationService(customers=customers, credentials=credentials)
    try:
        report = await service.sweep(dry_run=dry_run)
    except CredentialStoreError:
        logger.exception("credential_sweep_aborted reason=store_unavailable")
        return EXIT_FAILURE

    for line in format_report(report):
        print(line, file=out)
    return EXIT_OK


async def _run(*, dry_run: bool, out: TextIO) -> int:
    settings = load_settings()
    configure_logging(level=settings.log_level)

    session_factory = create_session_factory(settings.database_url)
    try:
        return await run_sweep(
            customers=SqlAlchemyCustomerRepository(session_factory),
            credentials=CredentialService(
                password_hasher=BcryptPasswordHasher(cost_factor=settings.bcrypt_cost_factor),
            ),
            dry_run=dry_run or settings.dry_run,
            out=out,
        )
    finally:
        await dispose_session_factory(session_factory)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run the sweep and return the exit status."""

    args = build_arg_parser().parse_args(argv)
    try:
        return asyncio.run(_run(dry_run=args.dry_run, out=sys.stdout))
    except ValidationError as exc:
        print(f"invalid configuration: {exc}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
