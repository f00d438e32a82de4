"""Batch sweep upgrading plaintext customer secrets to bcrypt digests."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum

from zoo_auth.application.ports.customer_repository_port import (
    CredentialStoreError,
    CustomerRepositoryPort,
)
from zoo_auth.application.ports.password_hasher_port import PasswordHashingError
from zoo_auth.application.services.credential_service import CredentialService
from zoo_auth.domain.auth.secret_format import is_bcrypt_prefixed

logger = logging.getLogger(__name__)

ALREADY_HASHED = "already_hashed"


class MigrationOutcome(StrEnum):
    """Per-record outcome of one sweep."""

    MIGRATED = "migrated"
    WOULD_MIGRATE = "would_migrate"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RecordMigrationResult:
    """Outcome for one credential record."""

    customer_id: int
    outcome: MigrationOutcome
    detail: str | None = None


@dataclass(frozen=True)
class MigrationReport:
    """Aggregate sweep report."""

    dry_run: bool
    results: list[RecordMigrationResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def needing_migration(self) -> int:
        """Count of records classified as plaintext, identical for dry and real runs."""

        return sum(1 for result in self.results if result.detail != ALREADY_HASHED)

    def count(self, outcome: MigrationOutcome) -> int:
        return self.counts()[outcome]

    def counts(self) -> Counter[MigrationOutcome]:
        return Counter(result.outcome for result in self.results)


class CredentialMigrationService:
    """Sweep every stored credential and rehash remaining plaintext values."""

    def __init__(
        self,
        *,
        customers: CustomerRepositoryPort,
        credentials: CredentialService,
    ) -> None:
        self._customers = customers
        self._credentials = credentials

    async def sweep(self, *, dry_run: bool = False) -> MigrationReport:
        """Classify all records and migrate plaintext ones unless `dry_run`.

        Listing failures propagate as `CredentialStoreError`; failures on single
        records are recorded in the report and the sweep continues.
        """

        records = await self._customers.list_credentials()
        logger.info("credential_sweep_started total=%s dry_run=%s", len(records), dry_run)

        results: list[RecordMigrationResult] = []
        for record in records:
            if is_bcrypt_prefixed(record.secret):
                results.append(
                    RecordMigrationResult(
                        customer_id=record.customer_id,
                        outcome=MigrationOutcome.SKIPPED,
                        detail=ALREADY_HASHED,
                    )
                )
                continue

            if dry_run:
                results.append(
                    RecordMigrationResult(
                        customer_id=record.customer_id,
                        outcome=MigrationOutcome.WOULD_MIGRATE,
                    )
                )
                continue

            results.append(
                await self._migrate_record(customer_id=record.customer_id, secret=record.secret)
            )

        report = MigrationReport(dry_run=dry_run, results=results)
        counts = report.counts()
        logger.info(
            (
                "credential_sweep_finished total=%s needing_migration=%s "
                "migrated=%s failed=%s skipped=%s"
            ),
            report.total,
            report.needing_migration,
            counts[MigrationOutcome.MIGRATED],
            counts[MigrationOutcome.FAILED],
            counts[MigrationOutcome.SKIPPED],
        )
        return report

    async def _migrate_record(self, *, customer_id: int, secret: str) -> RecordMigrationResult:
        try:
            new_hash = self._credentials.hash(secret)
        except PasswordHashingError as exc:
            logger.warning(
                "credential_sweep_record_failed customer_id=%s reason=%s",
                customer_id,
                exc,
            )
            return RecordMigrationResult(
                customer_id=customer_id,
                outcome=MigrationOutcome.FAILED,
                detail=str(exc),
            )

        try:
            written = await self._customers.update_secret(
                customer_id=customer_id,
                new_secret=new_hash,
                expected_secret=secret,
            )
        except CredentialStoreError as exc:
            logger.warning(
                "credential_sweep_record_failed customer_id=%s reason=%s",
                customer_id,
                exc,
            )
            return RecordMigrationResult(
                customer_id=customer_id,
                outcome=MigrationOutcome.FAILED,
                detail=str(exc),
            )

        if not written:
            return RecordMigrationResult(
                customer_id=customer_id,
                outcome=MigrationOutcome.SKIPPED,
                detail="changed_concurrently",
            )
        return RecordMigrationResult(customer_id=customer_id, outcome=MigrationOutcome.MIGRATED)
