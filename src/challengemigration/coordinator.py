"""
MigrationCoordinator - Orchestrates challenge migration runs.

The coordinator is the entry point for migrating legacy challenges. It
decides whether each legacy challenge needs (re)migration, drives the
builder, the canonical store and the resource migrator, and records
every attempt in the status ledger.

Per legacy id:
    NeedsCheck -> Skip
    NeedsCheck -> Queued -> InProgress -> Success | Failed

A record is skipped when its canonical counterpart already carries a
source timestamp at least as new as the legacy last-modified timestamp.

Concurrency:
    Records are processed strictly one after another. At most one run
    (a full batch or a single retry) is in flight at any time; the
    in-flight flag is checked and set without awaiting in between, so a
    second start is rejected before any state changes.

Usage:
    >>> coordinator = MigrationCoordinator(
    ...     source_reader=legacy_index,
    ...     audit_reader=audit_db,
    ...     canonical_store=challenge_store,
    ...     status_repo=ledger,
    ...     resource_migrator=resources,
    ...     builder=builder,
    ... )
    >>>
    >>> # Front end: start a run in the background
    >>> if not coordinator.trigger_migration():
    ...     return 409
    >>>
    >>> # Scripts and tests: run to completion
    >>> summary = await coordinator.process_all()
    >>> print(f"{summary.migrated} migrated, {summary.failed} failed")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from challengemigration.builder import ChallengeBuilder
from challengemigration.config import MigrationConfig
from challengemigration.exceptions import ConflictError, NotFoundError
from challengemigration.interfaces import (
    CanonicalStore,
    LegacyAuditReader,
    LegacySourceReader,
    ResourceMigrator,
)
from challengemigration.models import (
    BatchSummary,
    CanonicalChallenge,
    Decision,
    MigrationFilter,
    MigrationStatus,
    RecordOutcome,
    RunState,
    StatusFilter,
    StatusPage,
    as_utc,
)
from challengemigration.observability import (
    ATTR_BATCH_SIZE,
    ATTR_CHALLENGE_ID,
    ATTR_DECISION,
    ATTR_ERROR_TYPE,
    ATTR_FORCE_MIGRATE,
    ATTR_LEGACY_ID,
    ATTR_PAGE,
    Tracer,
    create_tracer,
)
from challengemigration.repositories.status import MigrationStatusRepository
from challengemigration.resolver import GroupTermResolver

logger = logging.getLogger(__name__)

ResolverFactory = Callable[[], GroupTermResolver]


@dataclass(frozen=True)
class CoordinatorStatus:
    """
    Snapshot of the coordinator state.

    Attributes:
        state: RUNNING while a run is in flight, IDLE otherwise.
        last_summary: Summary of the last completed full run.
        last_error: Error that aborted the last background run, if any.
    """

    state: RunState
    last_summary: BatchSummary | None = None
    last_error: str | None = None


@dataclass(frozen=True)
class _Evaluation:
    decision: Decision
    existing: CanonicalChallenge | None
    legacy_modified_at: datetime | None


class MigrationCoordinator:
    """
    Orchestrates migration of legacy challenges into the canonical store.

    Attributes:
        _source_reader: Legacy search index reader.
        _audit_reader: Legacy audit row reader.
        _canonical_store: Persistence gateway for canonical challenges.
        _status_repo: Status ledger.
        _resource_migrator: Migrates resources of a migrated challenge.
        _builder: Builder used by retries and single-record calls.
        _resolver_factory: Creates a fresh resolver for each full run.
        _running: Single-flight flag for runs and retries.
        _task: Background task started by trigger_migration/trigger_retry.
    """

    def __init__(
        self,
        source_reader: LegacySourceReader,
        audit_reader: LegacyAuditReader,
        canonical_store: CanonicalStore,
        status_repo: MigrationStatusRepository,
        resource_migrator: ResourceMigrator,
        builder: ChallengeBuilder,
        *,
        config: MigrationConfig | None = None,
        resolver_factory: ResolverFactory | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ):
        """
        Initialize the coordinator.

        Args:
            source_reader: Reader for legacy listings, details and timestamps
            audit_reader: Reader for legacy creator/updater columns
            canonical_store: Canonical challenge store
            status_repo: Status ledger
            resource_migrator: Resource migration collaborator
            builder: Challenge builder
            config: Migration configuration (batch size)
            resolver_factory: When given, each full run builds with a fresh
                resolver so group and term caches do not outlive the run
            tracer: Optional custom Tracer instance.
            enable_tracing: Whether to enable OpenTelemetry tracing
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._source_reader = source_reader
        self._audit_reader = audit_reader
        self._canonical_store = canonical_store
        self._status_repo = status_repo
        self._resource_migrator = resource_migrator
        self._builder = builder
        self._config = config or MigrationConfig()
        self._resolver_factory = resolver_factory

        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._last_summary: BatchSummary | None = None
        self._last_error: str | None = None

    # =========================================================================
    # Per-record operations
    # =========================================================================

    async def decide(self, legacy_id: int, force_migrate: bool = False) -> Decision:
        """
        Decide whether a legacy challenge needs (re)migration.

        Args:
            legacy_id: Legacy challenge id
            force_migrate: Migrate regardless of timestamps

        Returns:
            Decision.MIGRATE if forced, if no canonical record (or no
            recorded source timestamp) exists, or if the legacy timestamp
            is strictly newer than the recorded one; Decision.SKIP otherwise
        """
        evaluation = await self._evaluate(legacy_id, force_migrate)
        return evaluation.decision

    async def process_one(self, legacy_id: int, force_migrate: bool = False) -> RecordOutcome:
        """
        Migrate one legacy challenge if it needs it.

        Never raises for failures of the record itself: they end up as a
        Failed ledger entry and a FAILED outcome.

        A record that fails after its canonical challenge was saved (for
        instance in resource migration) already carries the legacy
        timestamp, so later non-forced runs skip it. Use retry_one.

        Args:
            legacy_id: Legacy challenge id
            force_migrate: Migrate regardless of timestamps

        Returns:
            SKIPPED, MIGRATED or FAILED
        """
        return await self._process_one(legacy_id, force_migrate, self._builder)

    async def retry_one(self, legacy_id: int) -> RecordOutcome:
        """
        Force migration of one legacy challenge.

        Raises:
            ConflictError: If a run or retry is already in flight.
        """
        self._acquire()
        try:
            return await self._retry(legacy_id)
        finally:
            self._release()

    # =========================================================================
    # Full runs
    # =========================================================================

    async def process_all(self, migration_filter: MigrationFilter | None = None) -> BatchSummary:
        """
        Process every legacy challenge, page by page.

        Args:
            migration_filter: Restricts the run to matching legacy
                challenges; None visits all of them

        Returns:
            Summary of the run

        Raises:
            ConflictError: If a run or retry is already in flight.
            MigrationError: If the list of legacy ids cannot be read.
        """
        self._acquire()
        try:
            return await self._run_all(migration_filter)
        finally:
            self._release()

    def trigger_migration(self, migration_filter: MigrationFilter | None = None) -> bool:
        """
        Start a full run in the background.

        Must be called from a running event loop.

        Args:
            migration_filter: Restricts the run to matching legacy challenges

        Returns:
            True if the run was started, False if one is already in flight

        Raises:
            RuntimeError: If there is no running event loop. No state is
                changed in that case.
        """
        loop = asyncio.get_running_loop()
        if self._running:
            logger.info("Migration already running; rejecting new run")
            return False
        self._acquire()
        self._task = loop.create_task(
            self._run_in_background(self._run_all(migration_filter), "full migration"),
            name="challenge_migration_all",
        )
        return True

    def trigger_retry(self, legacy_id: int) -> bool:
        """
        Start a forced migration of one legacy challenge in the background.

        Must be called from a running event loop.

        Returns:
            True if the retry was started, False if a run is in flight

        Raises:
            RuntimeError: If there is no running event loop. No state is
                changed in that case.
        """
        loop = asyncio.get_running_loop()
        if self._running:
            logger.info("Migration running; rejecting retry of %s", legacy_id)
            return False
        self._acquire()
        self._task = loop.create_task(
            self._run_in_background(self._retry(legacy_id), f"retry of {legacy_id}"),
            name=f"challenge_migration_retry_{legacy_id}",
        )
        return True

    async def wait(self) -> None:
        """Wait for the background run, if any, to finish."""
        task = self._task
        if task is not None:
            await task

    # =========================================================================
    # Status
    # =========================================================================

    def is_running(self) -> bool:
        return self._running

    def get_status(self) -> CoordinatorStatus:
        return CoordinatorStatus(
            state=RunState.RUNNING if self._running else RunState.IDLE,
            last_summary=self._last_summary,
            last_error=self._last_error,
        )

    def is_healthy(self) -> bool:
        """False when the last background run was aborted by an unexpected error."""
        return self._last_error is None

    async def query_status(
        self,
        status_filter: StatusFilter | None = None,
        page: int = 0,
        per_page: int = 50,
    ) -> StatusPage:
        """
        Query the status ledger.

        Raises:
            ValueError: If page < 0 or per_page < 1
        """
        return await self._status_repo.query(status_filter, page, per_page)

    # =========================================================================
    # Private methods
    # =========================================================================

    def _acquire(self) -> None:
        if self._running:
            raise ConflictError()
        self._running = True

    def _release(self) -> None:
        self._running = False

    async def _run_in_background(self, work: Awaitable[object], description: str) -> None:
        try:
            await work
            self._last_error = None
        except Exception as e:
            logger.exception("Background %s aborted: %s", description, e)
            self._last_error = str(e) or type(e).__name__
        finally:
            self._release()
            self._task = None

    async def _retry(self, legacy_id: int) -> RecordOutcome:
        logger.info("Retrying migration of challenge %s", legacy_id)
        return await self._process_one(legacy_id, True, self._builder)

    async def _run_all(self, migration_filter: MigrationFilter | None = None) -> BatchSummary:
        builder = self._builder
        if self._resolver_factory is not None:
            builder = builder.with_resolver(self._resolver_factory())

        batch_size = self._config.batch_size
        started_at = datetime.now(UTC)
        counts = {outcome: 0 for outcome in RecordOutcome}
        failed_ids: list[int] = []
        visited = 0

        with self._tracer.span(
            "challengemigration.coordinator.process_all",
            {ATTR_BATCH_SIZE: batch_size},
        ):
            if migration_filter is not None and not migration_filter.is_empty:
                logger.info(
                    "Starting challenge migration run with filter %s",
                    migration_filter.to_dict(),
                )
            else:
                logger.info("Starting challenge migration run")
            page = 0
            while True:
                with self._tracer.span(
                    "challengemigration.coordinator.list_legacy_ids",
                    {ATTR_PAGE: page, ATTR_BATCH_SIZE: batch_size},
                ):
                    id_page = await self._source_reader.list_legacy_ids(
                        page, batch_size, migration_filter=migration_filter
                    )

                if not id_page.ids:
                    break

                for legacy_id in id_page.ids:
                    outcome = await self._process_one(legacy_id, False, builder)
                    counts[outcome] += 1
                    visited += 1
                    if outcome is RecordOutcome.FAILED:
                        failed_ids.append(legacy_id)

                page += 1
                if len(id_page.ids) < batch_size or page * batch_size >= id_page.total:
                    break

        summary = BatchSummary(
            total=visited,
            migrated=counts[RecordOutcome.MIGRATED],
            skipped=counts[RecordOutcome.SKIPPED],
            failed=counts[RecordOutcome.FAILED],
            started_at=started_at,
            ended_at=datetime.now(UTC),
            failed_ids=failed_ids,
        )
        self._last_summary = summary
        logger.info(
            "Challenge migration run finished: %d visited, %d migrated, %d skipped, %d failed",
            summary.total,
            summary.migrated,
            summary.skipped,
            summary.failed,
        )
        return summary

    async def _evaluate(self, legacy_id: int, force_migrate: bool) -> _Evaluation:
        existing = await self._canonical_store.find_by_legacy_id(legacy_id)
        legacy_modified_at = await self._source_reader.get_last_modified(legacy_id)

        if force_migrate or existing is None:
            return _Evaluation(Decision.MIGRATE, existing, legacy_modified_at)

        recorded = existing.legacy.source_modified_at
        if recorded is None:
            return _Evaluation(Decision.MIGRATE, existing, legacy_modified_at)

        logger.debug(
            "Challenge %s recorded source date %s, legacy date %s",
            legacy_id,
            recorded,
            legacy_modified_at,
        )
        if legacy_modified_at is not None and as_utc(legacy_modified_at) > as_utc(recorded):
            return _Evaluation(Decision.MIGRATE, existing, legacy_modified_at)
        return _Evaluation(Decision.SKIP, existing, legacy_modified_at)

    async def _process_one(
        self,
        legacy_id: int,
        force_migrate: bool,
        builder: ChallengeBuilder,
    ) -> RecordOutcome:
        with self._tracer.span(
            "challengemigration.coordinator.process_one",
            {ATTR_LEGACY_ID: legacy_id, ATTR_FORCE_MIGRATE: force_migrate},
        ) as span:
            try:
                evaluation = await self._evaluate(legacy_id, force_migrate)
            except Exception as e:
                logger.error("Could not check challenge %s: %s", legacy_id, e)
                await self._record_failure(legacy_id, None, e)
                return RecordOutcome.FAILED

            if span:
                span.set_attribute(ATTR_DECISION, evaluation.decision.value)

            if evaluation.decision is Decision.SKIP:
                logger.info("Challenge %s is up to date; skipping", legacy_id)
                return RecordOutcome.SKIPPED

            existing = evaluation.existing
            challenge_id = existing.id if existing else None

            try:
                await self._status_repo.record_queued(legacy_id)
                await self._status_repo.record_start(legacy_id, evaluation.legacy_modified_at)
            except Exception as e:
                logger.error("Could not record start of challenge %s: %s", legacy_id, e)
                return RecordOutcome.FAILED

            saved = False
            try:
                listing = await self._source_reader.get_listing(legacy_id)
                if listing is None:
                    raise NotFoundError("listing", legacy_id, legacy_id=legacy_id)
                detail = await self._source_reader.get_detail(legacy_id)
                audit = await self._audit_reader.get_audit_info(legacy_id)

                challenge = await builder.build(
                    legacy_id,
                    listing,
                    detail,
                    audit,
                    source_modified_at=evaluation.legacy_modified_at,
                )
                challenge_id = await self._save(challenge, existing)
                saved = True

                resources = await self._resource_migrator.migrate_for_challenge(
                    legacy_id, challenge_id
                )
                logger.debug("Migrated %d resources for challenge %s", resources, legacy_id)
            except Exception as e:
                logger.error("Challenge migration failed for %s: %s", legacy_id, e)
                if saved:
                    logger.warning(
                        "Challenge %s was saved as %s before failing; later runs skip it "
                        "until the legacy record changes or it is retried",
                        legacy_id,
                        challenge_id,
                    )
                if span:
                    span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                await self._record_failure(legacy_id, challenge_id, e)
                return RecordOutcome.FAILED

            if span:
                span.set_attribute(ATTR_CHALLENGE_ID, challenge_id)

            try:
                await self._status_repo.record_end(
                    legacy_id, challenge_id, MigrationStatus.SUCCESS
                )
            except Exception as e:
                logger.error("Could not record success of challenge %s: %s", legacy_id, e)
                return RecordOutcome.FAILED

            logger.info("Migrated challenge %s -> %s", legacy_id, challenge_id)
            return RecordOutcome.MIGRATED

    async def _save(
        self,
        challenge: CanonicalChallenge,
        existing: CanonicalChallenge | None,
    ) -> str:
        """Update the existing canonical record, or create one."""
        if existing is not None and existing.id is not None:
            await self._canonical_store.update(
                existing.id, challenge.model_copy(update={"id": existing.id})
            )
            return existing.id
        return await self._canonical_store.create(challenge)

    async def _record_failure(
        self,
        legacy_id: int,
        challenge_id: str | None,
        error: Exception,
    ) -> None:
        message = str(error) or type(error).__name__
        try:
            await self._status_repo.record_end(
                legacy_id, challenge_id, MigrationStatus.FAILED, message
            )
        except Exception as e:
            logger.error("Could not record failure of challenge %s: %s", legacy_id, e)


__all__ = [
    "CoordinatorStatus",
    "MigrationCoordinator",
    "ResolverFactory",
]
