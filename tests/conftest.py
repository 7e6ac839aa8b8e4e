"""
Shared pytest fixtures for the challengemigration tests.

This module provides:
- Collaborator fakes (source_reader, group_directory, terms_catalog, ...)
- Ledger and store fixtures (status_repo, canonical_store)
- Assembled components (resolver, builder, coordinator)
- SQLite fixtures (sqlite_connection, sqlite_status_repo)
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import pytest
import pytest_asyncio

from challengemigration.builder import ChallengeBuilder
from challengemigration.config import MigrationConfig
from challengemigration.coordinator import MigrationCoordinator
from challengemigration.models import Project, Term
from challengemigration.observability import MockTracer
from challengemigration.repositories import (
    InMemoryMigrationStatusRepository,
    SQLiteMigrationStatusRepository,
)
from challengemigration.resolver import GroupTermResolver
from challengemigration.stores import InMemoryCanonicalStore
from tests.fixtures import (
    FakeAuditReader,
    FakeGroupDirectory,
    FakeProjectDirectory,
    FakeResourceMigrator,
    FakeRoleDirectory,
    FakeSourceReader,
    FakeTermsCatalog,
    FakeTimelineTemplates,
)

if TYPE_CHECKING:
    import aiosqlite

# ============================================================================
# SQLite Availability Check
# ============================================================================

AIOSQLITE_AVAILABLE = False
try:
    import aiosqlite

    AIOSQLITE_AVAILABLE = True
except ImportError:
    aiosqlite = None  # type: ignore[assignment]

skip_if_no_aiosqlite = pytest.mark.skipif(
    not AIOSQLITE_AVAILABLE,
    reason="aiosqlite not installed",
)


# ============================================================================
# Collaborator fixtures
# ============================================================================


@pytest.fixture
def config() -> MigrationConfig:
    return MigrationConfig(
        batch_size=2,
        terms_page_size=2,
        phase_name_mappings={"Registration": "reg-phase-id", "Submission": "sub-phase-id"},
    )


@pytest.fixture
def source_reader() -> FakeSourceReader:
    return FakeSourceReader()


@pytest.fixture
def audit_reader() -> FakeAuditReader:
    return FakeAuditReader()


@pytest.fixture
def group_directory() -> FakeGroupDirectory:
    return FakeGroupDirectory({20000000: "group-a", 20000001: "group-b"})


@pytest.fixture
def terms_catalog() -> FakeTermsCatalog:
    return FakeTermsCatalog(
        [
            [
                Term(id="term-standard", legacy_id=21303, title="Standard Terms"),
                Term(id="term-nda", legacy_id=21343, title="NDA"),
            ],
            [Term(id="term-copilot", legacy_id=20704, title="Copilot Terms")],
        ]
    )


@pytest.fixture
def project_directory() -> FakeProjectDirectory:
    return FakeProjectDirectory({7001: Project(id=16001, name="Payments")})


@pytest.fixture
def timeline_templates() -> FakeTimelineTemplates:
    return FakeTimelineTemplates()


@pytest.fixture
def role_directory() -> FakeRoleDirectory:
    return FakeRoleDirectory({"Submitter": "role-submitter", "Reviewer": "role-reviewer"})


@pytest.fixture
def resource_migrator() -> FakeResourceMigrator:
    return FakeResourceMigrator()


@pytest.fixture
def tracer() -> MockTracer:
    return MockTracer()


# ============================================================================
# Ledger and store fixtures
# ============================================================================


@pytest.fixture
def status_repo() -> InMemoryMigrationStatusRepository:
    return InMemoryMigrationStatusRepository(enable_tracing=False)


@pytest.fixture
def canonical_store() -> InMemoryCanonicalStore:
    return InMemoryCanonicalStore(enable_tracing=False)


# ============================================================================
# Assembled components
# ============================================================================


@pytest.fixture
def resolver(
    group_directory: FakeGroupDirectory,
    terms_catalog: FakeTermsCatalog,
    config: MigrationConfig,
) -> GroupTermResolver:
    return GroupTermResolver(group_directory, terms_catalog, config, enable_tracing=False)


@pytest.fixture
def builder(
    resolver: GroupTermResolver,
    project_directory: FakeProjectDirectory,
    timeline_templates: FakeTimelineTemplates,
    role_directory: FakeRoleDirectory,
    config: MigrationConfig,
) -> ChallengeBuilder:
    return ChallengeBuilder(
        resolver=resolver,
        project_directory=project_directory,
        timeline_templates=timeline_templates,
        role_directory=role_directory,
        config=config,
        enable_tracing=False,
    )


@pytest.fixture
def coordinator(
    source_reader: FakeSourceReader,
    audit_reader: FakeAuditReader,
    canonical_store: InMemoryCanonicalStore,
    status_repo: InMemoryMigrationStatusRepository,
    resource_migrator: FakeResourceMigrator,
    builder: ChallengeBuilder,
    config: MigrationConfig,
) -> MigrationCoordinator:
    return MigrationCoordinator(
        source_reader=source_reader,
        audit_reader=audit_reader,
        canonical_store=canonical_store,
        status_repo=status_repo,
        resource_migrator=resource_migrator,
        builder=builder,
        config=config,
        enable_tracing=False,
    )


# ============================================================================
# SQLite fixtures
# ============================================================================


@pytest_asyncio.fixture
async def sqlite_connection() -> AsyncGenerator[aiosqlite.Connection, None]:
    """
    Provide an in-memory SQLite connection.

    Skips the test if aiosqlite is not installed.
    """
    if not AIOSQLITE_AVAILABLE:
        pytest.skip("aiosqlite not installed")

    async with aiosqlite.connect(":memory:") as db:
        yield db


@pytest_asyncio.fixture
async def sqlite_status_repo(
    sqlite_connection: aiosqlite.Connection,
) -> SQLiteMigrationStatusRepository:
    repo = SQLiteMigrationStatusRepository(sqlite_connection, enable_tracing=False)
    await repo.initialize()
    return repo
