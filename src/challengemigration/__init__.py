"""
challengemigration - Migration of legacy challenge records to the canonical model.

This library provides:
- Bidirectional translation between legacy track/subtrack and canonical track/type
- A builder that turns legacy listings into canonical challenges
- Memoizing resolution of legacy group and term references
- A status ledger with In-Memory, SQLite and PostgreSQL backends
- A single-flight coordinator for batch runs and retries
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("challengemigration")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from challengemigration.builder import ChallengeBuilder
from challengemigration.clients import (
    HTTPGroupDirectory,
    HTTPProjectDirectory,
    HTTPTermsCatalog,
)
from challengemigration.config import MigrationConfig
from challengemigration.coordinator import CoordinatorStatus, MigrationCoordinator
from challengemigration.exceptions import (
    ConflictError,
    ErrorClassification,
    ErrorRecoverability,
    ErrorSeverity,
    MigrationError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from challengemigration.interfaces import (
    CanonicalStore,
    GroupDirectory,
    LegacyAuditReader,
    LegacySourceReader,
    ProjectDirectory,
    ResourceMigrator,
    ResourceRoleDirectory,
    TermsCatalog,
    TimelineTemplateCatalog,
)
from challengemigration.models import (
    AuditInfo,
    BatchSummary,
    CanonicalChallenge,
    Decision,
    LegacyChallengeDetail,
    LegacyChallengeListing,
    LegacyIdPage,
    MigrationFilter,
    MigrationStatus,
    MigrationStatusRecord,
    RecordOutcome,
    RunState,
    StatusFilter,
    StatusPage,
    Term,
    TermsPage,
)
from challengemigration.repositories import (
    InMemoryMigrationStatusRepository,
    MigrationStatusRepository,
    PostgreSQLMigrationStatusRepository,
    SQLiteMigrationStatusRepository,
)
from challengemigration.resolver import GroupTermResolver
from challengemigration.stores import InMemoryCanonicalStore
from challengemigration.translation import (
    CanonicalTrack,
    CanonicalType,
    LegacySubtrack,
    LegacyTrack,
    canonical_to_legacy,
    legacy_to_canonical,
)

__all__ = [
    "__version__",
    # Translation
    "LegacyTrack",
    "LegacySubtrack",
    "CanonicalTrack",
    "CanonicalType",
    "legacy_to_canonical",
    "canonical_to_legacy",
    # Building
    "ChallengeBuilder",
    "GroupTermResolver",
    # Orchestration
    "MigrationCoordinator",
    "CoordinatorStatus",
    "MigrationConfig",
    # Ledger
    "MigrationStatusRepository",
    "InMemoryMigrationStatusRepository",
    "SQLiteMigrationStatusRepository",
    "PostgreSQLMigrationStatusRepository",
    # Collaborators
    "LegacySourceReader",
    "LegacyAuditReader",
    "CanonicalStore",
    "InMemoryCanonicalStore",
    "GroupDirectory",
    "TermsCatalog",
    "ProjectDirectory",
    "TimelineTemplateCatalog",
    "ResourceMigrator",
    "ResourceRoleDirectory",
    "HTTPGroupDirectory",
    "HTTPTermsCatalog",
    "HTTPProjectDirectory",
    # Models
    "AuditInfo",
    "BatchSummary",
    "CanonicalChallenge",
    "Decision",
    "LegacyChallengeDetail",
    "LegacyChallengeListing",
    "LegacyIdPage",
    "MigrationFilter",
    "MigrationStatus",
    "MigrationStatusRecord",
    "RecordOutcome",
    "RunState",
    "StatusFilter",
    "StatusPage",
    "Term",
    "TermsPage",
    # Exceptions
    "MigrationError",
    "ValidationError",
    "NotFoundError",
    "TransientError",
    "ConflictError",
    "ErrorSeverity",
    "ErrorRecoverability",
    "ErrorClassification",
]
