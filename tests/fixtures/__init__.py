"""
Shared test fixtures for challengemigration tests.

- legacy: factories for legacy listings, details and audit rows
- collaborators: in-memory fakes of the external services
"""

from tests.fixtures.collaborators import (
    DEFAULT_TEMPLATE_ID,
    FakeAuditReader,
    FakeGroupDirectory,
    FakeProjectDirectory,
    FakeResourceMigrator,
    FakeRoleDirectory,
    FakeSourceReader,
    FakeTermsCatalog,
    FakeTimelineTemplates,
)
from tests.fixtures.legacy import (
    LEGACY_MODIFIED,
    REGISTRATION_START,
    SUBMISSION_END,
    make_audit,
    make_detail,
    make_listing,
)

__all__ = [
    "DEFAULT_TEMPLATE_ID",
    "FakeAuditReader",
    "FakeGroupDirectory",
    "FakeProjectDirectory",
    "FakeResourceMigrator",
    "FakeRoleDirectory",
    "FakeSourceReader",
    "FakeTermsCatalog",
    "FakeTimelineTemplates",
    "LEGACY_MODIFIED",
    "REGISTRATION_START",
    "SUBMISSION_END",
    "make_audit",
    "make_detail",
    "make_listing",
]
