"""
Contracts for the systems the migration talks to.

The coordinator, builder and resolver depend only on these protocols.
Concrete adapters (search index readers, relational audit readers,
canonical store clients, HTTP directories) are injected by the host
application; in-memory and HTTP implementations ship in
``challengemigration.stores`` and ``challengemigration.clients``.

Every method may raise TransientError for network or store failures.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from challengemigration.models import (
    AuditInfo,
    CanonicalChallenge,
    LegacyChallengeDetail,
    LegacyChallengeListing,
    LegacyIdPage,
    MigrationFilter,
    Project,
    TermsPage,
)


@runtime_checkable
class LegacySourceReader(Protocol):
    """Read access to the legacy search index and its last-modified dates."""

    async def get_listing(self, legacy_id: int) -> LegacyChallengeListing | None:
        """Get the listing entry, or None if the index has no entry."""
        ...

    async def get_detail(self, legacy_id: int) -> LegacyChallengeDetail | None:
        """Get the detail entry, or None if the index has no entry."""
        ...

    async def get_last_modified(self, legacy_id: int) -> datetime | None:
        """Get the last-modified timestamp recorded by the legacy system."""
        ...

    async def list_legacy_ids(
        self,
        page: int,
        per_page: int,
        migration_filter: MigrationFilter | None = None,
    ) -> LegacyIdPage:
        """
        Get one page of legacy challenge ids.

        Args:
            page: Zero-indexed page number.
            per_page: Maximum ids per page.
            migration_filter: Restricts the ids listed; None lists all.
        """
        ...


@runtime_checkable
class LegacyAuditReader(Protocol):
    """Read access to the relational audit columns of a legacy challenge."""

    async def get_audit_info(self, legacy_id: int) -> AuditInfo | None: ...


@runtime_checkable
class CanonicalStore(Protocol):
    """
    Persistence gateway for canonical challenges.

    ``create`` assigns the canonical id. ``legacy_id`` is unique across
    the store.
    """

    async def create(self, challenge: CanonicalChallenge) -> str:
        """Persist a new challenge and return its assigned id."""
        ...

    async def update(self, challenge_id: str, challenge: CanonicalChallenge) -> None:
        """Overwrite an existing challenge."""
        ...

    async def delete(self, challenge_id: str) -> None: ...

    async def find_by_legacy_id(self, legacy_id: int) -> CanonicalChallenge | None: ...

    async def find_all_by_legacy_ids(
        self, legacy_ids: Sequence[int]
    ) -> list[CanonicalChallenge]: ...


@runtime_checkable
class GroupDirectory(Protocol):
    """Directory of access groups."""

    async def lookup_by_legacy_id(self, legacy_group_id: int) -> str | None:
        """Return the canonical group id, or None when the group is unknown."""
        ...


@runtime_checkable
class TermsCatalog(Protocol):
    """Paginated catalog of canonical terms of use."""

    async def list_page(self, page: int, per_page: int) -> TermsPage:
        """
        Get one page of terms.

        Args:
            page: One-indexed page number.
            per_page: Maximum terms per page.
        """
        ...


@runtime_checkable
class ProjectDirectory(Protocol):
    async def lookup_by_legacy_project_id(self, legacy_project_id: int) -> Project | None: ...


@runtime_checkable
class TimelineTemplateCatalog(Protocol):
    async def lookup(self, track_id: str, type_id: str) -> str | None:
        """Return the timeline template id for a canonical track and type."""
        ...


@runtime_checkable
class ResourceMigrator(Protocol):
    """Migrates the resources (role assignments) of one challenge."""

    async def migrate_for_challenge(self, legacy_id: int, challenge_id: str) -> int:
        """Migrate resources and return how many were migrated."""
        ...


@runtime_checkable
class ResourceRoleDirectory(Protocol):
    async def get_role_id(self, role_name: str) -> str:
        """
        Return the canonical id of a resource role.

        Raises:
            NotFoundError: If the role is unknown.
        """
        ...


__all__ = [
    "LegacySourceReader",
    "LegacyAuditReader",
    "CanonicalStore",
    "GroupDirectory",
    "TermsCatalog",
    "ProjectDirectory",
    "TimelineTemplateCatalog",
    "ResourceMigrator",
    "ResourceRoleDirectory",
]
