"""
Data models for the challenge migration system.

Models in this module:

Enums:
    - MigrationStatus: Ledger status of a single legacy challenge
    - Decision: Outcome of the re-migration check
    - RecordOutcome: Result of processing one legacy id
    - RunState: Whether a run is currently in flight

Legacy snapshots (pydantic, immutable, camelCase aliases):
    - LegacyChallengeListing, LegacyPhase, LegacyWinner, LegacyEvent,
      LegacyFileType
    - LegacyChallengeDetail, LegacyTermRef
    - AuditInfo

Canonical records (pydantic, immutable, camelCase aliases):
    - CanonicalChallenge and its parts (Phase, PrizeSet, Prize,
      ChallengeTerm, Winner, Metadata, Event, LegacyReference, TaskInfo)
    - Term, Project

Ledger and paging (dataclasses):
    - MigrationStatusRecord, StatusFilter, StatusPage
    - LegacyIdPage, TermsPage
    - MigrationFilter
    - BatchSummary
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# =============================================================================
# Enums
# =============================================================================


class MigrationStatus(Enum):
    """
    Status of the latest migration attempt for a legacy challenge.

    Transitions:
        Queued -> InProgress -> Success | Failed
    """

    QUEUED = "Queued"
    """Selected for migration, not started yet."""

    IN_PROGRESS = "InProgress"
    """Build and save are running."""

    SUCCESS = "Success"
    """Canonical record written and resources migrated."""

    FAILED = "Failed"
    """The attempt failed; error_message holds the cause."""

    @property
    def is_terminal(self) -> bool:
        return self in (MigrationStatus.SUCCESS, MigrationStatus.FAILED)


class Decision(Enum):
    """Outcome of the re-migration check for one legacy id."""

    SKIP = "skip"
    MIGRATE = "migrate"


class RecordOutcome(Enum):
    """Result of processing one legacy id."""

    SKIPPED = "skipped"
    MIGRATED = "migrated"
    FAILED = "failed"


class RunState(Enum):
    """Whether the coordinator has a run in flight."""

    RUNNING = "RUNNING"
    IDLE = "IDLE"


# =============================================================================
# Legacy snapshots
# =============================================================================


class _LegacyModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class LegacyPhase(_LegacyModel):
    """A phase entry of a legacy listing. Duration is in milliseconds."""

    type: str
    status: str | None = None
    duration: float | None = 0
    scheduled_start_time: datetime | None = None
    scheduled_end_time: datetime | None = None
    actual_start_time: datetime | None = None
    actual_end_time: datetime | None = None


class LegacyWinner(_LegacyModel):
    submitter: str
    rank: int | None = None


class LegacyEvent(_LegacyModel):
    id: int
    event_description: str | None = None
    event_short_desc: str | None = None


class LegacyFileType(_LegacyModel):
    description: str


class LegacyTermRef(_LegacyModel):
    terms_of_use_id: int
    role: str | None = None


class LegacyChallengeListing(_LegacyModel):
    """
    Listing entry of a challenge in the legacy search index.

    Only the fields read by the builder are declared; anything else in
    the source document is ignored.
    """

    id: int
    track: str
    sub_track: str
    is_task: bool = False
    challenge_title: str = ""
    status: str | None = None
    project_id: int | None = None
    forum_id: int | None = None
    review_type: str | None = None
    screening_scorecard_id: int | None = None
    review_scorecard_id: int | None = None
    technologies: list[str | None] = Field(default_factory=list)
    platforms: list[str | None] = Field(default_factory=list)
    prize: list[float] = Field(default_factory=list)
    number_of_checkpoint_prizes: int = 0
    top_check_point_prize: float | None = None
    group_ids: list[int] = Field(default_factory=list)
    phases: list[LegacyPhase] = Field(default_factory=list)
    winners: list[LegacyWinner] = Field(default_factory=list)
    events: list[LegacyEvent] = Field(default_factory=list)
    file_types: list[LegacyFileType] = Field(default_factory=list)
    submitter_ids: list[int] = Field(default_factory=list)
    number_of_submissions: int = 0
    number_of_registrants: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    registration_start_date: datetime | None = None

    # Scalar metadata copied through when truthy
    allow_stock_art: Any = None
    dr_points: Any = None
    submission_viewable: Any = None
    submission_limit: Any = None
    code_repo: Any = None
    environment: Any = None


class LegacyChallengeDetail(_LegacyModel):
    """Detail entry of a challenge in the legacy search index."""

    introduction: str | None = None
    detail_requirements: str | None = None
    final_submission_guidelines: str | None = None
    terms: list[LegacyTermRef] = Field(default_factory=list)


class AuditInfo(_LegacyModel):
    """Creator and last updater from the relational audit store."""

    created_by: str
    updated_by: str


# =============================================================================
# Canonical records
# =============================================================================


class _CanonicalModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Phase(_CanonicalModel):
    id: str
    name: str
    phase_id: str | None = None
    duration: int
    scheduled_start_date: datetime | None = None
    scheduled_end_date: datetime | None = None
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None
    is_open: bool = False


class Prize(_CanonicalModel):
    value: float | None
    type: str = "USD"


class PrizeSet(_CanonicalModel):
    type: str
    description: str
    prizes: list[Prize] = Field(default_factory=list)


class ChallengeTerm(_CanonicalModel):
    """A term attached to a challenge, bound to a resource role."""

    id: str
    role_id: str


class Winner(_CanonicalModel):
    handle: str
    placement: int | None = None


class Metadata(_CanonicalModel):
    name: str
    value: str


class Event(_CanonicalModel):
    id: int
    name: str | None = None
    key: str | None = None


class LegacyReference(_CanonicalModel):
    """Legacy attributes kept on the canonical record."""

    track: str
    sub_track: str
    forum_id: int | None = None
    direct_project_id: int | None = None
    review_type: str
    screening_scorecard_id: int | None = None
    review_scorecard_id: int | None = None
    source_modified_at: datetime | None = None


class TaskInfo(_CanonicalModel):
    is_task: bool = False
    is_assigned: bool = False
    member_id: str | None = None


class Term(_CanonicalModel):
    """A canonical terms-of-use entry from the terms catalog."""

    id: str
    legacy_id: int | None = None
    title: str | None = None


class Project(_CanonicalModel):
    """A project from the project directory."""

    id: int | str
    name: str | None = None


class CanonicalChallenge(_CanonicalModel):
    """
    A challenge in the canonical schema.

    ``id`` is None until the record is first created in the canonical
    store and never changes afterwards. ``legacy_id`` links the record to
    exactly one legacy challenge.
    """

    id: str | None = None
    legacy_id: int
    status: str | None = None
    track_id: str
    type_id: str
    track: str
    type: str
    legacy: LegacyReference
    task: TaskInfo = Field(default_factory=TaskInfo)
    name: str = ""
    description: str = ""
    description_format: str = "HTML"
    project_id: int | str | None = None
    timeline_template_id: str
    tags: list[str] = Field(default_factory=list)
    phases: list[Phase] = Field(default_factory=list)
    prize_sets: list[PrizeSet] = Field(default_factory=list)
    terms: list[ChallengeTerm] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    winners: list[Winner] = Field(default_factory=list)
    metadata: list[Metadata] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    current_phase_names: list[str] = Field(default_factory=list)
    start_date: datetime | None = None
    end_date: datetime | None = None
    registration_start_date: datetime | None = None
    registration_end_date: datetime | None = None
    submission_start_date: datetime | None = None
    submission_end_date: datetime | None = None
    num_of_submissions: int = 0
    num_of_registrants: int = 0
    created: datetime | None = None
    created_by: str
    updated: datetime | None = None
    updated_by: str

    def to_document(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON document written to the canonical store."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# Ledger and paging
# =============================================================================


@dataclass
class MigrationStatusRecord:
    """
    Latest migration attempt for one legacy challenge.

    Attributes:
        legacy_id: Legacy challenge id (primary key).
        status: Status of the latest attempt.
        challenge_id: Canonical id, once one was obtained.
        source_modified_at: Legacy last-modified captured at start.
        started_at: When the attempt started.
        ended_at: When the attempt reached a terminal status.
        error_message: Failure cause, truncated by the repository.
        updated_at: When the record was last written.
    """

    legacy_id: int
    status: MigrationStatus
    challenge_id: str | None = None
    source_modified_at: datetime | None = None
    started_at: datetime | None = None
    ended_at: datetime | None = None
    error_message: str | None = None
    updated_at: datetime | None = None

    @property
    def duration_ms(self) -> int | None:
        """Milliseconds between start and end, when both are present."""
        if self.started_at is None or self.ended_at is None:
            return None
        return int((self.ended_at - self.started_at).total_seconds() * 1000)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation suitable for JSON.
        """
        return {
            "legacy_id": self.legacy_id,
            "challenge_id": self.challenge_id,
            "status": self.status.value,
            "source_modified_at": (
                self.source_modified_at.isoformat() if self.source_modified_at else None
            ),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "error_message": self.error_message,
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class StatusFilter:
    """Ledger query filter; set fields are ANDed, unset fields match anything."""

    legacy_id: int | None = None
    challenge_id: str | None = None
    status: MigrationStatus | None = None

    def matches(self, record: MigrationStatusRecord) -> bool:
        if self.legacy_id is not None and record.legacy_id != self.legacy_id:
            return False
        if self.challenge_id is not None and record.challenge_id != self.challenge_id:
            return False
        if self.status is not None and record.status != self.status:
            return False
        return True


@dataclass(frozen=True)
class MigrationFilter:
    """
    Selects the legacy challenges visited by a full run.

    Set fields are ANDed, unset fields match anything. The updated-at
    window is inclusive at both ends.

    Attributes:
        start_date: Earliest legacy last-modified timestamp.
        end_date: Latest legacy last-modified timestamp.
        legacy_id: A single legacy challenge id.
        status: Legacy challenge status, e.g. "Completed".
    """

    start_date: datetime | None = None
    end_date: datetime | None = None
    legacy_id: int | None = None
    status: str | None = None

    @property
    def is_empty(self) -> bool:
        return (
            self.start_date is None
            and self.end_date is None
            and self.legacy_id is None
            and self.status is None
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "legacy_id": self.legacy_id,
            "status": self.status,
        }


@dataclass(frozen=True)
class StatusPage:
    """One page of ledger query results with the total match count."""

    total: int
    items: list[MigrationStatusRecord]
    page: int = 0
    per_page: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "page": self.page,
            "per_page": self.per_page,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class LegacyIdPage:
    """A page of legacy challenge ids."""

    total: int
    ids: list[int]


@dataclass(frozen=True)
class TermsPage:
    """A page of the terms catalog and the total number of pages it reports."""

    items: list[Term]
    total_pages: int | None = None


@dataclass(frozen=True)
class BatchSummary:
    """
    Summary of a completed run.

    Attributes:
        total: Legacy ids visited.
        migrated: Ids migrated successfully.
        skipped: Ids already current.
        failed: Ids whose attempt failed.
        started_at: When the run started.
        ended_at: When the run finished.
        failed_ids: Legacy ids whose attempt failed, in visit order.
    """

    total: int
    migrated: int
    skipped: int
    failed: int
    started_at: datetime
    ended_at: datetime
    failed_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "migrated": self.migrated,
            "skipped": self.skipped,
            "failed": self.failed,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat(),
            "failed_ids": list(self.failed_ids),
        }


def as_utc(value: datetime) -> datetime:
    """Read a naive timestamp as UTC; aware timestamps are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


__all__ = [
    "as_utc",
    # Enums
    "MigrationStatus",
    "Decision",
    "RecordOutcome",
    "RunState",
    # Legacy
    "LegacyPhase",
    "LegacyWinner",
    "LegacyEvent",
    "LegacyFileType",
    "LegacyTermRef",
    "LegacyChallengeListing",
    "LegacyChallengeDetail",
    "AuditInfo",
    # Canonical
    "Phase",
    "Prize",
    "PrizeSet",
    "ChallengeTerm",
    "Winner",
    "Metadata",
    "Event",
    "LegacyReference",
    "TaskInfo",
    "Term",
    "Project",
    "CanonicalChallenge",
    # Ledger and paging
    "MigrationStatusRecord",
    "MigrationFilter",
    "StatusFilter",
    "StatusPage",
    "LegacyIdPage",
    "TermsPage",
    "BatchSummary",
]
