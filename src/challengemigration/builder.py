"""
Assembly of canonical challenges from legacy snapshots.

ChallengeBuilder turns one legacy listing, its detail entry and its audit
row into a CanonicalChallenge. Required references (track/type mapping,
timeline template, terms, groups) raise typed errors; optional ones
(project, term roles, the detail entry itself) are logged and skipped.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from challengemigration.config import MigrationConfig
from challengemigration.exceptions import NotFoundError, ValidationError
from challengemigration.interfaces import (
    ProjectDirectory,
    ResourceRoleDirectory,
    TimelineTemplateCatalog,
)
from challengemigration.models import (
    AuditInfo,
    CanonicalChallenge,
    ChallengeTerm,
    Event,
    LegacyChallengeDetail,
    LegacyChallengeListing,
    LegacyReference,
    Metadata,
    Phase,
    Prize,
    PrizeSet,
    TaskInfo,
    Winner,
    as_utc,
)
from challengemigration.observability import (
    ATTR_LEGACY_ID,
    ATTR_TRACK_ID,
    ATTR_TYPE_ID,
    Tracer,
    create_tracer,
)
from challengemigration.resolver import GroupTermResolver
from challengemigration.translation import legacy_to_canonical

logger = logging.getLogger(__name__)

DETAIL_SEPARATOR = "<br />"
GUIDELINES_SEPARATOR = "<br /><br /><h2>Final Submission Guidelines</h2>"

OPEN_PHASE_STATUS = "Open"
REGISTRATION_PHASE = "Registration"
SUBMISSION_PHASE = "Submission"

PLACEMENT_PRIZE_SET = "placement"
CHECKPOINT_PRIZE_SET = "checkpoint"
PRIZE_CURRENCY = "USD"

_EARLIEST = datetime.min.replace(tzinfo=UTC)

# Listing fields copied to metadata when truthy, in this order
METADATA_FIELDS = (
    ("allowStockArt", "allow_stock_art"),
    ("drPoints", "dr_points"),
    ("submissionViewable", "submission_viewable"),
    ("submissionLimit", "submission_limit"),
    ("codeRepo", "code_repo"),
    ("environment", "environment"),
)


class ChallengeBuilder:
    """
    Builds canonical challenges from legacy snapshots.

    Example:
        >>> builder = ChallengeBuilder(
        ...     resolver=resolver,
        ...     project_directory=projects,
        ...     timeline_templates=templates,
        ...     role_directory=roles,
        ... )
        >>> challenge = await builder.build(30054321, listing, detail, audit)
    """

    def __init__(
        self,
        resolver: GroupTermResolver,
        project_directory: ProjectDirectory,
        timeline_templates: TimelineTemplateCatalog,
        role_directory: ResourceRoleDirectory,
        config: MigrationConfig | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._resolver = resolver
        self._project_directory = project_directory
        self._timeline_templates = timeline_templates
        self._role_directory = role_directory
        self._config = config or MigrationConfig()
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled

    @property
    def resolver(self) -> GroupTermResolver:
        return self._resolver

    def with_resolver(self, resolver: GroupTermResolver) -> ChallengeBuilder:
        """Return a builder sharing this one's collaborators but using another resolver."""
        return ChallengeBuilder(
            resolver=resolver,
            project_directory=self._project_directory,
            timeline_templates=self._timeline_templates,
            role_directory=self._role_directory,
            config=self._config,
            tracer=self._tracer,
        )

    async def build(
        self,
        legacy_id: int,
        listing: LegacyChallengeListing,
        detail: LegacyChallengeDetail | None,
        audit: AuditInfo | None,
        *,
        source_modified_at: datetime | None = None,
    ) -> CanonicalChallenge:
        """
        Build the canonical form of one legacy challenge.

        Args:
            legacy_id: Legacy challenge id
            listing: Listing entry from the legacy index
            detail: Detail entry, or None when the index has none
            audit: Audit row, or None to attribute the record to the
                migration actor
            source_modified_at: Legacy last-modified timestamp to record
                on the canonical challenge

        Returns:
            The canonical challenge, without an id

        Raises:
            ValidationError: If the track/subtrack pair has no mapping, no
                timeline template exists, or a term is not in the catalog
            NotFoundError: If a group is not in the group directory
        """
        with self._tracer.span(
            "challengemigration.builder.build",
            {ATTR_LEGACY_ID: legacy_id},
        ) as span:
            logger.info(
                "Building challenge %s (last modified %s)",
                legacy_id,
                listing.updated_at,
            )

            description = self._build_description(legacy_id, detail)
            project_id = await self._resolve_project(legacy_id, listing)

            legacy_tags = [*listing.technologies, *listing.platforms]
            try:
                track_type = legacy_to_canonical(
                    listing.track,
                    listing.sub_track,
                    is_task=listing.is_task,
                    tags=legacy_tags,
                )
            except ValidationError as e:
                e.legacy_id = legacy_id
                raise

            timeline_template_id = await self._timeline_templates.lookup(
                track_type.track_id, track_type.type_id
            )
            if timeline_template_id is None:
                raise ValidationError(
                    f"Timeline template not found for trackId: {track_type.track_id} "
                    f"typeId: {track_type.type_id}",
                    legacy_id=legacy_id,
                    field="timelineTemplateId",
                )

            phases = self._build_phases(listing)
            start_date = listing.registration_start_date or listing.created_at
            end_date = phases[-1].scheduled_end_date if phases else start_date
            registration = self._phase_window(phases, REGISTRATION_PHASE)
            submission = self._phase_window(phases, SUBMISSION_PHASE)

            terms = await self._build_terms(legacy_id, detail)
            groups: list[str] = []
            if listing.group_ids:
                groups = await self._resolver.resolve_groups(
                    listing.group_ids, legacy_id=legacy_id
                )

            created_by = audit.created_by if audit else self._config.migration_actor
            updated_by = audit.updated_by if audit else self._config.migration_actor

            challenge = CanonicalChallenge(
                legacy_id=legacy_id,
                status=listing.status,
                track_id=track_type.track_id,
                type_id=track_type.type_id,
                track=track_type.track,
                type=track_type.type,
                legacy=LegacyReference(
                    track=listing.track,
                    sub_track=listing.sub_track,
                    forum_id=listing.forum_id,
                    direct_project_id=listing.project_id,
                    review_type=listing.review_type or self._config.default_review_type,
                    screening_scorecard_id=listing.screening_scorecard_id,
                    review_scorecard_id=listing.review_scorecard_id,
                    source_modified_at=source_modified_at,
                ),
                task=self._build_task(listing),
                name=listing.challenge_title,
                description=description,
                description_format=self._config.description_format,
                project_id=project_id,
                timeline_template_id=timeline_template_id,
                tags=compact_unique([*legacy_tags, *track_type.tags]),
                phases=phases,
                prize_sets=self._build_prize_sets(listing),
                terms=terms,
                groups=groups,
                winners=[
                    Winner(handle=winner.submitter, placement=winner.rank)
                    for winner in listing.winners
                ],
                metadata=self._build_metadata(listing),
                events=self._build_events(legacy_id, listing),
                current_phase_names=[phase.name for phase in phases if phase.is_open],
                start_date=start_date,
                end_date=end_date,
                registration_start_date=registration[0],
                registration_end_date=registration[1],
                submission_start_date=submission[0],
                submission_end_date=submission[1],
                num_of_submissions=listing.number_of_submissions,
                num_of_registrants=listing.number_of_registrants,
                created=listing.created_at,
                created_by=created_by,
                updated=listing.updated_at,
                updated_by=updated_by,
            )

            if span:
                span.set_attribute(ATTR_TRACK_ID, challenge.track_id)
                span.set_attribute(ATTR_TYPE_ID, challenge.type_id)
            return challenge

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _build_description(self, legacy_id: int, detail: LegacyChallengeDetail | None) -> str:
        if detail is None:
            logger.warning(
                "No challenge detail entry for %s; description and terms will be missing",
                legacy_id,
            )
            return ""

        description = detail.detail_requirements or ""
        if not _is_blank(detail.introduction):
            description = f"{detail.introduction}{DETAIL_SEPARATOR}{description}"
        if not _is_blank(detail.final_submission_guidelines):
            description += f"{GUIDELINES_SEPARATOR}{detail.final_submission_guidelines}"
        return description

    async def _resolve_project(
        self, legacy_id: int, listing: LegacyChallengeListing
    ) -> int | str | None:
        if not listing.project_id:
            logger.warning("Challenge %s has no direct project id", legacy_id)
            return None

        try:
            project = await self._project_directory.lookup_by_legacy_project_id(
                listing.project_id
            )
        except Exception as e:
            logger.warning(
                "Project lookup failed for challenge %s (project %s): %s",
                legacy_id,
                listing.project_id,
                e,
            )
            return None

        if project is None:
            logger.warning(
                "Project %s not found for challenge %s",
                listing.project_id,
                legacy_id,
            )
            return None
        return project.id

    def _build_phases(self, listing: LegacyChallengeListing) -> list[Phase]:
        ordered = sorted(
            listing.phases,
            key=lambda p: (
                p.scheduled_start_time is None,
                as_utc(p.scheduled_start_time or _EARLIEST),
            ),
        )
        return [
            Phase(
                id=str(uuid.uuid4()),
                name=phase.type,
                phase_id=self._config.phase_id_for(phase.type),
                duration=int((phase.duration or 0) / 1000),
                scheduled_start_date=phase.scheduled_start_time,
                scheduled_end_date=phase.scheduled_end_time,
                actual_start_date=phase.actual_start_time,
                actual_end_date=phase.actual_end_time,
                is_open=phase.status == OPEN_PHASE_STATUS,
            )
            for phase in ordered
        ]

    @staticmethod
    def _phase_window(
        phases: list[Phase], name: str
    ) -> tuple[datetime | None, datetime | None]:
        phase = next((p for p in phases if p.name == name), None)
        if phase is None:
            return None, None
        return (
            phase.actual_start_date or phase.scheduled_start_date,
            phase.actual_end_date or phase.scheduled_end_date,
        )

    @staticmethod
    def _build_task(listing: LegacyChallengeListing) -> TaskInfo:
        submitters = listing.submitter_ids
        return TaskInfo(
            is_task=listing.is_task,
            is_assigned=len(submitters) >= 1,
            member_id=str(submitters[0]) if len(submitters) == 1 else None,
        )

    @staticmethod
    def _build_prize_sets(listing: LegacyChallengeListing) -> list[PrizeSet]:
        prize_sets = [
            PrizeSet(
                type=PLACEMENT_PRIZE_SET,
                description="Challenge Prizes",
                prizes=[Prize(value=value, type=PRIZE_CURRENCY) for value in listing.prize],
            )
        ]
        if listing.number_of_checkpoint_prizes > 0:
            prize_sets.append(
                PrizeSet(
                    type=CHECKPOINT_PRIZE_SET,
                    description="Checkpoint Prizes",
                    prizes=[
                        Prize(value=listing.top_check_point_prize, type=PRIZE_CURRENCY)
                        for _ in range(listing.number_of_checkpoint_prizes)
                    ],
                )
            )
        return prize_sets

    @staticmethod
    def _build_metadata(listing: LegacyChallengeListing) -> list[Metadata]:
        metadata: list[Metadata] = []
        if listing.file_types:
            descriptions = [file_type.description for file_type in listing.file_types]
            metadata.append(Metadata(name="fileTypes", value=json.dumps(descriptions)))

        for name, attr in METADATA_FIELDS:
            value = getattr(listing, attr)
            if value:
                metadata.append(Metadata(name=name, value=_metadata_value(value)))
        return metadata

    @staticmethod
    def _build_events(legacy_id: int, listing: LegacyChallengeListing) -> list[Event]:
        events: dict[int, Event] = {}
        for event in listing.events:
            if event.id in events:
                logger.debug("Duplicate event %s on challenge %s", event.id, legacy_id)
                continue
            events[event.id] = Event(
                id=event.id,
                name=event.event_description,
                key=event.event_short_desc,
            )
        return list(events.values())

    async def _build_terms(
        self, legacy_id: int, detail: LegacyChallengeDetail | None
    ) -> list[ChallengeTerm]:
        if detail is None or not detail.terms:
            return []

        terms: list[ChallengeTerm] = []
        for legacy_term in detail.terms:
            term = await self._resolver.find_term(legacy_term.terms_of_use_id)
            if term is None:
                raise ValidationError(
                    f"Term {legacy_term.terms_of_use_id} not found in terms catalog",
                    legacy_id=legacy_id,
                    field="terms",
                )

            if not legacy_term.role:
                logger.warning(
                    "Term %s on challenge %s has no role; not creating association",
                    legacy_term.terms_of_use_id,
                    legacy_id,
                )
                continue

            try:
                role_id = await self._role_directory.get_role_id(legacy_term.role)
            except NotFoundError:
                logger.warning(
                    "Term role %s not found; not creating association for term %s",
                    legacy_term.role,
                    legacy_term.terms_of_use_id,
                )
                continue

            terms.append(ChallengeTerm(id=term.id, role_id=role_id))
        return terms


def compact_unique(values: list[Any]) -> list[str]:
    """Drop None and blank values and duplicates, keeping first-appearance order."""
    return list(dict.fromkeys(str(v) for v in values if v is not None and not _is_blank(str(v))))


def _is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def _metadata_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = ["ChallengeBuilder", "compact_unique"]
