"""
Unit tests for ChallengeBuilder.

Tests cover:
- Track/type translation and timeline template lookup
- Description assembly from the detail entry
- Phases, dates and prize sets
- Terms, groups and project resolution (fatal and soft failures)
- Metadata, events, winners and task information
- Audit attribution
"""

import json
from datetime import UTC, datetime

import httpx
import pytest

from challengemigration.builder import (
    DETAIL_SEPARATOR,
    GUIDELINES_SEPARATOR,
    ChallengeBuilder,
    compact_unique,
)
from challengemigration.clients import HTTPProjectDirectory
from challengemigration.exceptions import NotFoundError, TransientError, ValidationError
from challengemigration.observability import MockTracer
from challengemigration.translation import CanonicalTrack, CanonicalType
from tests.fixtures import (
    DEFAULT_TEMPLATE_ID,
    LEGACY_MODIFIED,
    REGISTRATION_START,
    SUBMISSION_END,
    FakeTimelineTemplates,
    make_audit,
    make_detail,
    make_listing,
)

LEGACY_ID = 30054321


class TestTranslationAndTemplate:
    """Tests for track/type and timeline template resolution."""

    @pytest.mark.asyncio
    async def test_sets_canonical_track_and_type(self, builder):
        """A DEVELOP/CODE listing becomes a Development challenge."""
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.track_id == CanonicalTrack.DEVELOPMENT.value
        assert challenge.type_id == CanonicalType.CHALLENGE.value
        assert challenge.track == "Development"
        assert challenge.type == "Challenge"
        assert challenge.timeline_template_id == DEFAULT_TEMPLATE_ID

    @pytest.mark.asyncio
    async def test_listing_tags_route_code_to_data_science(self, builder):
        """Technologies count as tags for routing."""
        listing = make_listing(technologies=["Marathon Match"], platforms=[])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.track_id == CanonicalTrack.DATA_SCIENCE.value

    @pytest.mark.asyncio
    async def test_unknown_pair_raises_with_legacy_id(self, builder):
        listing = make_listing(track="DESIGN", subTrack="CODE")

        with pytest.raises(ValidationError) as exc_info:
            await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert exc_info.value.legacy_id == LEGACY_ID

    @pytest.mark.asyncio
    async def test_missing_timeline_template_raises(
        self, resolver, project_directory, role_directory
    ):
        """No template for the resolved pair is a validation failure."""
        builder = ChallengeBuilder(
            resolver=resolver,
            project_directory=project_directory,
            timeline_templates=FakeTimelineTemplates({}),
            role_directory=role_directory,
            enable_tracing=False,
        )

        with pytest.raises(ValidationError) as exc_info:
            await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert exc_info.value.field == "timelineTemplateId"
        assert CanonicalTrack.DEVELOPMENT.value in str(exc_info.value)


class TestDescription:
    """Tests for description assembly."""

    @pytest.mark.asyncio
    async def test_intro_requirements_and_guidelines(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.description == (
            "<p>Intro</p>" + DETAIL_SEPARATOR + "<p>Requirements</p>"
            + GUIDELINES_SEPARATOR + "<p>Zip it</p>"
        )
        assert challenge.description_format == "HTML"

    @pytest.mark.asyncio
    async def test_blank_parts_are_left_out(self, builder):
        detail = make_detail(introduction="  ", finalSubmissionGuidelines=None)

        challenge = await builder.build(LEGACY_ID, make_listing(), detail, make_audit())

        assert challenge.description == "<p>Requirements</p>"

    @pytest.mark.asyncio
    async def test_missing_detail_gives_empty_description(self, builder):
        """A missing detail entry is not fatal."""
        challenge = await builder.build(LEGACY_ID, make_listing(), None, make_audit())

        assert challenge.description == ""
        assert challenge.terms == []


class TestPhasesAndDates:
    """Tests for phases, dates and phase windows."""

    @pytest.mark.asyncio
    async def test_phases_sorted_with_seconds_duration(self, builder):
        """Phases are ordered by scheduled start; durations are whole seconds."""
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert [p.name for p in challenge.phases] == ["Registration", "Submission"]
        assert challenge.phases[0].duration == 259200
        assert challenge.phases[1].duration == 345600
        assert challenge.phases[0].phase_id == "reg-phase-id"
        assert challenge.phases[1].phase_id == "sub-phase-id"

    @pytest.mark.asyncio
    async def test_duration_truncates_milliseconds(self, builder):
        listing = make_listing(phases=[{"type": "Review", "duration": 3600999}])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.phases[0].duration == 3600
        assert challenge.phases[0].phase_id is None

    @pytest.mark.asyncio
    async def test_null_duration_is_zero(self, builder):
        listing = make_listing(phases=[{"type": "Review", "duration": None}])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.phases[0].duration == 0

    @pytest.mark.asyncio
    async def test_mixed_naive_and_aware_phase_times_sort(self, builder):
        """Naive phase times are read as UTC when ordering phases."""
        listing = make_listing(
            phases=[
                {"type": "Review", "scheduledStartTime": "2020-03-08T09:00:00"},
                {"type": "Registration", "scheduledStartTime": "2020-03-01T09:00:00Z"},
                {"type": "Appeals", "scheduledStartTime": None},
                {"type": "Submission", "scheduledStartTime": "2020-03-04T09:00:00+00:00"},
            ]
        )

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert [p.name for p in challenge.phases] == [
            "Registration",
            "Submission",
            "Review",
            "Appeals",
        ]

    @pytest.mark.asyncio
    async def test_open_phases_become_current_phase_names(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.current_phase_names == ["Registration"]
        assert challenge.phases[0].is_open is True
        assert challenge.phases[1].is_open is False

    @pytest.mark.asyncio
    async def test_phase_ids_are_unique(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert len({p.id for p in challenge.phases}) == 2

    @pytest.mark.asyncio
    async def test_challenge_dates(self, builder):
        """Start is the registration start; end is the last phase's scheduled end."""
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.start_date == REGISTRATION_START
        assert challenge.end_date == SUBMISSION_END

    @pytest.mark.asyncio
    async def test_registration_window_prefers_actual_dates(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.registration_start_date == datetime(2020, 3, 1, 9, 5, tzinfo=UTC)
        assert challenge.registration_end_date == datetime(2020, 3, 4, 9, 0, tzinfo=UTC)
        assert challenge.submission_end_date == SUBMISSION_END

    @pytest.mark.asyncio
    async def test_no_phases_falls_back_to_start_date(self, builder):
        listing = make_listing(phases=[], registrationStartDate=None)

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.phases == []
        assert challenge.start_date == datetime(2020, 2, 28, 10, 0, tzinfo=UTC)
        assert challenge.end_date == challenge.start_date
        assert challenge.registration_start_date is None


class TestPrizes:
    """Tests for prize sets."""

    @pytest.mark.asyncio
    async def test_placement_prizes(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert len(challenge.prize_sets) == 1
        placement = challenge.prize_sets[0]
        assert placement.type == "placement"
        assert [p.value for p in placement.prizes] == [1000, 500]
        assert all(p.type == "USD" for p in placement.prizes)

    @pytest.mark.asyncio
    async def test_checkpoint_prizes_repeat_top_prize(self, builder):
        """Three checkpoint prizes of 500 produce three identical entries."""
        listing = make_listing(numberOfCheckpointPrizes=3, topCheckPointPrize=500)

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        checkpoint = challenge.prize_sets[1]
        assert checkpoint.type == "checkpoint"
        assert [p.value for p in checkpoint.prizes] == [500, 500, 500]


class TestTerms:
    """Tests for term resolution."""

    @pytest.mark.asyncio
    async def test_terms_resolved_with_roles(self, builder):
        detail = make_detail(
            terms=[
                {"termsOfUseId": 21303, "role": "Submitter"},
                {"termsOfUseId": 20704, "role": "Reviewer"},
            ]
        )

        challenge = await builder.build(LEGACY_ID, make_listing(), detail, make_audit())

        assert [(t.id, t.role_id) for t in challenge.terms] == [
            ("term-standard", "role-submitter"),
            ("term-copilot", "role-reviewer"),
        ]

    @pytest.mark.asyncio
    async def test_unknown_role_skips_term(self, builder):
        """A term whose role is unknown is dropped, not fatal."""
        detail = make_detail(
            terms=[
                {"termsOfUseId": 21303, "role": "Observer"},
                {"termsOfUseId": 21343, "role": "Submitter"},
            ]
        )

        challenge = await builder.build(LEGACY_ID, make_listing(), detail, make_audit())

        assert [t.id for t in challenge.terms] == ["term-nda"]

    @pytest.mark.asyncio
    async def test_term_without_role_is_skipped(self, builder):
        detail = make_detail(terms=[{"termsOfUseId": 21303}])

        challenge = await builder.build(LEGACY_ID, make_listing(), detail, make_audit())

        assert challenge.terms == []

    @pytest.mark.asyncio
    async def test_term_missing_from_catalog_raises(self, builder):
        detail = make_detail(terms=[{"termsOfUseId": 99999, "role": "Submitter"}])

        with pytest.raises(ValidationError) as exc_info:
            await builder.build(LEGACY_ID, make_listing(), detail, make_audit())

        assert exc_info.value.field == "terms"
        assert exc_info.value.legacy_id == LEGACY_ID


class TestGroupsAndProject:
    """Tests for group and project resolution."""

    @pytest.mark.asyncio
    async def test_groups_resolved(self, builder):
        listing = make_listing(groupIds=[20000001, 20000000])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.groups == ["group-b", "group-a"]

    @pytest.mark.asyncio
    async def test_unknown_group_is_fatal(self, builder):
        listing = make_listing(groupIds=[20000000, 12345])

        with pytest.raises(NotFoundError) as exc_info:
            await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert exc_info.value.identifier == 12345

    @pytest.mark.asyncio
    async def test_project_resolved(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.project_id == 16001
        assert challenge.legacy.direct_project_id == 7001

    @pytest.mark.asyncio
    async def test_unknown_project_is_not_fatal(self, builder):
        listing = make_listing(projectId=9999)

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.project_id is None

    @pytest.mark.asyncio
    async def test_project_lookup_error_is_not_fatal(self, builder, project_directory):
        project_directory.error = TransientError("project service unavailable")

        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.project_id is None

    @pytest.mark.asyncio
    async def test_unexpected_project_error_is_not_fatal(self, builder, project_directory):
        project_directory.error = KeyError("id")

        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.project_id is None

    @pytest.mark.asyncio
    async def test_malformed_project_response_is_not_fatal(
        self, resolver, timeline_templates, role_directory
    ):
        """A gateway page served with 200 leaves the challenge without a project."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="<html>gateway</html>")
        )
        async with httpx.AsyncClient(transport=transport) as client:
            builder = ChallengeBuilder(
                resolver=resolver,
                project_directory=HTTPProjectDirectory(
                    client, "https://api.example.com/v5/projects", enable_tracing=False
                ),
                timeline_templates=timeline_templates,
                role_directory=role_directory,
                enable_tracing=False,
            )
            challenge = await builder.build(
                LEGACY_ID, make_listing(), make_detail(), make_audit()
            )

        assert challenge.project_id is None
        assert challenge.legacy.direct_project_id == 7001

    @pytest.mark.asyncio
    async def test_missing_project_id(self, builder):
        listing = make_listing(projectId=None)

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.project_id is None


class TestMetadataAndLists:
    """Tests for tags, metadata, events, winners and task information."""

    @pytest.mark.asyncio
    async def test_tags_compacted_and_deduplicated(self, builder):
        listing = make_listing(technologies=["Python", None, "AWS", " "], platforms=["AWS"])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.tags == ["Python", "AWS"]

    @pytest.mark.asyncio
    async def test_mapping_tags_appended(self, builder):
        listing = make_listing(subTrack="BUG_HUNT", technologies=["Java"], platforms=[])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.tags == ["Java", "Bug Hunt"]

    @pytest.mark.asyncio
    async def test_metadata(self, builder):
        """File types come first as JSON, then truthy scalar fields in order."""
        listing = make_listing(
            fileTypes=[{"description": "ZIP"}, {"description": "PDF"}],
            allowStockArt=True,
            drPoints=0,
            submissionLimit=3,
            environment="",
        )

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert [(m.name, m.value) for m in challenge.metadata] == [
            ("fileTypes", json.dumps(["ZIP", "PDF"])),
            ("allowStockArt", "true"),
            ("submissionLimit", "3"),
        ]

    @pytest.mark.asyncio
    async def test_events_deduplicated_by_id(self, builder):
        listing = make_listing(
            events=[
                {"id": 3001, "eventDescription": "TCO20", "eventShortDesc": "tco20"},
                {"id": 3001, "eventDescription": "TCO20 copy", "eventShortDesc": "tco20"},
                {"id": 3002, "eventDescription": "TCO21", "eventShortDesc": "tco21"},
            ]
        )

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert [(e.id, e.name) for e in challenge.events] == [(3001, "TCO20"), (3002, "TCO21")]
        assert challenge.events[0].key == "tco20"

    @pytest.mark.asyncio
    async def test_winners(self, builder):
        listing = make_listing(winners=[{"submitter": "alice", "rank": 1}])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert [(w.handle, w.placement) for w in challenge.winners] == [("alice", 1)]

    @pytest.mark.asyncio
    async def test_single_submitter_task_is_assigned(self, builder):
        listing = make_listing(subTrack="FIRST_2_FINISH", isTask=True, submitterIds=[40011])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.type_id == CanonicalType.TASK.value
        assert challenge.task.is_task is True
        assert challenge.task.is_assigned is True
        assert challenge.task.member_id == "40011"

    @pytest.mark.asyncio
    async def test_several_submitters_have_no_member(self, builder):
        listing = make_listing(submitterIds=[40011, 40012])

        challenge = await builder.build(LEGACY_ID, listing, make_detail(), make_audit())

        assert challenge.task.is_assigned is True
        assert challenge.task.member_id is None

    @pytest.mark.asyncio
    async def test_counts_and_legacy_reference(self, builder):
        challenge = await builder.build(
            LEGACY_ID,
            make_listing(reviewType=None),
            make_detail(),
            make_audit(),
            source_modified_at=LEGACY_MODIFIED,
        )

        assert challenge.num_of_submissions == 3
        assert challenge.num_of_registrants == 12
        assert challenge.legacy.track == "DEVELOP"
        assert challenge.legacy.sub_track == "CODE"
        assert challenge.legacy.forum_id == 88001
        assert challenge.legacy.review_type == "COMMUNITY"
        assert challenge.legacy.source_modified_at == LEGACY_MODIFIED
        assert challenge.id is None


class TestAudit:
    """Tests for creator/updater attribution."""

    @pytest.mark.asyncio
    async def test_audit_row_used(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert challenge.created_by == "tonyj"
        assert challenge.updated_by == "lazybaer"

    @pytest.mark.asyncio
    async def test_missing_audit_uses_migration_actor(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), None)

        assert challenge.created_by == "v5migration"
        assert challenge.updated_by == "v5migration"


class TestDocument:
    """Tests for the serialized canonical document."""

    @pytest.mark.asyncio
    async def test_document_uses_camel_case(self, builder):
        challenge = await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        document = challenge.to_document()

        assert document["legacyId"] == LEGACY_ID
        assert document["timelineTemplateId"] == DEFAULT_TEMPLATE_ID
        assert document["legacy"]["subTrack"] == "CODE"
        assert document["prizeSets"][0]["prizes"][0] == {"value": 1000.0, "type": "USD"}


class TestTracing:
    """Tests for builder spans."""

    @pytest.mark.asyncio
    async def test_build_span(self, resolver, project_directory, timeline_templates, role_directory):
        tracer = MockTracer()
        builder = ChallengeBuilder(
            resolver=resolver,
            project_directory=project_directory,
            timeline_templates=timeline_templates,
            role_directory=role_directory,
            tracer=tracer,
        )

        await builder.build(LEGACY_ID, make_listing(), make_detail(), make_audit())

        assert "challengemigration.builder.build" in tracer.span_names


class TestCompactUnique:
    def test_keeps_first_appearance_order(self):
        assert compact_unique(["b", None, "a", "b", "", "c"]) == ["b", "a", "c"]
