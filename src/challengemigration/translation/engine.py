"""
Bidirectional translation between the legacy and canonical taxonomies.

Legacy challenges are keyed by (track, subtrack); canonical challenges
by (track id, type id) plus tags. Translation is a lookup in a static
pair-keyed table of TrackTypeMapping entries followed by two small
branches:

- entries with ``has_task_variant`` produce type TASK instead of
  FIRST_2_FINISH when the legacy challenge is a task
- entries with ``routes_on_tags`` produce the DATA_SCIENCE track when
  the legacy tags contain "Marathon Match" or "Data Science"

The reverse direction is lossy: tags cannot be recovered from a
canonical (track, type) pair.

Example:
    >>> result = legacy_to_canonical("DEVELOP", "CODE", tags=["Marathon Match"])
    >>> result.track_id == CanonicalTrack.DATA_SCIENCE.value
    True
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from challengemigration.exceptions import ValidationError
from challengemigration.translation.constants import (
    BUG_HUNT_TAG,
    DATA_SCIENCE_MATCH_TAG,
    DATA_SCIENCE_ROUTING_TAGS,
    FE_DESIGN_TAG,
    IDEATION_TAG,
    MARATHON_MATCH_TAG,
    TEST_SCENARIOS_TAG,
    TEST_SUITES_TAG,
    TESTING_COMPETITION_TAG,
    WIREFRAME_TAG,
    CanonicalTrack,
    CanonicalType,
    LegacySubtrack,
    LegacyTrack,
)


@dataclass(frozen=True)
class TrackTypeMapping:
    """
    One entry of the legacy-to-canonical table.

    Attributes:
        track: Canonical track for the entry.
        type: Canonical type for the entry.
        tags: Tags added to the canonical challenge.
        has_task_variant: A task yields TASK instead of ``type``.
        routes_on_tags: The track depends on the legacy tags.
    """

    track: CanonicalTrack
    type: CanonicalType
    tags: tuple[str, ...] = ()
    has_task_variant: bool = False
    routes_on_tags: bool = False


@dataclass(frozen=True)
class CanonicalTrackType:
    """Canonical categorization of a legacy challenge."""

    track_id: str
    type_id: str
    track: str
    type: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class LegacyTrackSubtrack:
    """Legacy categorization of a canonical (track, type) pair."""

    track: str
    subtrack: str
    is_task: bool = False


def _challenge(track: CanonicalTrack, *tags: str) -> TrackTypeMapping:
    return TrackTypeMapping(track=track, type=CanonicalType.CHALLENGE, tags=tags)


def _first_2_finish(track: CanonicalTrack) -> TrackTypeMapping:
    return TrackTypeMapping(
        track=track,
        type=CanonicalType.FIRST_2_FINISH,
        has_task_variant=True,
    )


_DS = CanonicalTrack.DATA_SCIENCE
_DESIGN = CanonicalTrack.DESIGN
_DEV = CanonicalTrack.DEVELOPMENT
_QA = CanonicalTrack.QA

LEGACY_TO_CANONICAL: dict[tuple[LegacyTrack, LegacySubtrack], TrackTypeMapping] = {
    # Data science
    (LegacyTrack.DATA_SCIENCE, LegacySubtrack.MARATHON_MATCH): _challenge(
        _DS, DATA_SCIENCE_MATCH_TAG
    ),
    # Design
    (LegacyTrack.DESIGN, LegacySubtrack.DESIGN_FIRST_2_FINISH): _first_2_finish(_DESIGN),
    (LegacyTrack.DESIGN, LegacySubtrack.APPLICATION_FRONT_END_DESIGN): _challenge(
        _DESIGN, FE_DESIGN_TAG
    ),
    (LegacyTrack.DESIGN, LegacySubtrack.WEB_DESIGNS): _challenge(_DESIGN),
    (LegacyTrack.DESIGN, LegacySubtrack.IDEA_GENERATION): _challenge(_DESIGN, IDEATION_TAG),
    (LegacyTrack.DESIGN, LegacySubtrack.WIDGET_OR_MOBILE_SCREEN_DESIGN): _challenge(_DESIGN),
    (LegacyTrack.DESIGN, LegacySubtrack.WIREFRAMES): _challenge(_DESIGN, WIREFRAME_TAG),
    (LegacyTrack.DESIGN, LegacySubtrack.PRINT_OR_PRESENTATION): _challenge(_DESIGN),
    (LegacyTrack.DESIGN, LegacySubtrack.STUDIO_OTHER): _challenge(_DESIGN),
    (LegacyTrack.DESIGN, LegacySubtrack.BANNERS_OR_ICONS): _challenge(_DESIGN),
    (LegacyTrack.DESIGN, LegacySubtrack.LOGO_DESIGN): _challenge(_DESIGN),
    (LegacyTrack.DESIGN, LegacySubtrack.FRONT_END_FLASH): _challenge(_DESIGN),
    # Develop
    (LegacyTrack.DEVELOP, LegacySubtrack.DEVELOPMENT): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.FIRST_2_FINISH): _first_2_finish(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.CODE): TrackTypeMapping(
        track=_DEV,
        type=CanonicalType.CHALLENGE,
        routes_on_tags=True,
    ),
    (LegacyTrack.DEVELOP, LegacySubtrack.COPILOT_POSTING): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.BUG_HUNT): _challenge(_QA, BUG_HUNT_TAG),
    (LegacyTrack.DEVELOP, LegacySubtrack.DEVELOP_MARATHON_MATCH): _challenge(
        _DS, MARATHON_MATCH_TAG
    ),
    (LegacyTrack.DEVELOP, LegacySubtrack.TEST_SUITES): _challenge(_QA, TEST_SUITES_TAG),
    (LegacyTrack.DEVELOP, LegacySubtrack.UI_PROTOTYPE_COMPETITION): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.ARCHITECTURE): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.ASSEMBLY_COMPETITION): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.SPECIFICATION): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.TEST_SCENARIOS): _challenge(_QA, TEST_SCENARIOS_TAG),
    (LegacyTrack.DEVELOP, LegacySubtrack.CONCEPTUALIZATION): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.CONTENT_CREATION): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.DESIGN): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.RIA_BUILD_COMPETITION): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.RIA_COMPONENT_COMPETITION): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.REPORTING): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.PROCESS): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.LEGACY): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.TESTING_COMPETITION): _challenge(
        _QA, TESTING_COMPETITION_TAG
    ),
    (LegacyTrack.DEVELOP, LegacySubtrack.DEPLOYMENT): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.COMPONENT_PRODUCTION): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.SECURITY): _challenge(_DEV),
    (LegacyTrack.DEVELOP, LegacySubtrack.AUTOMATED_TESTING): _challenge(_DEV),
}


def _legacy(
    track: LegacyTrack, subtrack: LegacySubtrack, is_task: bool = False
) -> LegacyTrackSubtrack:
    return LegacyTrackSubtrack(track=track.value, subtrack=subtrack.value, is_task=is_task)


_DEVELOP_F2F = _legacy(LegacyTrack.DEVELOP, LegacySubtrack.FIRST_2_FINISH)
_DEVELOP_TASK = _legacy(LegacyTrack.DEVELOP, LegacySubtrack.FIRST_2_FINISH, is_task=True)
_DEVELOP_CODE = _legacy(LegacyTrack.DEVELOP, LegacySubtrack.CODE)
_DEVELOP_MM = _legacy(LegacyTrack.DEVELOP, LegacySubtrack.MARATHON_MATCH)
_DEVELOP_BUG_HUNT = _legacy(LegacyTrack.DEVELOP, LegacySubtrack.BUG_HUNT)
_DS_MM = _legacy(LegacyTrack.DATA_SCIENCE, LegacySubtrack.MARATHON_MATCH)
_WEB_DESIGNS = _legacy(LegacyTrack.DESIGN, LegacySubtrack.WEB_DESIGNS)

# QA and competitive programming share one legacy layout
_QA_LAYOUT = {
    CanonicalType.CHALLENGE: _DEVELOP_BUG_HUNT,
    CanonicalType.FIRST_2_FINISH: _DEVELOP_F2F,
    CanonicalType.TASK: _DEVELOP_TASK,
    CanonicalType.PRACTICE_CHALLENGE: _DEVELOP_CODE,
    CanonicalType.MARATHON_MATCH: _DEVELOP_MM,
    CanonicalType.RAPID_DEVELOPMENT_MATCH: _DEVELOP_CODE,
    CanonicalType.SKILL_BUILDER: _DEVELOP_CODE,
}

_CANONICAL_LAYOUTS: dict[CanonicalTrack, dict[CanonicalType, LegacyTrackSubtrack]] = {
    CanonicalTrack.DATA_SCIENCE: {
        CanonicalType.CHALLENGE: _DS_MM,
        CanonicalType.FIRST_2_FINISH: _DEVELOP_F2F,
        CanonicalType.TASK: _DEVELOP_TASK,
        CanonicalType.PRACTICE_CHALLENGE: _DS_MM,
        CanonicalType.MARATHON_MATCH: _DS_MM,
        CanonicalType.RAPID_DEVELOPMENT_MATCH: _DEVELOP_CODE,
        CanonicalType.SKILL_BUILDER: _DS_MM,
    },
    CanonicalTrack.DESIGN: {
        CanonicalType.CHALLENGE: _WEB_DESIGNS,
        CanonicalType.FIRST_2_FINISH: _legacy(
            LegacyTrack.DESIGN, LegacySubtrack.DESIGN_FIRST_2_FINISH
        ),
        CanonicalType.TASK: _legacy(
            LegacyTrack.DESIGN, LegacySubtrack.DESIGN_FIRST_2_FINISH, is_task=True
        ),
        CanonicalType.PRACTICE_CHALLENGE: _WEB_DESIGNS,
        CanonicalType.MARATHON_MATCH: _legacy(LegacyTrack.DESIGN, LegacySubtrack.MARATHON_MATCH),
        CanonicalType.RAPID_DEVELOPMENT_MATCH: _WEB_DESIGNS,
        CanonicalType.SKILL_BUILDER: _WEB_DESIGNS,
    },
    CanonicalTrack.DEVELOPMENT: {
        CanonicalType.CHALLENGE: _DEVELOP_CODE,
        CanonicalType.FIRST_2_FINISH: _DEVELOP_F2F,
        CanonicalType.TASK: _DEVELOP_TASK,
        CanonicalType.PRACTICE_CHALLENGE: _DEVELOP_CODE,
        CanonicalType.MARATHON_MATCH: _DEVELOP_MM,
        CanonicalType.RAPID_DEVELOPMENT_MATCH: _DEVELOP_CODE,
        CanonicalType.SKILL_BUILDER: _DEVELOP_CODE,
    },
    CanonicalTrack.QA: _QA_LAYOUT,
    CanonicalTrack.CMP: _QA_LAYOUT,
}

CANONICAL_TO_LEGACY: dict[tuple[CanonicalTrack, CanonicalType], LegacyTrackSubtrack] = {
    (track, type_): legacy
    for track, layout in _CANONICAL_LAYOUTS.items()
    for type_, legacy in layout.items()
}


def _parse(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {field} {value!r}", field=field) from None


def legacy_to_canonical(
    track: str | LegacyTrack,
    subtrack: str | LegacySubtrack,
    is_task: bool = False,
    tags: Iterable[str | None] = (),
) -> CanonicalTrackType:
    """
    Translate a legacy categorization to the canonical one.

    Args:
        track: Legacy track (e.g. "DEVELOP").
        subtrack: Legacy subtrack (e.g. "CODE").
        is_task: Whether the legacy challenge is a task.
        tags: Legacy tags, consulted only by tag-routed entries.

    Returns:
        The canonical track id, type id, display names and extra tags.

    Raises:
        ValidationError: If the track, the subtrack, or the pair is unknown.
    """
    legacy_track = _parse(LegacyTrack, track, "track")
    legacy_subtrack = _parse(LegacySubtrack, subtrack, "subtrack")

    mapping = LEGACY_TO_CANONICAL.get((legacy_track, legacy_subtrack))
    if mapping is None:
        raise ValidationError(
            f"No canonical mapping for legacy track {legacy_track.value} "
            f"subtrack {legacy_subtrack.value}",
            field="subtrack",
        )

    canonical_track = mapping.track
    if mapping.routes_on_tags and DATA_SCIENCE_ROUTING_TAGS.intersection(tags):
        canonical_track = CanonicalTrack.DATA_SCIENCE

    canonical_type = mapping.type
    if mapping.has_task_variant and is_task:
        canonical_type = CanonicalType.TASK

    return CanonicalTrackType(
        track_id=canonical_track.value,
        type_id=canonical_type.value,
        track=canonical_track.display_name,
        type=canonical_type.display_name,
        tags=mapping.tags,
    )


def canonical_to_legacy(
    track_id: str | CanonicalTrack,
    type_id: str | CanonicalType,
) -> LegacyTrackSubtrack:
    """
    Translate a canonical (track id, type id) pair back to the legacy taxonomy.

    Raises:
        ValidationError: If the track id, the type id, or the pair is unknown.
    """
    canonical_track = _parse(CanonicalTrack, track_id, "track_id")
    canonical_type = _parse(CanonicalType, type_id, "type_id")

    legacy = CANONICAL_TO_LEGACY.get((canonical_track, canonical_type))
    if legacy is None:
        raise ValidationError(
            f"No legacy mapping for track {canonical_track.name} type {canonical_type.name}",
            field="type_id",
        )
    return legacy


def supported_legacy_pairs() -> list[tuple[LegacyTrack, LegacySubtrack]]:
    """Every (track, subtrack) pair that legacy_to_canonical accepts."""
    return list(LEGACY_TO_CANONICAL)


__all__ = [
    "TrackTypeMapping",
    "CanonicalTrackType",
    "LegacyTrackSubtrack",
    "LEGACY_TO_CANONICAL",
    "CANONICAL_TO_LEGACY",
    "legacy_to_canonical",
    "canonical_to_legacy",
    "supported_legacy_pairs",
]
