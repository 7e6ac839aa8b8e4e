"""
Translation between legacy (track, subtrack) and canonical (track, type) taxonomies.
"""

from challengemigration.translation.constants import (
    DATA_SCIENCE_MATCH_TAG,
    DATA_SCIENCE_TAG,
    MARATHON_MATCH_TAG,
    CanonicalTrack,
    CanonicalType,
    LegacySubtrack,
    LegacyTrack,
)
from challengemigration.translation.engine import (
    CANONICAL_TO_LEGACY,
    LEGACY_TO_CANONICAL,
    CanonicalTrackType,
    LegacyTrackSubtrack,
    TrackTypeMapping,
    canonical_to_legacy,
    legacy_to_canonical,
    supported_legacy_pairs,
)

__all__ = [
    # Taxonomies
    "LegacyTrack",
    "LegacySubtrack",
    "CanonicalTrack",
    "CanonicalType",
    "MARATHON_MATCH_TAG",
    "DATA_SCIENCE_TAG",
    "DATA_SCIENCE_MATCH_TAG",
    # Engine
    "TrackTypeMapping",
    "CanonicalTrackType",
    "LegacyTrackSubtrack",
    "LEGACY_TO_CANONICAL",
    "CANONICAL_TO_LEGACY",
    "legacy_to_canonical",
    "canonical_to_legacy",
    "supported_legacy_pairs",
]
