"""
Identifiers of the legacy and canonical challenge taxonomies.

Legacy challenges are categorized by (track, subtrack). Canonical
challenges are categorized by (track id, type id) plus tags.
"""

from __future__ import annotations

from enum import Enum


class LegacyTrack(Enum):
    """Legacy top-level track."""

    DEVELOP = "DEVELOP"
    DATA_SCIENCE = "DATA_SCIENCE"
    DESIGN = "DESIGN"


class LegacySubtrack(Enum):
    """
    Legacy fine-grained category.

    Values are the literals stored by the legacy system. Two of them do
    not follow the upper-snake convention (``Legacy`` and
    ``AUTOMATED TESTING``).
    """

    MARATHON_MATCH = "MARATHON_MATCH"
    DESIGN_FIRST_2_FINISH = "DESIGN_FIRST_2_FINISH"
    APPLICATION_FRONT_END_DESIGN = "APPLICATION_FRONT_END_DESIGN"
    WEB_DESIGNS = "WEB_DESIGNS"
    IDEA_GENERATION = "IDEA_GENERATION"
    WIDGET_OR_MOBILE_SCREEN_DESIGN = "WIDGET_OR_MOBILE_SCREEN_DESIGN"
    WIREFRAMES = "WIREFRAMES"
    PRINT_OR_PRESENTATION = "PRINT_OR_PRESENTATION"
    STUDIO_OTHER = "STUDIO_OTHER"
    BANNERS_OR_ICONS = "BANNERS_OR_ICONS"
    LOGO_DESIGN = "LOGO_DESIGN"
    FRONT_END_FLASH = "FRONT_END_FLASH"
    DEVELOPMENT = "DEVELOPMENT"
    FIRST_2_FINISH = "FIRST_2_FINISH"
    CODE = "CODE"
    COPILOT_POSTING = "COPILOT_POSTING"
    BUG_HUNT = "BUG_HUNT"
    DEVELOP_MARATHON_MATCH = "DEVELOP_MARATHON_MATCH"
    TEST_SUITES = "TEST_SUITES"
    UI_PROTOTYPE_COMPETITION = "UI_PROTOTYPE_COMPETITION"
    ARCHITECTURE = "ARCHITECTURE"
    ASSEMBLY_COMPETITION = "ASSEMBLY_COMPETITION"
    SPECIFICATION = "SPECIFICATION"
    TEST_SCENARIOS = "TEST_SCENARIOS"
    CONCEPTUALIZATION = "CONCEPTUALIZATION"
    CONTENT_CREATION = "CONTENT_CREATION"
    DESIGN = "DESIGN"
    RIA_BUILD_COMPETITION = "RIA_BUILD_COMPETITION"
    RIA_COMPONENT_COMPETITION = "RIA_COMPONENT_COMPETITION"
    REPORTING = "REPORTING"
    PROCESS = "PROCESS"
    LEGACY = "Legacy"
    TESTING_COMPETITION = "TESTING_COMPETITION"
    DEPLOYMENT = "DEPLOYMENT"
    COMPONENT_PRODUCTION = "COMPONENT_PRODUCTION"
    AUTOMATED_TESTING = "AUTOMATED TESTING"
    SECURITY = "SECURITY"


class CanonicalTrack(Enum):
    """Canonical track, valued by its id."""

    DATA_SCIENCE = "c0f5d461-8219-4c14-878a-c3a3f356466d"
    DESIGN = "5fa04185-041f-49a6-bfd1-fe82533cd6c8"
    DEVELOPMENT = "9b6fc876-f4d9-4ccb-9dfd-419247628825"
    QA = "36e6a8d0-7e1e-4608-a673-64279d99c115"
    CMP = "9d6e0de8-df14-4c76-ba0a-a9a8cb03a4ea"

    @property
    def display_name(self) -> str:
        return _TRACK_NAMES[self]


class CanonicalType(Enum):
    """Canonical challenge type, valued by its id."""

    CHALLENGE = "927abff4-7af9-4145-8ba1-577c16e64e2e"
    TASK = "ecd58c69-238f-43a4-a4bb-d172719b9f31"
    FIRST_2_FINISH = "dc876fa4-ef2d-4eee-b701-b555fcc6544c"
    PRACTICE_CHALLENGE = "34602883-a58d-45a9-b370-749574b6890d"
    MARATHON_MATCH = "929bc408-9cf2-4b3e-ba71-adfbf693046c"
    RAPID_DEVELOPMENT_MATCH = "78b37a69-92d5-4ad7-bf85-c79b65420c79"
    SKILL_BUILDER = "ddc4252a-270c-408f-a15d-2f31c2141cd3"

    @property
    def display_name(self) -> str:
        return _TYPE_NAMES[self]


_TRACK_NAMES = {
    CanonicalTrack.DATA_SCIENCE: "Data Science",
    CanonicalTrack.DESIGN: "Design",
    CanonicalTrack.DEVELOPMENT: "Development",
    CanonicalTrack.QA: "Quality Assurance",
    CanonicalTrack.CMP: "Competitive Programming",
}

_TYPE_NAMES = {
    CanonicalType.CHALLENGE: "Challenge",
    CanonicalType.TASK: "Task",
    CanonicalType.FIRST_2_FINISH: "First2Finish",
    CanonicalType.PRACTICE_CHALLENGE: "Practice Challenge",
    CanonicalType.MARATHON_MATCH: "Marathon Match",
    CanonicalType.RAPID_DEVELOPMENT_MATCH: "Rapid Development Match",
    CanonicalType.SKILL_BUILDER: "Skill Builder",
}

# Tags
MARATHON_MATCH_TAG = "Marathon Match"
DATA_SCIENCE_TAG = "Data Science"
DATA_SCIENCE_MATCH_TAG = "Data Science Match"
FE_DESIGN_TAG = "Front-End Design"
IDEATION_TAG = "Ideation"
WIREFRAME_TAG = "Wireframe"
BUG_HUNT_TAG = "Bug Hunt"
TEST_SUITES_TAG = "Test Suites"
TEST_SCENARIOS_TAG = "Test Scenarios"
TESTING_COMPETITION_TAG = "Testing Competition"

# A legacy CODE challenge carrying any of these tags is a data science challenge
DATA_SCIENCE_ROUTING_TAGS = frozenset({MARATHON_MATCH_TAG, DATA_SCIENCE_TAG})


__all__ = [
    "LegacyTrack",
    "LegacySubtrack",
    "CanonicalTrack",
    "CanonicalType",
    "MARATHON_MATCH_TAG",
    "DATA_SCIENCE_TAG",
    "DATA_SCIENCE_MATCH_TAG",
    "FE_DESIGN_TAG",
    "IDEATION_TAG",
    "WIREFRAME_TAG",
    "BUG_HUNT_TAG",
    "TEST_SUITES_TAG",
    "TEST_SCENARIOS_TAG",
    "TESTING_COMPETITION_TAG",
    "DATA_SCIENCE_ROUTING_TAGS",
]
