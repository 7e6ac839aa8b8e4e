"""
Configuration for challenge migration runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_MIGRATION_ACTOR = "v5migration"
DEFAULT_REVIEW_TYPE = "COMMUNITY"
DEFAULT_DESCRIPTION_FORMAT = "HTML"


@dataclass(frozen=True)
class MigrationConfig:
    """
    Configuration for the migration coordinator and its collaborators.

    This class is immutable (frozen) so a run cannot change its own
    settings half-way through a batch.

    Attributes:
        batch_size: Legacy ids requested per page during a full run (default 100).
        terms_page_size: Terms requested per catalog page (default 100).
        max_terms_pages: Upper bound on catalog pages fetched (default 1000).
        phase_name_mappings: Legacy phase name to canonical phase id.
        migration_actor: Actor recorded as creator/updater when the
            legacy audit row is missing (default "v5migration").
        default_review_type: Review type used when the listing has none.
        description_format: Format tag stored with the description.

    Example:
        >>> config = MigrationConfig(
        ...     batch_size=50,
        ...     phase_name_mappings={"Registration": "a93544bc-..."},
        ... )
        >>> config.batch_size
        50
    """

    batch_size: int = 100
    terms_page_size: int = 100
    max_terms_pages: int = 1000
    phase_name_mappings: dict[str, str] = field(default_factory=dict)
    migration_actor: str = DEFAULT_MIGRATION_ACTOR
    default_review_type: str = DEFAULT_REVIEW_TYPE
    description_format: str = DEFAULT_DESCRIPTION_FORMAT

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")

        if self.terms_page_size < 1:
            raise ValueError(f"terms_page_size must be >= 1, got {self.terms_page_size}")

        if self.max_terms_pages < 1:
            raise ValueError(f"max_terms_pages must be >= 1, got {self.max_terms_pages}")

        if not self.migration_actor:
            raise ValueError("migration_actor must not be empty")

    def phase_id_for(self, phase_name: str | None) -> str | None:
        """Return the canonical phase id for a legacy phase name, if mapped."""
        if phase_name is None:
            return None
        return self.phase_name_mappings.get(phase_name)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON storage.

        Returns:
            Dictionary representation suitable for JSON serialization.
        """
        return {
            "batch_size": self.batch_size,
            "terms_page_size": self.terms_page_size,
            "max_terms_pages": self.max_terms_pages,
            "phase_name_mappings": dict(self.phase_name_mappings),
            "migration_actor": self.migration_actor,
            "default_review_type": self.default_review_type,
            "description_format": self.description_format,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MigrationConfig:
        """
        Create from dictionary.

        ``phase_name_mappings`` may be given either as a mapping or as a
        list of ``{"name": ..., "phaseId": ...}`` entries.

        Args:
            data: Dictionary containing configuration values.

        Returns:
            MigrationConfig instance.
        """
        mappings = data.get("phase_name_mappings") or {}
        if isinstance(mappings, list):
            mappings = {entry["name"]: entry["phaseId"] for entry in mappings}

        return cls(
            batch_size=data.get("batch_size", 100),
            terms_page_size=data.get("terms_page_size", 100),
            max_terms_pages=data.get("max_terms_pages", 1000),
            phase_name_mappings=dict(mappings),
            migration_actor=data.get("migration_actor", DEFAULT_MIGRATION_ACTOR),
            default_review_type=data.get("default_review_type", DEFAULT_REVIEW_TYPE),
            description_format=data.get("description_format", DEFAULT_DESCRIPTION_FORMAT),
        )


__all__ = [
    "DEFAULT_DESCRIPTION_FORMAT",
    "DEFAULT_MIGRATION_ACTOR",
    "DEFAULT_REVIEW_TYPE",
    "MigrationConfig",
]
