"""
Exceptions for the challenge migration system.

Exception Hierarchy:
    MigrationError (base)
    +-- ValidationError    unmappable or unresolvable record data
    +-- NotFoundError      required reference missing in a directory/catalog
    +-- TransientError     network or store failure during a read or write
    +-- ConflictError      a run was requested while another is in flight

Every exception carries an ErrorClassification describing its severity
and whether retrying can help. Builder, resolver and repositories raise
these; the coordinator is the only place that converts them into
ledger entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """
    Severity level of migration errors.

    Attributes:
        CRITICAL: System-level failure requiring immediate attention.
        ERROR: Failure of a single record or operation.
        WARNING: Condition worth monitoring that may resolve by itself.
        INFO: Informational condition, not a failure.
    """

    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def log_level(self) -> int:
        """Get the corresponding Python logging level."""
        level_map = {
            ErrorSeverity.CRITICAL: logging.CRITICAL,
            ErrorSeverity.ERROR: logging.ERROR,
            ErrorSeverity.WARNING: logging.WARNING,
            ErrorSeverity.INFO: logging.INFO,
        }
        return level_map[self]


class ErrorRecoverability(Enum):
    """
    Recoverability classification for migration errors.

    Attributes:
        RECOVERABLE: The caller can act on it (e.g. wait for a run to end).
        TRANSIENT: Temporary failure; a later run or a retry may succeed.
        FATAL: The record cannot be migrated until its data is fixed.
    """

    RECOVERABLE = "recoverable"
    TRANSIENT = "transient"
    FATAL = "fatal"

    @property
    def should_retry(self) -> bool:
        """True only for TRANSIENT errors."""
        return self == ErrorRecoverability.TRANSIENT


@dataclass(frozen=True)
class ErrorClassification:
    """
    Metadata describing how an error should be handled.

    Attributes:
        severity: The severity level of the error.
        recoverability: How the error can be recovered from.
        error_code: Unique error code for programmatic handling.
        category: Error category for grouping related errors.
        suggested_action: Human-readable guidance for operators.
    """

    severity: ErrorSeverity
    recoverability: ErrorRecoverability
    error_code: str
    category: str
    suggested_action: str

    def to_dict(self) -> dict[str, Any]:
        """Convert classification to dictionary for serialization."""
        return {
            "severity": self.severity.value,
            "recoverability": self.recoverability.value,
            "error_code": self.error_code,
            "category": self.category,
            "suggested_action": self.suggested_action,
        }


class MigrationError(Exception):
    """
    Base exception for all challenge migration errors.

    Attributes:
        message: Human-readable error description.
        legacy_id: The legacy challenge id involved, if known.
    """

    _default_classification: ErrorClassification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.FATAL,
        error_code="MIGRATION_ERROR",
        category="general",
        suggested_action="Review migration logs for the affected challenge",
    )

    def __init__(self, message: str, *, legacy_id: int | None = None) -> None:
        self.message = message
        self.legacy_id = legacy_id
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error string with context."""
        if self.legacy_id is not None:
            return f"{self.message} legacy_id={self.legacy_id}"
        return self.message

    @property
    def classification(self) -> ErrorClassification:
        """Classification metadata for this error type."""
        return self._default_classification

    @property
    def severity(self) -> ErrorSeverity:
        return self.classification.severity

    @property
    def error_code(self) -> str:
        return self.classification.error_code

    @property
    def is_transient(self) -> bool:
        return self.classification.recoverability.should_retry

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for API responses and logging."""
        return {
            "message": self.message,
            "legacy_id": self.legacy_id,
            "error_code": self.error_code,
            "classification": self.classification.to_dict(),
        }


class ValidationError(MigrationError):
    """
    Raised when a legacy record cannot be mapped to the canonical schema.

    Typical causes are an unknown track/subtrack combination, a missing
    timeline template for the resolved track and type, or a legacy term
    with no canonical counterpart.

    Attributes:
        field: Name of the offending field, if known.
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.FATAL,
        error_code="VALIDATION_ERROR",
        category="data",
        suggested_action="Fix the legacy record or extend the mapping tables",
    )

    def __init__(
        self,
        message: str,
        *,
        legacy_id: int | None = None,
        field: str | None = None,
    ) -> None:
        self.field = field
        super().__init__(message, legacy_id=legacy_id)


class NotFoundError(MigrationError):
    """
    Raised when a required reference is missing from an external directory.

    Attributes:
        resource: Kind of reference that was looked up (e.g. "group").
        identifier: The identifier that could not be found.
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.ERROR,
        recoverability=ErrorRecoverability.FATAL,
        error_code="NOT_FOUND",
        category="lookup",
        suggested_action="Create the missing reference in the target system, then retry",
    )

    def __init__(
        self,
        resource: str,
        identifier: Any,
        *,
        legacy_id: int | None = None,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message or f"{resource} {identifier} not found",
            legacy_id=legacy_id,
        )


class TransientError(MigrationError):
    """
    Raised when a network call or store operation fails.

    The failure is not caused by the record itself, so a later run or an
    explicit retry is expected to succeed.
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.WARNING,
        recoverability=ErrorRecoverability.TRANSIENT,
        error_code="TRANSIENT_ERROR",
        category="connectivity",
        suggested_action="Check connectivity to the external service and retry",
    )


class ConflictError(MigrationError):
    """
    Raised when a run is requested while another one is in flight.

    No state is changed when this error is raised.
    """

    _default_classification = ErrorClassification(
        severity=ErrorSeverity.WARNING,
        recoverability=ErrorRecoverability.RECOVERABLE,
        error_code="MIGRATION_RUNNING",
        category="state",
        suggested_action="Wait for the current run to finish",
    )

    def __init__(self, message: str = "The migration is running.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


__all__ = [
    "ErrorSeverity",
    "ErrorRecoverability",
    "ErrorClassification",
    "MigrationError",
    "ValidationError",
    "NotFoundError",
    "TransientError",
    "ConflictError",
]
