"""
Observability utilities for challengemigration.

Note:
    OpenTelemetry is an optional dependency (``challengemigration[telemetry]``).
    Everything in this module works when it is not installed.
"""

from challengemigration.observability.attributes import (
    ATTR_BATCH_SIZE,
    ATTR_CACHE_MISSES,
    ATTR_CHALLENGE_ID,
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_DECISION,
    ATTR_ERROR_TYPE,
    ATTR_FORCE_MIGRATE,
    ATTR_GROUP_COUNT,
    ATTR_HTTP_STATUS_CODE,
    ATTR_HTTP_URL,
    ATTR_LEGACY_ID,
    ATTR_MIGRATION_STATUS,
    ATTR_PAGE,
    ATTR_TRACK_ID,
    ATTR_TYPE_ID,
)
from challengemigration.observability.tracer import (
    OTEL_AVAILABLE,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)

__all__ = [
    "OTEL_AVAILABLE",
    # Tracer
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    # Attributes
    "ATTR_BATCH_SIZE",
    "ATTR_CACHE_MISSES",
    "ATTR_CHALLENGE_ID",
    "ATTR_DB_OPERATION",
    "ATTR_DB_SYSTEM",
    "ATTR_DECISION",
    "ATTR_ERROR_TYPE",
    "ATTR_FORCE_MIGRATE",
    "ATTR_GROUP_COUNT",
    "ATTR_HTTP_STATUS_CODE",
    "ATTR_HTTP_URL",
    "ATTR_LEGACY_ID",
    "ATTR_MIGRATION_STATUS",
    "ATTR_PAGE",
    "ATTR_TRACK_ID",
    "ATTR_TYPE_ID",
]
