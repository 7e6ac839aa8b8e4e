"""
Standard span attributes for challengemigration.

Attribute names are shared by every component so spans from the
coordinator, the builder and the repositories can be correlated.
Database attributes follow the OpenTelemetry semantic conventions.
"""

# =============================================================================
# Challenge Attributes
# =============================================================================

ATTR_LEGACY_ID = "challengemigration.legacy.id"
"""Legacy (numeric) challenge identifier."""

ATTR_CHALLENGE_ID = "challengemigration.challenge.id"
"""Canonical challenge identifier (UUID string)."""

ATTR_TRACK_ID = "challengemigration.track.id"
"""Canonical track identifier."""

ATTR_TYPE_ID = "challengemigration.type.id"
"""Canonical type identifier."""

# =============================================================================
# Migration Attributes
# =============================================================================

ATTR_MIGRATION_STATUS = "challengemigration.migration.status"
"""Ledger status written for a record (Queued, InProgress, Success, Failed)."""

ATTR_FORCE_MIGRATE = "challengemigration.migration.force"
"""Whether the timestamp check was bypassed."""

ATTR_DECISION = "challengemigration.migration.decision"
"""Outcome of the re-migration check (skip or migrate)."""

ATTR_BATCH_SIZE = "challengemigration.batch.size"
"""Number of legacy ids requested per page."""

ATTR_PAGE = "challengemigration.page"
"""Page number of a paginated read."""

# =============================================================================
# Resolver Attributes
# =============================================================================

ATTR_GROUP_COUNT = "challengemigration.groups.count"
"""Number of legacy group ids being resolved."""

ATTR_CACHE_MISSES = "challengemigration.cache.misses"
"""Number of ids that required an external lookup."""

# =============================================================================
# Database Attributes (OTEL semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system (postgresql, sqlite, memory)."""

ATTR_DB_OPERATION = "db.operation"
"""Database operation (SELECT, INSERT, UPDATE)."""

# =============================================================================
# HTTP Attributes (OTEL semantic conventions)
# =============================================================================

ATTR_HTTP_URL = "http.url"
"""Full request URL."""

ATTR_HTTP_STATUS_CODE = "http.status_code"
"""Response status code."""

# =============================================================================
# Error Attributes
# =============================================================================

ATTR_ERROR_TYPE = "error.type"
"""Exception class name for a failed operation."""
