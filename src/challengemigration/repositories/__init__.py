"""
Repositories for migration state.
"""

from challengemigration.repositories.status import (
    MAX_ERROR_MESSAGE_LENGTH,
    POSTGRESQL_STATUS_SCHEMA,
    SQLITE_STATUS_SCHEMA,
    STATUS_TABLE,
    InMemoryMigrationStatusRepository,
    MigrationStatusRepository,
    PostgreSQLMigrationStatusRepository,
    SQLiteMigrationStatusRepository,
)

__all__ = [
    "MAX_ERROR_MESSAGE_LENGTH",
    "STATUS_TABLE",
    "SQLITE_STATUS_SCHEMA",
    "POSTGRESQL_STATUS_SCHEMA",
    "MigrationStatusRepository",
    "InMemoryMigrationStatusRepository",
    "SQLiteMigrationStatusRepository",
    "PostgreSQLMigrationStatusRepository",
]
