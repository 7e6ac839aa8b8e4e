"""
Status ledger for challenge migrations.

The ledger keeps exactly one record per legacy challenge id describing
its latest migration attempt. Every write is an upsert; history is not
retained.

Implementations:
    - InMemoryMigrationStatusRepository: dict-backed, for tests and dry runs
    - SQLiteMigrationStatusRepository: aiosqlite connection
    - PostgreSQLMigrationStatusRepository: SQLAlchemy AsyncConnection/AsyncEngine

Persistence failures raise TransientError; invalid paging arguments raise
ValueError.

Usage:
    >>> repo = SQLiteMigrationStatusRepository(db)
    >>> await repo.initialize()
    >>> await repo.record_queued(30054321)
    >>> await repo.record_start(30054321, legacy_modified_at)
    >>> await repo.record_end(30054321, challenge_id, MigrationStatus.SUCCESS)
    >>> page = await repo.query(StatusFilter(status=MigrationStatus.FAILED), 0, 50)
"""

from __future__ import annotations

import asyncio
import contextlib
import itertools
import sqlite3
from collections.abc import Iterator, Sequence
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from challengemigration.exceptions import TransientError
from challengemigration.models import (
    MigrationStatus,
    MigrationStatusRecord,
    StatusFilter,
    StatusPage,
)
from challengemigration.observability import (
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_LEGACY_ID,
    ATTR_MIGRATION_STATUS,
    ATTR_PAGE,
    Tracer,
    create_tracer,
)
from challengemigration.repositories._connection import execute_with_connection

if TYPE_CHECKING:
    import aiosqlite

MAX_ERROR_MESSAGE_LENGTH = 1000

STATUS_TABLE = "challenge_migration_status"

SQLITE_STATUS_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {STATUS_TABLE} (
    legacy_id INTEGER PRIMARY KEY,
    challenge_id TEXT,
    status TEXT NOT NULL,
    source_modified_at TEXT,
    started_at TEXT,
    ended_at TEXT,
    error_message TEXT,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_{STATUS_TABLE}_status ON {STATUS_TABLE} (status);
CREATE INDEX IF NOT EXISTS idx_{STATUS_TABLE}_challenge_id ON {STATUS_TABLE} (challenge_id);
CREATE INDEX IF NOT EXISTS idx_{STATUS_TABLE}_updated_at ON {STATUS_TABLE} (updated_at);
"""

POSTGRESQL_STATUS_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {STATUS_TABLE} (
    legacy_id BIGINT PRIMARY KEY,
    challenge_id VARCHAR(64),
    status VARCHAR(16) NOT NULL,
    source_modified_at TIMESTAMPTZ,
    started_at TIMESTAMPTZ,
    ended_at TIMESTAMPTZ,
    error_message VARCHAR({MAX_ERROR_MESSAGE_LENGTH}),
    updated_at TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_{STATUS_TABLE}_status ON {STATUS_TABLE} (status);
CREATE INDEX IF NOT EXISTS idx_{STATUS_TABLE}_challenge_id ON {STATUS_TABLE} (challenge_id);
CREATE INDEX IF NOT EXISTS idx_{STATUS_TABLE}_updated_at ON {STATUS_TABLE} (updated_at DESC);
"""

_COLUMNS = (
    "legacy_id, challenge_id, status, source_modified_at, "
    "started_at, ended_at, error_message, updated_at"
)


@runtime_checkable
class MigrationStatusRepository(Protocol):
    """
    Protocol for the migration status ledger.

    All record_* methods upsert the single record of a legacy id.
    """

    async def record_queued(self, legacy_id: int) -> None:
        """
        Mark a legacy challenge as selected for migration.

        Clears started_at, ended_at and error_message of any previous attempt.
        """
        ...

    async def record_start(self, legacy_id: int, source_modified_at: datetime | None) -> None:
        """
        Mark an attempt as started.

        Args:
            legacy_id: Legacy challenge id
            source_modified_at: Legacy last-modified timestamp captured at start
        """
        ...

    async def record_end(
        self,
        legacy_id: int,
        challenge_id: str | None,
        status: MigrationStatus,
        error_message: str | None = None,
    ) -> None:
        """
        Mark an attempt as finished.

        Args:
            legacy_id: Legacy challenge id
            challenge_id: Canonical id obtained, if any
            status: SUCCESS or FAILED
            error_message: Failure cause (truncated to 1000 characters)

        Raises:
            ValueError: If status is not terminal
        """
        ...

    async def get(self, legacy_id: int) -> MigrationStatusRecord | None: ...

    async def query(
        self,
        status_filter: StatusFilter | None = None,
        page: int = 0,
        per_page: int = 50,
    ) -> StatusPage:
        """
        Query ledger records, newest update first.

        Args:
            status_filter: Fields to match (ANDed); None matches everything
            page: Zero-indexed page number
            per_page: Records per page

        Raises:
            ValueError: If page < 0 or per_page < 1
        """
        ...


# =============================================================================
# Helpers shared by implementations
# =============================================================================


def _truncate(message: str | None) -> str | None:
    if message is None:
        return None
    return message[:MAX_ERROR_MESSAGE_LENGTH]


def _validate_paging(page: int, per_page: int) -> None:
    if page < 0:
        raise ValueError(f"page must be >= 0, got {page}")
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")


def _validate_terminal(status: MigrationStatus) -> None:
    if not status.is_terminal:
        raise ValueError(f"record_end requires a terminal status, got {status.value}")


def _where_clause(
    status_filter: StatusFilter | None, placeholder: str
) -> tuple[str, dict[str, Any]]:
    """
    Build a WHERE clause and its parameters from a filter.

    ``placeholder`` formats a named parameter; ":{}" works for both
    SQLAlchemy text() and the sqlite3 named style.
    """
    if status_filter is None:
        return "", {}

    clauses = []
    params: dict[str, Any] = {}
    if status_filter.legacy_id is not None:
        clauses.append(f"legacy_id = {placeholder.format('legacy_id')}")
        params["legacy_id"] = status_filter.legacy_id
    if status_filter.challenge_id is not None:
        clauses.append(f"challenge_id = {placeholder.format('challenge_id')}")
        params["challenge_id"] = status_filter.challenge_id
    if status_filter.status is not None:
        clauses.append(f"status = {placeholder.format('status')}")
        params["status"] = status_filter.status.value

    if not clauses:
        return "", {}
    return "WHERE " + " AND ".join(clauses), params


# =============================================================================
# In-memory implementation
# =============================================================================


class InMemoryMigrationStatusRepository:
    """
    In-memory implementation of the status ledger.

    All data is lost when the process terminates.

    Example:
        >>> repo = InMemoryMigrationStatusRepository()
        >>> await repo.record_queued(30054321)
        >>> (await repo.get(30054321)).status
        <MigrationStatus.QUEUED: 'Queued'>
    """

    def __init__(
        self,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._records: dict[int, MigrationStatusRecord] = {}
        # Write sequence per legacy id, breaks ties between equal timestamps
        self._sequence: dict[int, int] = {}
        self._counter = itertools.count()
        self._lock: asyncio.Lock = asyncio.Lock()

    async def record_queued(self, legacy_id: int) -> None:
        with self._span("record_queued", legacy_id, MigrationStatus.QUEUED):
            async with self._lock:
                existing = self._records.get(legacy_id)
                self._put(
                    MigrationStatusRecord(
                        legacy_id=legacy_id,
                        status=MigrationStatus.QUEUED,
                        challenge_id=existing.challenge_id if existing else None,
                        source_modified_at=existing.source_modified_at if existing else None,
                        updated_at=datetime.now(UTC),
                    )
                )

    async def record_start(self, legacy_id: int, source_modified_at: datetime | None) -> None:
        with self._span("record_start", legacy_id, MigrationStatus.IN_PROGRESS):
            async with self._lock:
                now = datetime.now(UTC)
                existing = self._records.get(legacy_id)
                self._put(
                    MigrationStatusRecord(
                        legacy_id=legacy_id,
                        status=MigrationStatus.IN_PROGRESS,
                        challenge_id=existing.challenge_id if existing else None,
                        source_modified_at=source_modified_at,
                        started_at=now,
                        updated_at=now,
                    )
                )

    async def record_end(
        self,
        legacy_id: int,
        challenge_id: str | None,
        status: MigrationStatus,
        error_message: str | None = None,
    ) -> None:
        _validate_terminal(status)
        with self._span("record_end", legacy_id, status):
            async with self._lock:
                now = datetime.now(UTC)
                existing = self._records.get(legacy_id) or MigrationStatusRecord(
                    legacy_id=legacy_id,
                    status=status,
                )
                self._put(
                    replace(
                        existing,
                        status=status,
                        challenge_id=challenge_id or existing.challenge_id,
                        ended_at=now,
                        error_message=_truncate(error_message),
                        updated_at=now,
                    )
                )

    async def get(self, legacy_id: int) -> MigrationStatusRecord | None:
        with self._span("get", legacy_id):
            record = self._records.get(legacy_id)
            return replace(record) if record else None

    async def query(
        self,
        status_filter: StatusFilter | None = None,
        page: int = 0,
        per_page: int = 50,
    ) -> StatusPage:
        _validate_paging(page, per_page)
        with self._tracer.span(
            "challengemigration.status_repo.query",
            {ATTR_PAGE: page, ATTR_DB_SYSTEM: "memory"},
        ):
            async with self._lock:
                matches = [
                    record
                    for record in self._records.values()
                    if status_filter is None or status_filter.matches(record)
                ]
                matches.sort(
                    key=lambda r: (r.updated_at, self._sequence[r.legacy_id]),
                    reverse=True,
                )
                start = page * per_page
                items = [replace(r) for r in matches[start : start + per_page]]
            return StatusPage(total=len(matches), items=items, page=page, per_page=per_page)

    async def clear(self) -> None:
        """Remove all records."""
        async with self._lock:
            self._records.clear()
            self._sequence.clear()

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _put(self, record: MigrationStatusRecord) -> None:
        self._records[record.legacy_id] = record
        self._sequence[record.legacy_id] = next(self._counter)

    def _span(
        self,
        operation: str,
        legacy_id: int,
        status: MigrationStatus | None = None,
    ) -> contextlib.AbstractContextManager[Any]:
        attributes: dict[str, Any] = {ATTR_LEGACY_ID: legacy_id, ATTR_DB_SYSTEM: "memory"}
        if status is not None:
            attributes[ATTR_MIGRATION_STATUS] = status.value
        return self._tracer.span(f"challengemigration.status_repo.{operation}", attributes)


# =============================================================================
# SQLite implementation
# =============================================================================


@contextlib.contextmanager
def _sqlite_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        raise TransientError(f"Status ledger {operation} failed: {e}") from e


class SQLiteMigrationStatusRepository:
    """
    SQLite implementation of the status ledger.

    SQLite-specific adaptations:
    - Timestamps stored as TEXT in ISO 8601 format
    - Uses UPSERT with ON CONFLICT syntax (SQLite 3.24+)

    Example:
        >>> async with aiosqlite.connect("migration.db") as db:
        ...     repo = SQLiteMigrationStatusRepository(db)
        ...     await repo.initialize()
        ...     await repo.record_queued(30054321)
    """

    def __init__(
        self,
        connection: aiosqlite.Connection,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the repository.

        Args:
            connection: aiosqlite database connection
            tracer: Optional tracer for tracing (if not provided, one will be created)
            enable_tracing: Whether to enable OpenTelemetry tracing (default True)
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._connection = connection

    async def initialize(self) -> None:
        """Create the ledger table and its indexes if they do not exist."""
        with _sqlite_errors("initialize"):
            await self._connection.executescript(SQLITE_STATUS_SCHEMA)
            await self._connection.commit()

    async def record_queued(self, legacy_id: int) -> None:
        with self._span("record_queued", legacy_id, "INSERT", MigrationStatus.QUEUED):
            now = datetime.now(UTC).isoformat()
            await self._execute_write(
                f"""
                INSERT INTO {STATUS_TABLE} (legacy_id, status, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT (legacy_id) DO UPDATE
                SET status = excluded.status,
                    started_at = NULL,
                    ended_at = NULL,
                    error_message = NULL,
                    updated_at = excluded.updated_at
                """,
                (legacy_id, MigrationStatus.QUEUED.value, now),
                "record_queued",
            )

    async def record_start(self, legacy_id: int, source_modified_at: datetime | None) -> None:
        with self._span("record_start", legacy_id, "INSERT", MigrationStatus.IN_PROGRESS):
            now = datetime.now(UTC).isoformat()
            await self._execute_write(
                f"""
                INSERT INTO {STATUS_TABLE}
                    (legacy_id, status, source_modified_at, started_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (legacy_id) DO UPDATE
                SET status = excluded.status,
                    source_modified_at = excluded.source_modified_at,
                    started_at = excluded.started_at,
                    ended_at = NULL,
                    error_message = NULL,
                    updated_at = excluded.updated_at
                """,
                (
                    legacy_id,
                    MigrationStatus.IN_PROGRESS.value,
                    source_modified_at.isoformat() if source_modified_at else None,
                    now,
                    now,
                ),
                "record_start",
            )

    async def record_end(
        self,
        legacy_id: int,
        challenge_id: str | None,
        status: MigrationStatus,
        error_message: str | None = None,
    ) -> None:
        _validate_terminal(status)
        with self._span("record_end", legacy_id, "INSERT", status):
            now = datetime.now(UTC).isoformat()
            await self._execute_write(
                f"""
                INSERT INTO {STATUS_TABLE}
                    (legacy_id, challenge_id, status, ended_at, error_message, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (legacy_id) DO UPDATE
                SET status = excluded.status,
                    challenge_id = COALESCE(excluded.challenge_id, {STATUS_TABLE}.challenge_id),
                    ended_at = excluded.ended_at,
                    error_message = excluded.error_message,
                    updated_at = excluded.updated_at
                """,
                (legacy_id, challenge_id, status.value, now, _truncate(error_message), now),
                "record_end",
            )

    async def get(self, legacy_id: int) -> MigrationStatusRecord | None:
        with self._span("get", legacy_id, "SELECT"), _sqlite_errors("get"):
            cursor = await self._connection.execute(
                f"SELECT {_COLUMNS} FROM {STATUS_TABLE} WHERE legacy_id = ?",
                (legacy_id,),
            )
            row = await cursor.fetchone()
            return self._row_to_record(row) if row else None

    async def query(
        self,
        status_filter: StatusFilter | None = None,
        page: int = 0,
        per_page: int = 50,
    ) -> StatusPage:
        _validate_paging(page, per_page)
        where, params = _where_clause(status_filter, ":{}")

        with self._tracer.span(
            "challengemigration.status_repo.query",
            {ATTR_PAGE: page, ATTR_DB_SYSTEM: "sqlite", ATTR_DB_OPERATION: "SELECT"},
        ), _sqlite_errors("query"):
            cursor = await self._connection.execute(
                f"SELECT COUNT(*) FROM {STATUS_TABLE} {where}",
                params,
            )
            count_row = await cursor.fetchone()
            total = count_row[0] if count_row else 0

            cursor = await self._connection.execute(
                f"""
                SELECT {_COLUMNS} FROM {STATUS_TABLE} {where}
                ORDER BY updated_at DESC, legacy_id DESC
                LIMIT :limit OFFSET :offset
                """,
                {**params, "limit": per_page, "offset": page * per_page},
            )
            rows = await cursor.fetchall()

        return StatusPage(
            total=total,
            items=[self._row_to_record(row) for row in rows],
            page=page,
            per_page=per_page,
        )

    # =========================================================================
    # Helper methods
    # =========================================================================

    async def _execute_write(self, sql: str, params: Sequence[Any], operation: str) -> None:
        with _sqlite_errors(operation):
            await self._connection.execute(sql, params)
            await self._connection.commit()

    def _span(
        self,
        operation: str,
        legacy_id: int,
        db_operation: str,
        status: MigrationStatus | None = None,
    ) -> contextlib.AbstractContextManager[Any]:
        attributes: dict[str, Any] = {
            ATTR_LEGACY_ID: legacy_id,
            ATTR_DB_SYSTEM: "sqlite",
            ATTR_DB_OPERATION: db_operation,
        }
        if status is not None:
            attributes[ATTR_MIGRATION_STATUS] = status.value
        return self._tracer.span(f"challengemigration.status_repo.{operation}", attributes)

    @staticmethod
    def _row_to_record(row: Sequence[Any]) -> MigrationStatusRecord:
        def parse(value: str | None) -> datetime | None:
            return datetime.fromisoformat(value) if value else None

        return MigrationStatusRecord(
            legacy_id=row[0],
            challenge_id=row[1],
            status=MigrationStatus(row[2]),
            source_modified_at=parse(row[3]),
            started_at=parse(row[4]),
            ended_at=parse(row[5]),
            error_message=row[6],
            updated_at=parse(row[7]),
        )


# =============================================================================
# PostgreSQL implementation
# =============================================================================


@contextlib.contextmanager
def _sqlalchemy_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        raise TransientError(f"Status ledger {operation} failed: {e}") from e


class PostgreSQLMigrationStatusRepository:
    """
    PostgreSQL implementation of the status ledger.

    Persists records to the ``challenge_migration_status`` table (see
    POSTGRESQL_STATUS_SCHEMA).

    Example:
        >>> engine = create_async_engine("postgresql+asyncpg://...")
        >>> repo = PostgreSQLMigrationStatusRepository(engine)
        >>> await repo.record_start(30054321, legacy_modified_at)
    """

    def __init__(
        self,
        conn: AsyncConnection | AsyncEngine,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ):
        """
        Initialize the repository.

        Args:
            conn: Database connection or engine
            tracer: Optional custom Tracer instance.
            enable_tracing: Whether to enable OpenTelemetry tracing
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._conn = conn

    async def record_queued(self, legacy_id: int) -> None:
        with self._span("record_queued", legacy_id, "INSERT", MigrationStatus.QUEUED):
            query = text(f"""
                INSERT INTO {STATUS_TABLE} (legacy_id, status, updated_at)
                VALUES (:legacy_id, :status, :updated_at)
                ON CONFLICT (legacy_id) DO UPDATE
                SET status = EXCLUDED.status,
                    started_at = NULL,
                    ended_at = NULL,
                    error_message = NULL,
                    updated_at = EXCLUDED.updated_at
            """)
            await self._execute_write(
                query,
                {
                    "legacy_id": legacy_id,
                    "status": MigrationStatus.QUEUED.value,
                    "updated_at": datetime.now(UTC),
                },
                "record_queued",
            )

    async def record_start(self, legacy_id: int, source_modified_at: datetime | None) -> None:
        with self._span("record_start", legacy_id, "INSERT", MigrationStatus.IN_PROGRESS):
            now = datetime.now(UTC)
            query = text(f"""
                INSERT INTO {STATUS_TABLE}
                    (legacy_id, status, source_modified_at, started_at, updated_at)
                VALUES (:legacy_id, :status, :source_modified_at, :started_at, :updated_at)
                ON CONFLICT (legacy_id) DO UPDATE
                SET status = EXCLUDED.status,
                    source_modified_at = EXCLUDED.source_modified_at,
                    started_at = EXCLUDED.started_at,
                    ended_at = NULL,
                    error_message = NULL,
                    updated_at = EXCLUDED.updated_at
            """)
            await self._execute_write(
                query,
                {
                    "legacy_id": legacy_id,
                    "status": MigrationStatus.IN_PROGRESS.value,
                    "source_modified_at": source_modified_at,
                    "started_at": now,
                    "updated_at": now,
                },
                "record_start",
            )

    async def record_end(
        self,
        legacy_id: int,
        challenge_id: str | None,
        status: MigrationStatus,
        error_message: str | None = None,
    ) -> None:
        _validate_terminal(status)
        with self._span("record_end", legacy_id, "INSERT", status):
            now = datetime.now(UTC)
            query = text(f"""
                INSERT INTO {STATUS_TABLE}
                    (legacy_id, challenge_id, status, ended_at, error_message, updated_at)
                VALUES
                    (:legacy_id, :challenge_id, :status, :ended_at, :error_message, :updated_at)
                ON CONFLICT (legacy_id) DO UPDATE
                SET status = EXCLUDED.status,
                    challenge_id = COALESCE(EXCLUDED.challenge_id, {STATUS_TABLE}.challenge_id),
                    ended_at = EXCLUDED.ended_at,
                    error_message = EXCLUDED.error_message,
                    updated_at = EXCLUDED.updated_at
            """)
            await self._execute_write(
                query,
                {
                    "legacy_id": legacy_id,
                    "challenge_id": challenge_id,
                    "status": status.value,
                    "ended_at": now,
                    "error_message": _truncate(error_message),
                    "updated_at": now,
                },
                "record_end",
            )

    async def get(self, legacy_id: int) -> MigrationStatusRecord | None:
        with self._span("get", legacy_id, "SELECT"), _sqlalchemy_errors("get"):
            query = text(f"SELECT {_COLUMNS} FROM {STATUS_TABLE} WHERE legacy_id = :legacy_id")
            async with execute_with_connection(self._conn, transactional=False) as conn:
                result = await conn.execute(query, {"legacy_id": legacy_id})
                row = result.fetchone()

            if row is None:
                return None
            return self._row_to_record(row)

    async def query(
        self,
        status_filter: StatusFilter | None = None,
        page: int = 0,
        per_page: int = 50,
    ) -> StatusPage:
        _validate_paging(page, per_page)
        where, params = _where_clause(status_filter, ":{}")

        with self._tracer.span(
            "challengemigration.status_repo.query",
            {ATTR_PAGE: page, ATTR_DB_SYSTEM: "postgresql", ATTR_DB_OPERATION: "SELECT"},
        ), _sqlalchemy_errors("query"):
            count_query = text(f"SELECT COUNT(*) FROM {STATUS_TABLE} {where}")
            page_query = text(f"""
                SELECT {_COLUMNS} FROM {STATUS_TABLE} {where}
                ORDER BY updated_at DESC, legacy_id DESC
                LIMIT :limit OFFSET :offset
            """)

            async with execute_with_connection(self._conn, transactional=False) as conn:
                total = (await conn.execute(count_query, params)).scalar() or 0
                result = await conn.execute(
                    page_query,
                    {**params, "limit": per_page, "offset": page * per_page},
                )
                rows = result.fetchall()

        return StatusPage(
            total=total,
            items=[self._row_to_record(row) for row in rows],
            page=page,
            per_page=per_page,
        )

    # =========================================================================
    # Helper methods
    # =========================================================================

    async def _execute_write(self, query: Any, params: dict[str, Any], operation: str) -> None:
        with _sqlalchemy_errors(operation):
            async with execute_with_connection(self._conn, transactional=True) as conn:
                await conn.execute(query, params)

    def _span(
        self,
        operation: str,
        legacy_id: int,
        db_operation: str,
        status: MigrationStatus | None = None,
    ) -> contextlib.AbstractContextManager[Any]:
        attributes: dict[str, Any] = {
            ATTR_LEGACY_ID: legacy_id,
            ATTR_DB_SYSTEM: "postgresql",
            ATTR_DB_OPERATION: db_operation,
        }
        if status is not None:
            attributes[ATTR_MIGRATION_STATUS] = status.value
        return self._tracer.span(f"challengemigration.status_repo.{operation}", attributes)

    @staticmethod
    def _row_to_record(row: Sequence[Any]) -> MigrationStatusRecord:
        """
        Convert a database row to a MigrationStatusRecord.

        Args:
            row: Database row tuple in _COLUMNS order

        Returns:
            MigrationStatusRecord instance
        """
        return MigrationStatusRecord(
            legacy_id=row[0],
            challenge_id=row[1],
            status=MigrationStatus(row[2]),
            source_modified_at=row[3],
            started_at=row[4],
            ended_at=row[5],
            error_message=row[6],
            updated_at=row[7],
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
