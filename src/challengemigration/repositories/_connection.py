"""
Connection helper for the SQLAlchemy-backed repositories.

Repositories accept either an AsyncEngine (they open their own
connection per operation) or an AsyncConnection (the caller owns the
transaction).
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine


@asynccontextmanager
async def execute_with_connection(
    conn: AsyncConnection | AsyncEngine,
    transactional: bool = True,
) -> AsyncIterator[AsyncConnection]:
    """
    Yield a connection ready for execute() calls.

    Args:
        conn: Database connection or engine
        transactional: Open a transaction (begin) rather than a bare
            connection. Ignored when conn is already a connection.

    Example:
        >>> async with execute_with_connection(self._conn) as conn:
        ...     await conn.execute(upsert, params)
    """
    if isinstance(conn, AsyncEngine):
        opener = conn.begin() if transactional else conn.connect()
        async with opener as connection:
            yield connection
    else:
        yield conn
