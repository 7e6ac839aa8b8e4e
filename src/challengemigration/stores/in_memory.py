"""
In-memory canonical challenge store.

Useful for tests, dry runs and local development. All data is lost when
the process terminates.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence

from challengemigration.exceptions import ConflictError, NotFoundError
from challengemigration.models import CanonicalChallenge
from challengemigration.observability import (
    ATTR_CHALLENGE_ID,
    ATTR_DB_SYSTEM,
    ATTR_LEGACY_ID,
    Tracer,
    create_tracer,
)

logger = logging.getLogger(__name__)


class InMemoryCanonicalStore:
    """
    CanonicalStore backed by dictionaries.

    Ids are random UUIDs assigned on create. A legacy id can belong to at
    most one stored challenge.

    Example:
        >>> store = InMemoryCanonicalStore()
        >>> challenge_id = await store.create(challenge)
        >>> (await store.find_by_legacy_id(challenge.legacy_id)).id == challenge_id
        True
    """

    def __init__(
        self,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._challenges: dict[str, CanonicalChallenge] = {}
        self._by_legacy_id: dict[int, str] = {}
        self._lock: asyncio.Lock = asyncio.Lock()

    async def create(self, challenge: CanonicalChallenge) -> str:
        """
        Store a new challenge and assign its id.

        Raises:
            ConflictError: If a challenge with the same legacy id exists.
        """
        with self._tracer.span(
            "challengemigration.canonical_store.create",
            {ATTR_LEGACY_ID: challenge.legacy_id, ATTR_DB_SYSTEM: "memory"},
        ):
            async with self._lock:
                if challenge.legacy_id in self._by_legacy_id:
                    raise ConflictError(
                        f"Challenge with legacy id {challenge.legacy_id} already exists",
                        legacy_id=challenge.legacy_id,
                    )
                challenge_id = str(uuid.uuid4())
                self._challenges[challenge_id] = challenge.model_copy(update={"id": challenge_id})
                self._by_legacy_id[challenge.legacy_id] = challenge_id

            logger.debug("Created challenge %s for legacy id %s", challenge_id, challenge.legacy_id)
            return challenge_id

    async def update(self, challenge_id: str, challenge: CanonicalChallenge) -> None:
        """
        Overwrite a stored challenge. The stored id and legacy id never change.

        Raises:
            NotFoundError: If no challenge has this id.
            ConflictError: If the record carries a different legacy id.
        """
        with self._tracer.span(
            "challengemigration.canonical_store.update",
            {ATTR_CHALLENGE_ID: challenge_id, ATTR_DB_SYSTEM: "memory"},
        ):
            async with self._lock:
                existing = self._challenges.get(challenge_id)
                if existing is None:
                    raise NotFoundError("challenge", challenge_id)
                if existing.legacy_id != challenge.legacy_id:
                    raise ConflictError(
                        f"Challenge {challenge_id} belongs to legacy id {existing.legacy_id}",
                        legacy_id=challenge.legacy_id,
                    )
                self._challenges[challenge_id] = challenge.model_copy(update={"id": challenge_id})

    async def delete(self, challenge_id: str) -> None:
        with self._tracer.span(
            "challengemigration.canonical_store.delete",
            {ATTR_CHALLENGE_ID: challenge_id, ATTR_DB_SYSTEM: "memory"},
        ):
            async with self._lock:
                existing = self._challenges.pop(challenge_id, None)
                if existing is not None:
                    self._by_legacy_id.pop(existing.legacy_id, None)

    async def find_by_legacy_id(self, legacy_id: int) -> CanonicalChallenge | None:
        challenge_id = self._by_legacy_id.get(legacy_id)
        if challenge_id is None:
            return None
        return self._challenges[challenge_id]

    async def find_all_by_legacy_ids(
        self, legacy_ids: Sequence[int]
    ) -> list[CanonicalChallenge]:
        return [
            self._challenges[self._by_legacy_id[legacy_id]]
            for legacy_id in dict.fromkeys(legacy_ids)
            if legacy_id in self._by_legacy_id
        ]

    async def get(self, challenge_id: str) -> CanonicalChallenge | None:
        return self._challenges.get(challenge_id)

    def __len__(self) -> int:
        return len(self._challenges)


__all__ = ["InMemoryCanonicalStore"]
