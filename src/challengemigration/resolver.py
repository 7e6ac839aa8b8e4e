"""
Resolution of legacy group and term identifiers to canonical ones.

GroupTermResolver keeps two caches for its own lifetime:

- group cache: legacy group id -> canonical group id, filled one id at a
  time as records need them
- terms catalog: the complete list of canonical terms, fetched once

External calls are made sequentially to keep the load on the group
directory and the terms catalog bounded. A coordinator that wants fresh
caches per run constructs a new resolver (or calls ``reset()``).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from challengemigration.config import MigrationConfig
from challengemigration.exceptions import NotFoundError
from challengemigration.interfaces import GroupDirectory, TermsCatalog
from challengemigration.models import Term
from challengemigration.observability import (
    ATTR_CACHE_MISSES,
    ATTR_GROUP_COUNT,
    ATTR_LEGACY_ID,
    ATTR_PAGE,
    Tracer,
    create_tracer,
)

logger = logging.getLogger(__name__)


class GroupTermResolver:
    """
    Memoizing resolver for group and term references.

    Example:
        >>> resolver = GroupTermResolver(group_directory, terms_catalog)
        >>> await resolver.resolve_groups([20000000, 20000001])
        ['6a4c...', 'e1f0...']
    """

    def __init__(
        self,
        group_directory: GroupDirectory,
        terms_catalog: TermsCatalog,
        config: MigrationConfig | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            group_directory: Lookup of canonical groups by legacy id
            terms_catalog: Paginated catalog of canonical terms
            config: Page size and page bound for the terms catalog
            tracer: Optional custom Tracer instance
            enable_tracing: Whether to enable OpenTelemetry tracing (default True)
        """
        self._group_directory = group_directory
        self._terms_catalog = terms_catalog
        self._config = config or MigrationConfig()
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled

        self._group_cache: dict[int, str] = {}
        self._terms: list[Term] | None = None
        self._terms_by_legacy_id: dict[int, Term] = {}
        self._terms_lock = asyncio.Lock()

    @property
    def cached_group_count(self) -> int:
        return len(self._group_cache)

    @property
    def terms_loaded(self) -> bool:
        return self._terms is not None

    async def resolve_groups(
        self,
        legacy_group_ids: Sequence[int],
        *,
        legacy_id: int | None = None,
    ) -> list[str]:
        """
        Resolve legacy group ids to canonical group ids.

        The result has the same length and order as the input. Ids already
        in the cache cost nothing; each distinct missing id costs exactly
        one directory call.

        Args:
            legacy_group_ids: Legacy group ids to resolve
            legacy_id: Legacy challenge id, for error context

        Returns:
            Canonical group ids

        Raises:
            NotFoundError: If the directory has no group for one of the ids.
                No partial result is returned.
        """
        misses = [gid for gid in dict.fromkeys(legacy_group_ids) if gid not in self._group_cache]

        with self._tracer.span(
            "challengemigration.resolver.resolve_groups",
            {
                ATTR_GROUP_COUNT: len(legacy_group_ids),
                ATTR_CACHE_MISSES: len(misses),
                **({ATTR_LEGACY_ID: legacy_id} if legacy_id is not None else {}),
            },
        ):
            for group_id in misses:
                logger.debug("Looking up legacy group %s", group_id)
                canonical_id = await self._group_directory.lookup_by_legacy_id(group_id)
                if canonical_id is None:
                    raise NotFoundError(
                        "group",
                        group_id,
                        legacy_id=legacy_id,
                        message=f"Legacy group id {group_id} not found in group directory",
                    )
                self._group_cache[group_id] = canonical_id

            return [self._group_cache[gid] for gid in legacy_group_ids]

    async def fetch_all_terms(self) -> list[Term]:
        """
        Get the complete terms catalog, fetching it on first use.

        Pages are requested one after another (1-based) until a page is
        empty, the reported page count is exhausted, or the configured
        page bound is reached. Concurrent first calls share one fetch.

        Returns:
            All terms, in catalog order
        """
        if self._terms is not None:
            return self._terms

        async with self._terms_lock:
            if self._terms is None:
                terms = await self._fetch_terms()
                self._terms_by_legacy_id = {
                    term.legacy_id: term for term in terms if term.legacy_id is not None
                }
                self._terms = terms
        return self._terms

    async def find_term(self, legacy_terms_id: int) -> Term | None:
        """Find a canonical term by its legacy terms-of-use id."""
        await self.fetch_all_terms()
        return self._terms_by_legacy_id.get(legacy_terms_id)

    def reset(self) -> None:
        """Drop both caches."""
        self._group_cache.clear()
        self._terms = None
        self._terms_by_legacy_id = {}

    # =========================================================================
    # Helper methods
    # =========================================================================

    async def _fetch_terms(self) -> list[Term]:
        per_page = self._config.terms_page_size
        terms: list[Term] = []

        with self._tracer.span("challengemigration.resolver.fetch_all_terms"):
            for page in range(1, self._config.max_terms_pages + 1):
                with self._tracer.span(
                    "challengemigration.resolver.fetch_terms_page",
                    {ATTR_PAGE: page},
                ):
                    result = await self._terms_catalog.list_page(page, per_page)

                if not result.items:
                    break
                terms.extend(result.items)

                if result.total_pages is not None and page >= result.total_pages:
                    break
            else:
                logger.warning(
                    "Stopped reading terms catalog after %d pages",
                    self._config.max_terms_pages,
                )

        logger.debug("Loaded %d terms", len(terms))
        return terms


__all__ = ["GroupTermResolver"]
