"""
Unit tests for GroupTermResolver.

Tests cover:
- Group resolution order, caching and failure
- Terms catalog pagination and its stop conditions
- Concurrent first use of the terms catalog
- Cache reset
"""

import asyncio

import pytest

from challengemigration.config import MigrationConfig
from challengemigration.exceptions import NotFoundError
from challengemigration.models import Term, TermsPage
from challengemigration.observability import MockTracer
from challengemigration.resolver import GroupTermResolver
from tests.fixtures import FakeGroupDirectory, FakeTermsCatalog


def _terms(*legacy_ids: int) -> list[Term]:
    return [Term(id=f"term-{legacy_id}", legacy_id=legacy_id) for legacy_id in legacy_ids]


class TestResolveGroups:
    """Tests for resolve_groups()."""

    @pytest.mark.asyncio
    async def test_preserves_order_and_length(self, resolver):
        result = await resolver.resolve_groups([20000001, 20000000, 20000001])

        assert result == ["group-b", "group-a", "group-b"]

    @pytest.mark.asyncio
    async def test_each_missing_id_looked_up_once(self, resolver, group_directory):
        """Repeated resolutions hit the directory once per distinct id."""
        for _ in range(5):
            await resolver.resolve_groups([20000000, 20000001, 20000000])

        assert sorted(group_directory.calls) == [20000000, 20000001]
        assert resolver.cached_group_count == 2

    @pytest.mark.asyncio
    async def test_empty_input(self, resolver, group_directory):
        assert await resolver.resolve_groups([]) == []
        assert group_directory.calls == []

    @pytest.mark.asyncio
    async def test_unknown_group_raises(self, resolver):
        with pytest.raises(NotFoundError) as exc_info:
            await resolver.resolve_groups([20000000, 555], legacy_id=30054321)

        error = exc_info.value
        assert error.resource == "group"
        assert error.identifier == 555
        assert error.legacy_id == 30054321
        assert "555" in str(error)

    @pytest.mark.asyncio
    async def test_failure_does_not_poison_cache(self, resolver, group_directory):
        """Ids resolved before a failure stay cached; the failed id is retried."""
        with pytest.raises(NotFoundError):
            await resolver.resolve_groups([20000000, 555])

        group_directory.groups[555] = "group-late"
        result = await resolver.resolve_groups([20000000, 555])

        assert result == ["group-a", "group-late"]
        assert group_directory.calls.count(20000000) == 1
        assert group_directory.calls.count(555) == 2

    @pytest.mark.asyncio
    async def test_span_records_cache_misses(self, group_directory, terms_catalog):
        tracer = MockTracer()
        resolver = GroupTermResolver(group_directory, terms_catalog, tracer=tracer)

        await resolver.resolve_groups([20000000, 20000001])
        await resolver.resolve_groups([20000000])

        spans = [attrs for name, attrs in tracer.spans if name.endswith("resolve_groups")]
        assert spans[0]["challengemigration.cache.misses"] == 2
        assert spans[1]["challengemigration.cache.misses"] == 0


class TestFetchAllTerms:
    """Tests for fetch_all_terms() and find_term()."""

    @pytest.mark.asyncio
    async def test_reads_until_empty_page(self, resolver, terms_catalog):
        terms = await resolver.fetch_all_terms()

        assert [t.legacy_id for t in terms] == [21303, 21343, 20704]
        assert terms_catalog.calls == [(1, 2), (2, 2), (3, 2)]

    @pytest.mark.asyncio
    async def test_fetched_once(self, resolver, terms_catalog):
        await resolver.fetch_all_terms()
        await resolver.fetch_all_terms()
        await resolver.find_term(21303)

        assert len(terms_catalog.calls) == 3
        assert resolver.terms_loaded is True

    @pytest.mark.asyncio
    async def test_stops_at_reported_page_count(self, group_directory):
        """The reported total page count ends the fetch without an extra call."""
        catalog = FakeTermsCatalog([_terms(1, 2), _terms(3, 4), _terms(5)], total_pages=2)
        resolver = GroupTermResolver(
            group_directory, catalog, MigrationConfig(terms_page_size=2), enable_tracing=False
        )

        terms = await resolver.fetch_all_terms()

        assert [t.legacy_id for t in terms] == [1, 2, 3, 4]
        assert [page for page, _ in catalog.calls] == [1, 2]

    @pytest.mark.asyncio
    async def test_stops_at_page_bound(self, group_directory):
        """A catalog that never ends is cut off at max_terms_pages."""

        class EndlessCatalog:
            def __init__(self):
                self.calls = 0

            async def list_page(self, page, per_page):
                self.calls += 1
                return TermsPage(items=_terms(page))

        catalog = EndlessCatalog()
        resolver = GroupTermResolver(
            group_directory, catalog, MigrationConfig(max_terms_pages=4), enable_tracing=False
        )

        terms = await resolver.fetch_all_terms()

        assert catalog.calls == 4
        assert [t.legacy_id for t in terms] == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_concurrent_first_use_fetches_once(self, resolver, terms_catalog):
        results = await asyncio.gather(*(resolver.fetch_all_terms() for _ in range(5)))

        assert all(len(result) == 3 for result in results)
        assert len(terms_catalog.calls) == 3

    @pytest.mark.asyncio
    async def test_find_term(self, resolver):
        term = await resolver.find_term(21343)

        assert term is not None
        assert term.id == "term-nda"
        assert await resolver.find_term(1) is None

    @pytest.mark.asyncio
    async def test_empty_catalog(self, group_directory):
        catalog = FakeTermsCatalog([])
        resolver = GroupTermResolver(group_directory, catalog, enable_tracing=False)

        assert await resolver.fetch_all_terms() == []
        assert resolver.terms_loaded is True
        assert len(catalog.calls) == 1


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_drops_caches(self, resolver, group_directory, terms_catalog):
        await resolver.resolve_groups([20000000])
        await resolver.fetch_all_terms()

        resolver.reset()

        assert resolver.cached_group_count == 0
        assert resolver.terms_loaded is False

        await resolver.resolve_groups([20000000])
        await resolver.fetch_all_terms()
        assert group_directory.calls == [20000000, 20000000]
        assert len(terms_catalog.calls) == 6


class TestSharedDirectory:
    @pytest.mark.asyncio
    async def test_separate_resolvers_do_not_share_cache(self, terms_catalog):
        directory = FakeGroupDirectory({1: "g1"})
        first = GroupTermResolver(directory, terms_catalog, enable_tracing=False)
        second = GroupTermResolver(directory, terms_catalog, enable_tracing=False)

        await first.resolve_groups([1])
        await second.resolve_groups([1])

        assert directory.calls == [1, 1]
