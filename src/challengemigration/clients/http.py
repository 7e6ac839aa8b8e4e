"""
HTTP adapters for the canonical directories.

All adapters share one ``httpx.AsyncClient`` owned by the caller, which
also configures timeouts and transport. Authorization is a bearer token,
given either as a string or as an async callable returning a fresh one.

Failure mapping:
    - transport errors and 5xx responses -> TransientError
    - 404 and empty result lists -> None (not found)
    - other 4xx responses -> MigrationError
    - 2xx bodies that are not JSON -> TransientError
    - JSON of an unexpected shape -> MigrationError
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx
import pydantic

from challengemigration.exceptions import MigrationError, TransientError
from challengemigration.models import Project, Term, TermsPage
from challengemigration.observability import (
    ATTR_HTTP_STATUS_CODE,
    ATTR_HTTP_URL,
    ATTR_PAGE,
    Tracer,
    create_tracer,
)

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]

TOTAL_PAGES_HEADER = "X-Total-Pages"

_ModelT = TypeVar("_ModelT", bound=pydantic.BaseModel)


class _HTTPDirectory:
    """Shared request handling for the directory adapters."""

    _span_name = "challengemigration.http.get"

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        token: str | TokenProvider | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the adapter.

        Args:
            client: Shared async HTTP client
            url: Collection endpoint of the directory
            token: Bearer token, or an async callable returning one
            tracer: Optional custom Tracer instance
            enable_tracing: Whether to enable OpenTelemetry tracing (default True)
        """
        self._client = client
        self._url = url
        self._token = token
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled

    async def _get(
        self,
        params: dict[str, Any],
        attributes: dict[str, Any] | None = None,
    ) -> httpx.Response | None:
        """
        Issue a GET request against the collection endpoint.

        Returns:
            The response, or None for 404

        Raises:
            TransientError: On transport errors and 5xx responses
            MigrationError: On any other non-success response
        """
        with self._tracer.span(
            self._span_name,
            {ATTR_HTTP_URL: self._url, **(attributes or {})},
        ) as span:
            headers = await self._auth_headers()
            logger.debug("GET %s %s", self._url, params)
            try:
                response = await self._client.get(self._url, params=params, headers=headers)
            except httpx.HTTPError as e:
                raise TransientError(f"GET {self._url} failed: {e}") from e

            if span:
                span.set_attribute(ATTR_HTTP_STATUS_CODE, response.status_code)

            if response.status_code == 404:
                return None
            if response.status_code >= 500:
                raise TransientError(
                    f"GET {self._url} returned {response.status_code}: {response.text[:200]}"
                )
            if response.status_code >= 400:
                raise MigrationError(
                    f"GET {self._url} returned {response.status_code}: {response.text[:200]}"
                )
            return response

    async def _auth_headers(self) -> dict[str, str]:
        if self._token is None:
            return {}
        token = self._token if isinstance(self._token, str) else await self._token()
        return {"Authorization": f"Bearer {token}"}

    def _items(self, response: httpx.Response) -> list[Any]:
        """
        Decode a result list, bare or wrapped in ``{"result": [...]}``.

        Raises:
            TransientError: If the body is not JSON
            MigrationError: If the JSON is not a result list
        """
        try:
            payload = response.json()
        except ValueError as e:
            raise TransientError(
                f"GET {self._url} returned a body that is not JSON: {response.text[:200]}"
            ) from e
        if isinstance(payload, dict):
            payload = payload.get("result") or []
        if not isinstance(payload, list):
            raise MigrationError(f"GET {self._url} returned unexpected JSON: {payload!r:.200}")
        return payload

    def _first(self, response: httpx.Response | None) -> dict[str, Any] | None:
        if response is None:
            return None
        items = self._items(response)
        if not items:
            return None
        if not isinstance(items[0], dict):
            raise MigrationError(f"GET {self._url} returned unexpected item: {items[0]!r:.200}")
        return items[0]

    def _parse(self, model: type[_ModelT], item: Any) -> _ModelT:
        try:
            return model.model_validate(item)
        except pydantic.ValidationError as e:
            raise MigrationError(
                f"GET {self._url} returned an invalid {model.__name__}: {e}"
            ) from e


class HTTPGroupDirectory(_HTTPDirectory):
    """
    GroupDirectory over the groups API (``GET {url}?oldId={legacy_group_id}``).
    """

    _span_name = "challengemigration.http.groups.lookup"

    async def lookup_by_legacy_id(self, legacy_group_id: int) -> str | None:
        group = self._first(await self._get({"oldId": legacy_group_id}))
        if group is None:
            logger.debug("Legacy group %s not found", legacy_group_id)
            return None
        if group.get("id") is None:
            raise MigrationError(f"GET {self._url} returned a group without id: {group!r:.200}")
        return str(group["id"])


class HTTPTermsCatalog(_HTTPDirectory):
    """
    TermsCatalog over the terms API (``GET {url}?page=&perPage=``).

    The total number of pages is read from the X-Total-Pages header.
    """

    _span_name = "challengemigration.http.terms.list_page"

    async def list_page(self, page: int, per_page: int) -> TermsPage:
        response = await self._get({"page": page, "perPage": per_page}, {ATTR_PAGE: page})
        if response is None:
            return TermsPage(items=[], total_pages=None)

        items = self._items(response)

        total_pages = response.headers.get(TOTAL_PAGES_HEADER)
        return TermsPage(
            items=[self._parse(Term, item) for item in items],
            total_pages=int(total_pages) if total_pages and total_pages.isdigit() else None,
        )


class HTTPProjectDirectory(_HTTPDirectory):
    """
    ProjectDirectory over the projects API (``GET {url}?directProjectId=``).
    """

    _span_name = "challengemigration.http.projects.lookup"

    async def lookup_by_legacy_project_id(self, legacy_project_id: int) -> Project | None:
        project = self._first(await self._get({"directProjectId": legacy_project_id}))
        if project is None:
            return None
        return self._parse(Project, project)


__all__ = [
    "TokenProvider",
    "TOTAL_PAGES_HEADER",
    "HTTPGroupDirectory",
    "HTTPTermsCatalog",
    "HTTPProjectDirectory",
]
