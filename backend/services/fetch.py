"""Clients for the paginated fetch service.

The grid only sees the ``PageFetcher`` protocol. ``StoreFetcher`` serves pages
from an in-process ``DataStore`` with simulated latency; ``HttpFetcher`` talks
to the ``/api/{locations,bridges,cameras}`` endpoints over HTTP.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import httpx

from backend.config import settings
from backend.models.entities import PageFilters, PageResponse
from backend.services import catalog
from backend.services.cursor import InvalidCursor
from backend.services.store import DataStore

logger = logging.getLogger(__name__)

KIND_ENDPOINTS: dict[str, str] = {
    "location": "/api/locations",
    "bridge": "/api/bridges",
    "camera": "/api/cameras",
}


class FetchFailure(RuntimeError):
    """Transport or backend error while fetching a page."""


class PageFetcher(Protocol):
    async def fetch_page(
        self,
        kind: str,
        filters: PageFilters,
        cursor: str | None,
        page_size: int,
    ) -> PageResponse: ...


class StoreFetcher:
    def __init__(self, store: DataStore, latency_ms: int | None = None):
        self.store = store
        self.latency_ms = settings.SIMULATED_LATENCY_MS if latency_ms is None else latency_ms

    async def fetch_page(
        self,
        kind: str,
        filters: PageFilters,
        cursor: str | None,
        page_size: int,
    ) -> PageResponse:
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)
        return catalog.list_page(self.store, kind, filters, cursor, page_size)


def _query_params(
    filters: PageFilters, cursor: str | None, page_size: int
) -> list[tuple[str, str | int]]:
    params: list[tuple[str, str | int]] = [("pageSize", page_size)]
    if filters.location_id:
        params.append(("locationId", filters.location_id))
    if filters.bridge_id:
        params.append(("bridgeId", filters.bridge_id))
    for status in filters.status_in or []:
        params.append(("status__in", status))
    for entity_id in filters.id_in or []:
        params.append(("id__in", entity_id))
    if cursor:
        params.append(("pageToken", cursor))
    return params


class HttpFetcher:
    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = settings.FETCH_TIMEOUT_SECONDS if timeout is None else timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def fetch_page(
        self,
        kind: str,
        filters: PageFilters,
        cursor: str | None,
        page_size: int,
    ) -> PageResponse:
        path = KIND_ENDPOINTS[kind]
        try:
            response = await self._get_client().get(
                path, params=_query_params(filters, cursor, page_size)
            )
        except httpx.HTTPError as exc:
            raise FetchFailure(f"GET {path} failed: {exc}") from exc

        if response.status_code == 400:
            try:
                detail = response.json().get("detail", "")
            except ValueError:
                detail = ""
            raise InvalidCursor(detail or "Invalid page token")
        if response.status_code != 200:
            raise FetchFailure(f"GET {path} returned {response.status_code}")

        return PageResponse.model_validate(response.json())

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def build_fetcher(store: DataStore) -> StoreFetcher | HttpFetcher:
    if settings.FETCH_BASE_URL:
        logger.info("Using HTTP fetch service at %s", settings.FETCH_BASE_URL)
        return HttpFetcher(settings.FETCH_BASE_URL)
    return StoreFetcher(store)
