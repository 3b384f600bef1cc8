import asyncio

import pytest

from backend.models.entities import Bridge, Camera, Location, PageFilters, PageResponse
from backend.services.fetch import StoreFetcher
from backend.services.store import DataStore


def _cameras(bridge: Bridge, start: int, count: int) -> list[Camera]:
    return [
        Camera(
            id=f"C{n}",
            locationId=bridge.locationId,
            bridgeId=bridge.id,
            status="online" if n % 3 else "offline",
        )
        for n in range(start, start + count)
    ]


def build_store() -> DataStore:
    """Two locations, three bridges; B1 has 120 cameras (C1..C120)."""
    locations = [Location(id="L1"), Location(id="L2")]
    bridges = [
        Bridge(id="B1", locationId="L1", status="online"),
        Bridge(id="B2", locationId="L1", status="offline"),
        Bridge(id="B3", locationId="L2", status="error"),
    ]
    cameras = (
        _cameras(bridges[0], 1, 120)
        + _cameras(bridges[1], 121, 15)
        + _cameras(bridges[2], 136, 5)
    )
    return DataStore(locations, bridges, cameras)


class RecordingFetcher:
    """Store-backed fetcher that records every call and can be told to fail."""

    def __init__(self, store: DataStore):
        self.inner = StoreFetcher(store, latency_ms=0)
        self.calls: list[dict] = []
        self.error: Exception | None = None

    async def fetch_page(
        self, kind: str, filters: PageFilters, cursor: str | None, page_size: int
    ) -> PageResponse:
        self.calls.append(
            {"kind": kind, "filters": filters, "cursor": cursor, "page_size": page_size}
        )
        if self.error is not None:
            raise self.error
        return await self.inner.fetch_page(kind, filters, cursor, page_size)


class GatedFetcher(RecordingFetcher):
    """Recording fetcher that blocks until its gate is set."""

    def __init__(self, store: DataStore):
        super().__init__(store)
        self.gate = asyncio.Event()
        self.gate.set()

    async def fetch_page(
        self, kind: str, filters: PageFilters, cursor: str | None, page_size: int
    ) -> PageResponse:
        await self.gate.wait()
        return await super().fetch_page(kind, filters, cursor, page_size)


@pytest.fixture
def store() -> DataStore:
    return build_store()


@pytest.fixture
def fetcher(store: DataStore) -> RecordingFetcher:
    return RecordingFetcher(store)


@pytest.fixture
def gated_fetcher(store: DataStore) -> GatedFetcher:
    return GatedFetcher(store)
