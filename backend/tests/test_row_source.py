import asyncio

import pytest

from backend.config import settings
from backend.mappings import level_for
from backend.services.cursor import decode_cursor, encode_cursor
from backend.services.fetch import FetchFailure
from backend.services.row_source import HierarchicalRowSource, build_filters
from backend.services.token_cache import TokenCache


def _source(fetcher, mode: str, cache: TokenCache | None = None) -> HierarchicalRowSource:
    return HierarchicalRowSource(fetcher, cache if cache is not None else TokenCache(), mode)


@pytest.mark.parametrize(
    ("mode", "route", "kind", "ancestors"),
    [
        ("location-bridge-camera", [], "location", {}),
        ("location-bridge-camera", ["L1"], "bridge", {"location_id": "L1"}),
        (
            "location-bridge-camera",
            ["L1", "B1"],
            "camera",
            {"location_id": "L1", "bridge_id": "B1"},
        ),
        ("location-camera", [], "location", {}),
        ("location-camera", ["L1"], "camera", {"location_id": "L1"}),
        ("bridge-camera", [], "bridge", {}),
        ("bridge-camera", ["B1"], "camera", {"bridge_id": "B1"}),
    ],
)
@pytest.mark.asyncio
async def test_depth_to_kind_mapping(fetcher, mode, route, kind, ancestors):
    result = await _source(fetcher, mode).get_rows(route, 0, 10)

    assert result.success
    call = fetcher.calls[0]
    assert call["kind"] == kind
    assert call["filters"].model_dump(exclude_none=True) == ancestors


@pytest.mark.parametrize("mode", ["location-camera", "bridge-camera"])
def test_depth_beyond_mode_is_undefined(mode):
    with pytest.raises(ValueError):
        level_for(mode, 2)


@pytest.mark.asyncio
async def test_depth_beyond_mode_fails_the_request(fetcher):
    result = await _source(fetcher, "bridge-camera").get_rows(["B1", "C1"], 0, 10)

    assert result.success is False
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_group_rows_carry_key_field_and_marker(fetcher):
    result = await _source(fetcher, "location-bridge-camera").get_rows(["L1"], 0, 10)

    first = result.rowData[0]
    assert first.isGroup is True
    assert first.kind == "bridge"
    assert first.id is None
    assert first.bridgeId == "B1"
    assert first.locationId == "L1"
    assert first.key == "B1"


@pytest.mark.asyncio
async def test_leaf_rows_are_plain_cameras(fetcher):
    result = await _source(fetcher, "bridge-camera").get_rows(["B2"], 0, 5)

    row = result.rowData[0]
    assert row.isGroup is False
    assert row.id == "C121"
    assert row.bridgeId == "B2"


@pytest.mark.asyncio
async def test_row_count_reported_once_window_reaches_end(fetcher):
    source = _source(fetcher, "bridge-camera")

    past_end = await source.get_rows(["B2"], 0, 20)
    short = await _source(fetcher, "bridge-camera").get_rows(["B2"], 0, 10)

    assert len(past_end.rowData) == 15
    assert past_end.rowCount == 15
    assert short.rowCount is None


@pytest.mark.asyncio
async def test_row_count_withheld_when_page_is_capped(fetcher, monkeypatch):
    monkeypatch.setattr(settings, "MAX_PAGE_SIZE", 50)

    result = await _source(fetcher, "bridge-camera").get_rows(["B1"], 0, 200)

    assert len(result.rowData) == 50
    assert result.rowCount is None


@pytest.mark.asyncio
async def test_empty_cache_passed_in_is_the_one_recorded_into(fetcher):
    cache = TokenCache()

    await _source(fetcher, "bridge-camera", cache).get_rows(["B1"], 0, 10)

    assert cache.key_for(1, ["B1"], "bridge-camera") in cache


@pytest.mark.asyncio
async def test_forward_paging_reuses_cached_next_cursor(fetcher):
    cache = TokenCache()
    source = _source(fetcher, "bridge-camera", cache)

    first = await source.get_rows(["B1"], 0, 100)
    assert fetcher.calls[0]["cursor"] is None
    assert fetcher.calls[0]["page_size"] == 100
    assert len(first.rowData) == 100
    assert first.rowCount is None

    next_cursor = cache.get(cache.key_for(1, ["B1"], "bridge-camera")).next_cursor
    second = await source.get_rows(["B1"], 100, 120)

    assert fetcher.calls[1]["cursor"] == next_cursor
    assert [r.id for r in second.rowData] == [f"C{n}" for n in range(101, 121)]
    assert second.rowCount == 120


@pytest.mark.asyncio
async def test_scrolling_back_to_start_fetches_fresh(fetcher):
    source = _source(fetcher, "bridge-camera")
    await source.get_rows(["B1"], 0, 100)
    await source.get_rows(["B1"], 100, 120)

    again = await source.get_rows(["B1"], 0, 100)

    assert fetcher.calls[2]["cursor"] is None
    assert again.rowData[0].id == "C1"


@pytest.mark.asyncio
async def test_backward_paging_uses_prev_cursor(fetcher):
    cache = TokenCache()
    source = _source(fetcher, "bridge-camera", cache)
    await source.get_rows(["B1"], 0, 50)
    await source.get_rows(["B1"], 50, 100)
    prev_cursor = cache.get(cache.key_for(1, ["B1"], "bridge-camera")).prev_cursor

    await source.get_rows(["B1"], 20, 70)

    assert fetcher.calls[2]["cursor"] == prev_cursor


@pytest.mark.asyncio
async def test_non_zero_start_without_entry_mints_cursor(fetcher):
    result = await _source(fetcher, "bridge-camera").get_rows(["B1"], 40, 50)

    assert decode_cursor(fetcher.calls[0]["cursor"]).offset == 40
    assert result.rowData[0].id == "C41"


@pytest.mark.asyncio
async def test_cursor_from_other_filters_is_not_reused(fetcher):
    cache = TokenCache()
    key = cache.key_for(1, ["B1"], "bridge-camera")
    cache.record(key, 0, next_cursor=encode_cursor(100, {"bridgeId": "B1"}))
    source = _source(fetcher, "bridge-camera", cache)

    result = await source.get_rows(["B1"], 100, 110, status_filter=["offline"])

    sent = decode_cursor(fetcher.calls[0]["cursor"])
    assert sent.offset == 100
    assert sent.filters == {"bridgeId": "B1", "status__in": ["offline"]}
    assert result.success


@pytest.mark.asyncio
async def test_status_filter_applies_to_bridges_and_cameras_only(fetcher):
    source = _source(fetcher, "location-bridge-camera")

    await source.get_rows([], 0, 10, status_filter=["error"])
    bridges = await source.get_rows(["L1"], 0, 10, status_filter=["offline"])

    assert fetcher.calls[0]["filters"].status_in is None
    assert fetcher.calls[1]["filters"].status_in == ["offline"]
    assert [r.bridgeId for r in bridges.rowData] == ["B2"]


@pytest.mark.asyncio
async def test_fetch_failure_fails_request_without_rows(fetcher):
    cache = TokenCache()
    fetcher.error = FetchFailure("backend down")

    result = await _source(fetcher, "bridge-camera", cache).get_rows(["B1"], 0, 100)

    assert result.success is False
    assert result.rowData == []
    assert "backend down" in result.error
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_malformed_cached_cursor_fails_request(fetcher):
    cache = TokenCache()
    cache.record(cache.key_for(1, ["B1"], "bridge-camera"), 0, next_cursor="garbage!")

    result = await _source(fetcher, "bridge-camera", cache).get_rows(["B1"], 100, 120)

    assert result.success is False
    assert fetcher.calls == []


@pytest.mark.asyncio
async def test_identical_concurrent_requests_share_one_fetch(fetcher):
    source = _source(fetcher, "bridge-camera")

    first, second = await asyncio.gather(
        source.get_rows(["B1"], 0, 100), source.get_rows(["B1"], 0, 100)
    )

    assert len(fetcher.calls) == 1
    assert first == second


@pytest.mark.asyncio
async def test_different_routes_fetch_independently(fetcher):
    source = _source(fetcher, "bridge-camera")

    await asyncio.gather(source.get_rows(["B1"], 0, 10), source.get_rows(["B2"], 0, 10))

    assert sorted(c["filters"].bridge_id for c in fetcher.calls) == ["B1", "B2"]


def test_build_filters_uses_route_in_order():
    level = level_for("location-bridge-camera", 2)

    filters = build_filters(level, ["L9", "B9"], ["online"])

    assert filters.location_id == "L9"
    assert filters.bridge_id == "B9"
    assert filters.status_in == ["online"]
