import pytest

from backend.models.entities import PageFilters
from backend.services import catalog
from backend.services.cursor import InvalidCursor, decode_cursor, encode_cursor
from backend.services.pagination import paginate_results


@pytest.fixture
def cameras(store):
    return store.entities("camera")[:25]


def test_first_page_has_next_but_no_prev(cameras):
    page = paginate_results(cameras, None, 10, {})

    assert page.totalSize == 25
    assert [c.id for c in page.results] == [f"C{n}" for n in range(1, 11)]
    assert page.prevPageToken is None
    assert decode_cursor(page.nextPageToken).offset == 10


def test_last_page_has_prev_but_no_next(cameras):
    page = paginate_results(cameras, encode_cursor(20, {}), 10, {})

    assert len(page.results) == 5
    assert page.nextPageToken is None
    assert decode_cursor(page.prevPageToken).offset == 10


def test_exact_fit_has_no_next(cameras):
    page = paginate_results(cameras[:20], encode_cursor(10, {}), 10, {})

    assert page.nextPageToken is None
    assert page.prevPageToken is not None


def test_prev_cursor_never_goes_negative(cameras):
    page = paginate_results(cameras, encode_cursor(4, {}), 10, {})

    assert page.results[0].id == "C5"
    assert decode_cursor(page.prevPageToken).offset == 0


def test_cursor_carries_fingerprint(cameras):
    fingerprint = {"bridgeId": "B1"}

    page = paginate_results(cameras, None, 10, fingerprint)

    assert decode_cursor(page.nextPageToken).filters == fingerprint


def test_cursor_for_other_filters_is_rejected(cameras):
    cursor = encode_cursor(10, {"bridgeId": "B1"})

    with pytest.raises(InvalidCursor):
        paginate_results(cameras, cursor, 10, {"bridgeId": "B2"})


def test_catalog_filters_cameras_by_ancestors(store):
    page = catalog.list_page(
        store, "camera", PageFilters(location_id="L1", bridge_id="B2"), page_size=100
    )

    assert page.totalSize == 15
    assert {c.bridgeId for c in page.results} == {"B2"}


def test_catalog_membership_filters_are_anded(store):
    page = catalog.list_page(
        store,
        "camera",
        PageFilters(id_in=["C1", "C2", "C3", "C121"], status_in=["offline"]),
        page_size=100,
    )

    assert [c.id for c in page.results] == ["C3"]


def test_catalog_empty_membership_list_means_no_filter(store):
    page = catalog.list_page(store, "bridge", PageFilters(id_in=[]), page_size=100)

    assert page.totalSize == 3


def test_catalog_locations_ignore_status_and_ancestor_filters(store):
    page = catalog.list_page(
        store, "location", PageFilters(status_in=["error"], location_id="L1"), page_size=100
    )

    assert [loc.id for loc in page.results] == ["L1", "L2"]


def test_catalog_keeps_insertion_order_across_pages(store):
    first = catalog.list_page(store, "camera", PageFilters(bridge_id="B1"), page_size=50)
    second = catalog.list_page(
        store, "camera", PageFilters(bridge_id="B1"), first.nextPageToken, 50
    )

    ids = [c.id for c in first.results + second.results]
    assert ids == [f"C{n}" for n in range(1, 101)]


def test_update_status_reports_missing_entity(store):
    result = catalog.update_status(store, "camera", "C999", "error")

    assert result.success is False
    assert result.message == "Camera C999 not found"


def test_update_status_mutates_store(store):
    result = catalog.update_status(store, "bridge", "B1", "error")

    assert result.success is True
    assert store.get_by_id("bridge", "B1").status == "error"
