from fastapi import APIRouter, HTTPException, Query

from backend.models.entities import (
    Bridge,
    Camera,
    EntityStatus,
    Location,
    PageFilters,
    PageResponse,
)
from backend.models.request import StatusUpdateRequest
from backend.models.response import StatusUpdateResult, StoreStats
from backend.services import catalog
from backend.services.cursor import InvalidCursor
from backend.services.store import get_store

router = APIRouter(prefix="/api", tags=["entities"])

COLLECTION_KINDS: dict[str, str] = {
    "locations": "location",
    "bridges": "bridge",
    "cameras": "camera",
}


def _page(
    kind: str, filters: PageFilters, page_token: str | None, page_size: int | None
) -> PageResponse:
    try:
        return catalog.list_page(get_store(), kind, filters, page_token, page_size)
    except InvalidCursor as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _kind(collection: str) -> str:
    kind = COLLECTION_KINDS.get(collection)
    if kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")
    return kind


@router.get("/locations", response_model=PageResponse)
async def get_locations(
    id_in: list[str] | None = Query(None, alias="id__in"),
    page_token: str | None = Query(None, alias="pageToken"),
    page_size: int | None = Query(None, alias="pageSize", ge=1),
) -> PageResponse:
    return _page("location", PageFilters(id_in=id_in), page_token, page_size)


@router.get("/bridges", response_model=PageResponse)
async def get_bridges(
    location_id: str | None = Query(None, alias="locationId"),
    status_in: list[EntityStatus] | None = Query(None, alias="status__in"),
    id_in: list[str] | None = Query(None, alias="id__in"),
    page_token: str | None = Query(None, alias="pageToken"),
    page_size: int | None = Query(None, alias="pageSize", ge=1),
) -> PageResponse:
    filters = PageFilters(location_id=location_id, status_in=status_in, id_in=id_in)
    return _page("bridge", filters, page_token, page_size)


@router.get("/cameras", response_model=PageResponse)
async def get_cameras(
    location_id: str | None = Query(None, alias="locationId"),
    bridge_id: str | None = Query(None, alias="bridgeId"),
    status_in: list[EntityStatus] | None = Query(None, alias="status__in"),
    id_in: list[str] | None = Query(None, alias="id__in"),
    page_token: str | None = Query(None, alias="pageToken"),
    page_size: int | None = Query(None, alias="pageSize", ge=1),
) -> PageResponse:
    filters = PageFilters(
        location_id=location_id, bridge_id=bridge_id, status_in=status_in, id_in=id_in
    )
    return _page("camera", filters, page_token, page_size)


@router.get("/stats", response_model=StoreStats)
async def get_stats() -> StoreStats:
    return get_store().stats()


@router.get("/{collection}/{entity_id}", response_model=Location | Bridge | Camera)
async def get_entity(collection: str, entity_id: str):
    kind = _kind(collection)
    entity = get_store().get_by_id(kind, entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"{kind.capitalize()} {entity_id} not found")
    return entity


@router.patch("/{collection}/{entity_id}/status", response_model=StatusUpdateResult)
async def update_entity_status(
    collection: str, entity_id: str, request: StatusUpdateRequest
) -> StatusUpdateResult:
    kind = _kind(collection)
    if kind == "location":
        raise HTTPException(status_code=400, detail="Locations have no status")
    return catalog.update_status(get_store(), kind, entity_id, request.status)
