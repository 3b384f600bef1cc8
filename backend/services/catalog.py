"""Backend side of the paginated fetch service: filter, then paginate."""

from backend.config import settings
from backend.models.entities import EntityStatus, PageFilters, PageResponse
from backend.models.response import StatusUpdateResult
from backend.services.pagination import paginate_results
from backend.services.store import DataStore


def _effective_filters(kind: str, filters: PageFilters) -> PageFilters:
    """Drop the filter fields a kind does not carry."""
    if kind == "location":
        return PageFilters(id_in=filters.id_in)
    if kind == "bridge":
        return filters.model_copy(update={"bridge_id": None})
    return filters


def list_page(
    store: DataStore,
    kind: str,
    filters: PageFilters,
    page_token: str | None = None,
    page_size: int | None = None,
) -> PageResponse:
    filters = _effective_filters(kind, filters)
    size = min(page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

    entities = store.entities(kind)
    if filters.location_id:
        entities = [e for e in entities if e.locationId == filters.location_id]
    if filters.bridge_id:
        entities = [e for e in entities if e.bridgeId == filters.bridge_id]
    if filters.status_in:
        statuses = set(filters.status_in)
        entities = [e for e in entities if e.status in statuses]
    if filters.id_in:
        ids = set(filters.id_in)
        entities = [e for e in entities if e.id in ids]

    return paginate_results(entities, page_token, size, filters.fingerprint())


def update_status(
    store: DataStore, kind: str, entity_id: str, status: EntityStatus
) -> StatusUpdateResult:
    label = kind.capitalize()
    if store.update_status(kind, entity_id, status):
        return StatusUpdateResult(
            success=True, message=f"{label} {entity_id} status updated to {status}"
        )
    return StatusUpdateResult(success=False, message=f"{label} {entity_id} not found")
