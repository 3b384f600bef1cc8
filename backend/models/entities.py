from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

EntityKind = Literal["location", "bridge", "camera"]
EntityStatus = Literal["online", "offline", "error"]


class Location(BaseModel):
    kind: Literal["location"] = "location"
    id: str


class Bridge(BaseModel):
    kind: Literal["bridge"] = "bridge"
    id: str
    locationId: str
    status: EntityStatus


class Camera(BaseModel):
    kind: Literal["camera"] = "camera"
    id: str
    locationId: str
    bridgeId: str
    status: EntityStatus


Entity = Annotated[Union[Location, Bridge, Camera], Field(discriminator="kind")]


class PageFilters(BaseModel):
    """Equality and membership filters for one paginated fetch.

    All provided fields are ANDed. ``status_in`` and ``id_in`` are membership
    tests; an empty list is treated the same as no filter.
    """

    location_id: str | None = None
    bridge_id: str | None = None
    status_in: list[EntityStatus] | None = None
    id_in: list[str] | None = None

    def fingerprint(self) -> dict[str, object]:
        """Snapshot of the filter set, stable under list reordering."""
        snapshot: dict[str, object] = {}
        if self.location_id:
            snapshot["locationId"] = self.location_id
        if self.bridge_id:
            snapshot["bridgeId"] = self.bridge_id
        if self.status_in:
            snapshot["status__in"] = sorted(set(self.status_in))
        if self.id_in:
            snapshot["id__in"] = sorted(set(self.id_in))
        return snapshot


class PageToken(BaseModel):
    offset: int = Field(..., ge=0)
    filters: dict[str, object] = Field(default_factory=dict)


class PageResponse(BaseModel):
    results: list[Entity]
    nextPageToken: str | None = None
    prevPageToken: str | None = None
    totalSize: int
