from typing import Literal

from pydantic import BaseModel, Field

from backend.models.entities import EntityKind, EntityStatus

GroupingMode = Literal["location-bridge-camera", "location-camera", "bridge-camera"]


class RowRecord(BaseModel):
    """One row handed to the grid.

    Group rows carry ``isGroup=True`` and their entity id under the group's
    key field (``locationId`` or ``bridgeId``) instead of ``id``.
    """

    kind: EntityKind
    id: str | None = None
    locationId: str | None = None
    bridgeId: str | None = None
    status: EntityStatus | None = None
    isGroup: bool = False

    @property
    def key(self) -> str:
        if not self.isGroup:
            return self.id or ""
        if self.kind == "bridge":
            return self.bridgeId or ""
        return self.locationId or ""


class RowsResult(BaseModel):
    success: bool
    rowData: list[RowRecord] = Field(default_factory=list)
    rowCount: int | None = None
    error: str | None = None


class PatchBatch(BaseModel):
    route: list[str]
    rows: list[RowRecord]


class ReconcileReport(BaseModel):
    skipped: bool = False
    reason: str | None = None
    fetched: dict[str, int] = Field(default_factory=dict)
    batches: list[PatchBatch] = Field(default_factory=list)
    patched_rows: int = 0


class RouteData(BaseModel):
    rowData: list[RowRecord] = Field(default_factory=list)
    rowCount: int | None = None


class GridSnapshot(BaseModel):
    view_id: str
    grouping_mode: GroupingMode
    refresh_enabled: bool
    scroll_top: float
    expanded_groups: list[list[str]]
    routes: dict[str, RouteData]
