from pydantic import BaseModel, Field, model_validator

from backend.models.entities import EntityStatus
from backend.models.grid import GroupingMode


class StatusUpdateRequest(BaseModel):
    status: EntityStatus


class CreateViewRequest(BaseModel):
    grouping_mode: GroupingMode = "location-bridge-camera"


class GetRowsRequest(BaseModel):
    route: list[str] = Field(default_factory=list, max_length=2)
    start_row: int = Field(0, ge=0)
    end_row: int = Field(..., gt=0)
    status_filter: list[EntityStatus] | None = None

    @model_validator(mode="after")
    def _check_window(self) -> "GetRowsRequest":
        if self.end_row <= self.start_row:
            raise ValueError("end_row must be greater than start_row")
        return self


class RouteRequest(BaseModel):
    route: list[str] = Field(..., min_length=1, max_length=2)


class ScrollRequest(BaseModel):
    scroll_top: float = Field(..., ge=0)
