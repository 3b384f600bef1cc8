from pydantic import BaseModel


class StatusUpdateResult(BaseModel):
    success: bool
    message: str | None = None


class KindStats(BaseModel):
    total: int
    byStatus: dict[str, int] = {}


class StoreStats(BaseModel):
    locations: int
    bridges: KindStats
    cameras: KindStats
