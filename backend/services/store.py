import logging
from collections import Counter

from backend.config import settings
from backend.models.entities import Bridge, Camera, EntityStatus, Location
from backend.models.response import KindStats, StoreStats
from backend.services.generator import generate_initial_data

logger = logging.getLogger(__name__)


class DataStore:
    """Mutable in-memory entity store.

    Lists keep insertion order, which is the order every page is served in.
    Getters return shallow list copies; status updates mutate the stored entity.
    """

    def __init__(
        self,
        locations: list[Location] | None = None,
        bridges: list[Bridge] | None = None,
        cameras: list[Camera] | None = None,
    ):
        self._locations = list(locations or [])
        self._bridges = list(bridges or [])
        self._cameras = list(cameras or [])

    @classmethod
    def generate(
        cls,
        location_count: int,
        bridges_per_location: int,
        cameras_per_bridge: int,
        seed: int | None = None,
    ) -> "DataStore":
        return cls(
            *generate_initial_data(
                location_count, bridges_per_location, cameras_per_bridge, seed=seed
            )
        )

    def get_locations(self) -> list[Location]:
        return list(self._locations)

    def get_bridges(self) -> list[Bridge]:
        return list(self._bridges)

    def get_cameras(self) -> list[Camera]:
        return list(self._cameras)

    def entities(self, kind: str) -> list[Location] | list[Bridge] | list[Camera]:
        if kind == "location":
            return self.get_locations()
        if kind == "bridge":
            return self.get_bridges()
        if kind == "camera":
            return self.get_cameras()
        raise ValueError(f"Unknown entity kind: {kind}")

    def get_by_id(self, kind: str, entity_id: str) -> Location | Bridge | Camera | None:
        return next((e for e in self.entities(kind) if e.id == entity_id), None)

    def update_status(self, kind: str, entity_id: str, status: EntityStatus) -> bool:
        if kind not in ("bridge", "camera"):
            raise ValueError(f"Entity kind {kind} has no status")
        entity = self.get_by_id(kind, entity_id)
        if entity is None:
            logger.warning("%s not found: %s", kind.capitalize(), entity_id)
            return False
        logger.info("Updating %s status: %s -> %s", entity_id, entity.status, status)
        entity.status = status
        return True

    def stats(self) -> StoreStats:
        return StoreStats(
            locations=len(self._locations),
            bridges=KindStats(
                total=len(self._bridges),
                byStatus=dict(Counter(b.status for b in self._bridges)),
            ),
            cameras=KindStats(
                total=len(self._cameras),
                byStatus=dict(Counter(c.status for c in self._cameras)),
            ),
        )


_store: DataStore | None = None


def get_store() -> DataStore:
    global _store
    if _store is None:
        _store = DataStore.generate(
            settings.LOCATION_COUNT,
            settings.BRIDGES_PER_LOCATION,
            settings.CAMERAS_PER_BRIDGE,
            seed=settings.DATA_SEED,
        )
    return _store
