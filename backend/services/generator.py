import logging
import random

from backend.models.entities import Bridge, Camera, EntityStatus, Location

logger = logging.getLogger(__name__)


def random_status(rng: random.Random) -> EntityStatus:
    """70% online, 20% offline, 10% error."""
    roll = rng.random()
    if roll < 0.7:
        return "online"
    if roll < 0.9:
        return "offline"
    return "error"


def generate_locations(count: int) -> list[Location]:
    return [Location(id=f"Location-{i + 1}") for i in range(count)]


def generate_bridges(
    locations: list[Location], bridges_per_location: int, rng: random.Random
) -> list[Bridge]:
    bridges: list[Bridge] = []
    for location in locations:
        for _ in range(bridges_per_location):
            bridges.append(
                Bridge(
                    id=f"Bridge-{len(bridges) + 1}",
                    locationId=location.id,
                    status=random_status(rng),
                )
            )
    return bridges


def generate_cameras(
    bridges: list[Bridge], cameras_per_bridge: int, rng: random.Random
) -> list[Camera]:
    cameras: list[Camera] = []
    for bridge in bridges:
        for _ in range(cameras_per_bridge):
            cameras.append(
                Camera(
                    id=f"Camera-{len(cameras) + 1}",
                    locationId=bridge.locationId,
                    bridgeId=bridge.id,
                    status=random_status(rng),
                )
            )
    return cameras


def generate_initial_data(
    location_count: int,
    bridges_per_location: int,
    cameras_per_bridge: int,
    seed: int | None = None,
) -> tuple[list[Location], list[Bridge], list[Camera]]:
    rng = random.Random(seed)
    locations = generate_locations(location_count)
    bridges = generate_bridges(locations, bridges_per_location, rng)
    cameras = generate_cameras(bridges, cameras_per_bridge, rng)
    logger.info(
        "Generated %d locations, %d bridges, %d cameras",
        len(locations),
        len(bridges),
        len(cameras),
    )
    return locations, bridges, cameras
