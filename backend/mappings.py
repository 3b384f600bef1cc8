from dataclasses import dataclass


@dataclass(frozen=True)
class GroupLevel:
    kind: str
    # Foreign keys matched against the route, in route order.
    ancestor_fields: tuple[str, ...]
    # Row field that carries this level's identifier.
    key_field: str
    leaf: bool = False


GROUPING_LEVELS: dict[str, tuple[GroupLevel, ...]] = {
    "location-bridge-camera": (
        GroupLevel("location", (), "locationId"),
        GroupLevel("bridge", ("locationId",), "bridgeId"),
        GroupLevel("camera", ("locationId", "bridgeId"), "id", leaf=True),
    ),
    "location-camera": (
        GroupLevel("location", (), "locationId"),
        GroupLevel("camera", ("locationId",), "id", leaf=True),
    ),
    "bridge-camera": (
        GroupLevel("bridge", (), "bridgeId"),
        GroupLevel("camera", ("bridgeId",), "id", leaf=True),
    ),
}

# Locations carry no status, so the grid's status filter never applies to them.
STATUS_FILTERABLE_KINDS: frozenset[str] = frozenset({"bridge", "camera"})

ANCESTOR_FILTER_FIELDS: dict[str, str] = {
    "locationId": "location_id",
    "bridgeId": "bridge_id",
}


def level_for(mode: str, depth: int) -> GroupLevel:
    levels = GROUPING_LEVELS.get(mode)
    if levels is None:
        raise ValueError(f"Unknown grouping mode: {mode}")
    if depth < 0 or depth >= len(levels):
        raise ValueError(f"Depth {depth} is not defined for grouping mode {mode}")
    return levels[depth]


def level_for_kind(mode: str, kind: str) -> tuple[int, GroupLevel] | None:
    """Return ``(depth, level)`` where ``kind`` appears in ``mode``, if it does."""
    for depth, level in enumerate(GROUPING_LEVELS[mode]):
        if level.kind == kind:
            return depth, level
    return None
