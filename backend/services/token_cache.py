"""Per-node pagination token cache.

Each expanded hierarchy node pages through its children independently, so the
cache keeps one entry per node: the cursors returned by its last fetch and the
row offset that fetch started at. Navigation direction is inferred from how the
next requested offset compares to that remembered offset.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    RESTART = "restart"
    FORWARD = "forward"
    BACKWARD = "backward"
    REPEAT = "repeat"


def infer_direction(last_offset: int, requested_offset: int) -> Direction:
    if requested_offset == 0:
        return Direction.RESTART
    if requested_offset > last_offset:
        return Direction.FORWARD
    if requested_offset < last_offset:
        return Direction.BACKWARD
    return Direction.REPEAT


@dataclass
class TokenEntry:
    next_cursor: str | None
    prev_cursor: str | None
    last_requested_offset: int


class TokenCache:
    def __init__(self):
        self._entries: dict[str, TokenEntry] = {}

    @staticmethod
    def key_for(depth: int, path: Sequence[str], mode: str | None = None) -> str:
        key = f"level:{depth}:{':'.join(path)}"
        return f"{mode}|{key}" if mode else key

    def get(self, key: str) -> TokenEntry | None:
        return self._entries.get(key)

    def resolve_cursor(self, key: str, requested_offset: int) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("No cached tokens for %s, starting fresh", key)
            return None

        direction = infer_direction(entry.last_requested_offset, requested_offset)
        logger.debug(
            "Token cache %s: %s (last=%d, requested=%d)",
            key,
            direction.value,
            entry.last_requested_offset,
            requested_offset,
        )
        if direction is Direction.FORWARD:
            return entry.next_cursor
        if direction is Direction.BACKWARD:
            return entry.prev_cursor
        return None

    def record(
        self,
        key: str,
        requested_offset: int,
        next_cursor: str | None = None,
        prev_cursor: str | None = None,
    ) -> None:
        self._entries[key] = TokenEntry(
            next_cursor=next_cursor,
            prev_cursor=prev_cursor,
            last_requested_offset=requested_offset,
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
