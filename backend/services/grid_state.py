from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from backend.models.grid import GridSnapshot, RouteData, RowRecord, RowsResult

Route = tuple[str, ...]


@dataclass(frozen=True)
class RenderedNode:
    route: Route
    row: RowRecord

    @property
    def depth(self) -> int:
        return len(self.route)


@dataclass
class RouteRows:
    # Loaded row windows keyed by their start row.
    blocks: dict[int, list[RowRecord]] = field(default_factory=dict)
    row_count: int | None = None

    def rows(self) -> list[RowRecord]:
        return [row for start in sorted(self.blocks) for row in self.blocks[start]]


@dataclass
class GridState:
    """Rows a grid view has loaded, which groups are expanded, and where it is scrolled."""

    grouping_mode: str
    data_by_route: dict[Route, RouteRows] = field(default_factory=dict)
    expanded_groups: set[Route] = field(default_factory=set)
    scroll_top: float = 0.0
    timestamp: float = field(default_factory=time.time)

    def store_rows(self, route: Sequence[str], start_row: int, result: RowsResult) -> None:
        if not result.success:
            return
        route_rows = self.data_by_route.setdefault(tuple(route), RouteRows())
        route_rows.blocks[start_row] = list(result.rowData)
        if result.rowCount is not None:
            route_rows.row_count = result.rowCount

    def expand(self, route: Sequence[str]) -> None:
        self.expanded_groups.add(tuple(route))

    def collapse(self, route: Sequence[str]) -> None:
        prefix = tuple(route)
        self.expanded_groups = {
            group for group in self.expanded_groups if group[: len(prefix)] != prefix
        }

    def rendered_nodes(self) -> Iterator[RenderedNode]:
        """Root rows, plus the children of every expanded group that has loaded rows."""
        yield from self._walk(())

    def _walk(self, route: Route) -> Iterator[RenderedNode]:
        route_rows = self.data_by_route.get(route)
        if route_rows is None:
            return
        for row in route_rows.rows():
            yield RenderedNode(route, row)
            child = route + (row.key,)
            if row.isGroup and child in self.expanded_groups:
                yield from self._walk(child)

    def apply_update(self, route: Sequence[str], rows: Sequence[RowRecord]) -> int:
        """Replace already loaded rows at ``route`` by key; unknown rows are ignored."""
        route_rows = self.data_by_route.get(tuple(route))
        if route_rows is None:
            return 0
        updates = {row.key: row for row in rows}
        patched = 0
        for block in route_rows.blocks.values():
            for i, existing in enumerate(block):
                replacement = updates.get(existing.key)
                if replacement is not None:
                    block[i] = replacement
                    patched += 1
        return patched

    def snapshot(self, view_id: str, refresh_enabled: bool) -> GridSnapshot:
        return GridSnapshot(
            view_id=view_id,
            grouping_mode=self.grouping_mode,
            refresh_enabled=refresh_enabled,
            scroll_top=self.scroll_top,
            expanded_groups=[list(group) for group in sorted(self.expanded_groups)],
            routes={
                "/".join(route): RouteData(rowData=rows.rows(), rowCount=rows.row_count)
                for route, rows in self.data_by_route.items()
            },
        )
