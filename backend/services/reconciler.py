"""Periodic refresh of the rows a grid view currently renders.

Each cycle collects the ids of every rendered node, re-fetches them with
membership queries (no cursors involved) and patches the loaded rows in place,
route by route. Expansion state, scroll position and rows that are not
rendered are left alone.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from backend.config import settings
from backend.mappings import STATUS_FILTERABLE_KINDS, level_for, level_for_kind
from backend.models.entities import Entity, PageFilters
from backend.models.grid import PatchBatch, ReconcileReport, RowRecord
from backend.services.fetch import FetchFailure, PageFetcher
from backend.services.grid_state import GridState
from backend.services.row_source import entity_to_row

logger = logging.getLogger(__name__)


@dataclass
class VisibleEntitySet:
    locations: set[str] = field(default_factory=set)
    bridges: set[str] = field(default_factory=set)
    cameras: set[str] = field(default_factory=set)

    def ids_for(self, kind: str) -> set[str]:
        return {"location": self.locations, "bridge": self.bridges, "camera": self.cameras}[kind]

    def is_empty(self) -> bool:
        return not (self.locations or self.bridges or self.cameras)


class VisibleRowReconciler:
    def __init__(
        self,
        fetcher: PageFetcher,
        grid_state: GridState,
        interval: float | None = None,
    ):
        self.fetcher = fetcher
        self.grid_state = grid_state
        self.interval = settings.REFRESH_INTERVAL_SECONDS if interval is None else interval
        self.status_filter: list[str] | None = None
        self._enabled = False
        self._closed = False
        # Bumped on disable and on retarget; a cycle only applies patches if it is unchanged.
        self._generation = 0
        self._task: asyncio.Task | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def mode(self) -> str:
        return self.grid_state.grouping_mode

    def enable(self) -> None:
        if self._closed or self._enabled:
            return
        self._enabled = True
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Auto refresh started (interval: %ss)", self.interval)

    def disable(self) -> None:
        if not self._enabled:
            return
        self._enabled = False
        self._generation += 1
        if self._task is not None:
            self._task.cancel()
            self._task = None
        logger.info("Auto refresh stopped")

    def toggle(self) -> bool:
        if self._enabled:
            self.disable()
        else:
            self.enable()
        return self._enabled

    def close(self) -> None:
        self.disable()
        self._generation += 1
        self._closed = True

    async def aclose(self) -> None:
        """Close and wait for the timer task to finish unwinding."""
        task = self._task
        self.close()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def retarget(self, grid_state: GridState) -> None:
        """Point at a new grid state; cycles still in flight are discarded."""
        self.grid_state = grid_state
        self._generation += 1

    async def trigger_now(self) -> ReconcileReport:
        if self._closed:
            return ReconcileReport(skipped=True, reason="closed")
        return await self.run_cycle()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Refresh cycle crashed")

    def visible_entity_set(self) -> VisibleEntitySet:
        visible = VisibleEntitySet()
        for node in self.grid_state.rendered_nodes():
            kind = level_for(self.mode, node.depth).kind
            visible.ids_for(kind).add(node.row.key)
        return visible

    async def run_cycle(self) -> ReconcileReport:
        generation = self._generation
        visible = self.visible_entity_set()
        if visible.is_empty():
            return ReconcileReport(skipped=True, reason="nothing visible")

        kinds = [kind for kind in ("location", "bridge", "camera") if visible.ids_for(kind)]
        try:
            fetched = await asyncio.gather(
                *(self._fetch_members(kind, visible.ids_for(kind)) for kind in kinds)
            )
        except (FetchFailure, ValueError) as exc:
            logger.warning("Refresh cycle failed: %s", exc)
            return ReconcileReport(skipped=True, reason=str(exc))

        if generation != self._generation:
            logger.debug("Discarding refresh results from a stopped cycle")
            return ReconcileReport(skipped=True, reason="stale")

        entities = [entity for results in fetched for entity in results]
        batches = self.group_batches(entities)
        patched = sum(
            self.grid_state.apply_update(batch.route, batch.rows) for batch in batches
        )
        logger.info("Refreshed %d visible rows across %d routes", patched, len(batches))
        return ReconcileReport(
            fetched={kind: len(results) for kind, results in zip(kinds, fetched)},
            batches=batches,
            patched_rows=patched,
        )

    async def _fetch_members(self, kind: str, ids: set[str]) -> list[Entity]:
        ordered = sorted(ids)
        status_in = self.status_filter if kind in STATUS_FILTERABLE_KINDS else None
        results: list[Entity] = []
        for i in range(0, len(ordered), settings.MAX_PAGE_SIZE):
            chunk = ordered[i : i + settings.MAX_PAGE_SIZE]
            page = await self.fetcher.fetch_page(
                kind, PageFilters(id_in=chunk, status_in=status_in), None, len(chunk)
            )
            results.extend(page.results)
        return results

    def group_batches(self, entities: list[Entity]) -> list[PatchBatch]:
        by_route: dict[tuple[str, ...], list[RowRecord]] = {}
        for entity in entities:
            found = level_for_kind(self.mode, entity.kind)
            if found is None:
                continue
            _, level = found
            route = tuple(getattr(entity, name) for name in level.ancestor_fields)
            by_route.setdefault(route, []).append(entity_to_row(entity, level))
        return [PatchBatch(route=list(route), rows=rows) for route, rows in by_route.items()]
