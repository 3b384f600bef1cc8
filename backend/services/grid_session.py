"""Grid views: one token cache, row source, grid state and reconciler per view."""

from __future__ import annotations

import logging
from typing import Sequence

from backend.models.grid import GridSnapshot, ReconcileReport, RowsResult
from backend.services.fetch import PageFetcher
from backend.services.grid_cache import GridStateCache
from backend.services.grid_state import GridState
from backend.services.reconciler import VisibleRowReconciler
from backend.services.row_source import HierarchicalRowSource
from backend.services.token_cache import TokenCache

logger = logging.getLogger(__name__)


class GridSession:
    def __init__(
        self,
        view_id: str,
        fetcher: PageFetcher,
        grouping_mode: str,
        state: GridState | None = None,
        refresh_interval: float | None = None,
    ):
        self.view_id = view_id
        self.fetcher = fetcher
        self.state = state or GridState(grouping_mode)
        self.token_cache = TokenCache()
        self.row_source = HierarchicalRowSource(fetcher, self.token_cache, grouping_mode)
        self.reconciler = VisibleRowReconciler(fetcher, self.state, interval=refresh_interval)
        self.closed = False

    @property
    def grouping_mode(self) -> str:
        return self.state.grouping_mode

    def activate(self) -> None:
        self.reconciler.enable()

    async def get_rows(
        self,
        route: Sequence[str],
        start_row: int,
        end_row: int,
        status_filter: Sequence[str] | None = None,
    ) -> RowsResult:
        state = self.state
        result = await self.row_source.get_rows(route, start_row, end_row, status_filter)
        if self.closed:
            logger.debug("View %s closed while loading %s, dropping rows", self.view_id, route)
            return result
        if state is not self.state:
            logger.debug(
                "View %s changed mode while loading %s, dropping rows", self.view_id, route
            )
            return result
        state.store_rows(route, start_row, result)
        self.reconciler.status_filter = list(status_filter) if status_filter else None
        return result

    def set_grouping_mode(self, grouping_mode: str) -> None:
        if grouping_mode == self.grouping_mode:
            return
        logger.info(
            "View %s changing mode: %s -> %s", self.view_id, self.grouping_mode, grouping_mode
        )
        self.state = GridState(grouping_mode)
        self.reconciler.retarget(self.state)
        self.row_source = HierarchicalRowSource(self.fetcher, self.token_cache, grouping_mode)

    async def refresh_now(self) -> ReconcileReport:
        return await self.reconciler.trigger_now()

    def snapshot(self) -> GridSnapshot:
        return self.state.snapshot(self.view_id, self.reconciler.enabled)

    def close(self) -> None:
        self.reconciler.close()
        self.closed = True

    async def aclose(self) -> None:
        self.closed = True
        await self.reconciler.aclose()


class GridSessionRegistry:
    def __init__(
        self,
        fetcher: PageFetcher,
        state_cache: GridStateCache | None = None,
        refresh_interval: float | None = None,
    ):
        self.fetcher = fetcher
        self.state_cache = state_cache or GridStateCache()
        self.refresh_interval = refresh_interval
        self._sessions: dict[str, GridSession] = {}

    def open(self, view_id: str, grouping_mode: str) -> GridSession:
        session = self._sessions.get(view_id)
        if session is not None:
            session.set_grouping_mode(grouping_mode)
            return session

        restored = self.state_cache.get_state(view_id)
        if restored is not None and restored.grouping_mode != grouping_mode:
            restored = None
        session = GridSession(
            view_id,
            self.fetcher,
            grouping_mode,
            state=restored,
            refresh_interval=self.refresh_interval,
        )
        self._sessions[view_id] = session
        session.activate()
        logger.info("Opened view %s (%s, restored=%s)", view_id, grouping_mode, restored is not None)
        return session

    def get(self, view_id: str) -> GridSession | None:
        return self._sessions.get(view_id)

    async def close(self, view_id: str) -> bool:
        session = self._sessions.pop(view_id, None)
        if session is None:
            return False
        await session.aclose()
        self.state_cache.save_state(view_id, session.state)
        logger.info("Closed view %s", view_id)
        return True

    async def close_all(self) -> None:
        for view_id in list(self._sessions):
            await self.close(view_id)
