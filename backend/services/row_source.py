"""Hierarchical row source: one row window for one node of the grouped tree."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from backend.mappings import (
    ANCESTOR_FILTER_FIELDS,
    STATUS_FILTERABLE_KINDS,
    GroupLevel,
    level_for,
)
from backend.models.entities import Entity, PageFilters
from backend.models.grid import RowRecord, RowsResult
from backend.services.cursor import decode_cursor, encode_cursor
from backend.services.fetch import FetchFailure, PageFetcher
from backend.services.token_cache import TokenCache

logger = logging.getLogger(__name__)


def build_filters(
    level: GroupLevel, route: Sequence[str], status_filter: Sequence[str] | None = None
) -> PageFilters:
    kwargs: dict = {
        ANCESTOR_FILTER_FIELDS[field]: route[i]
        for i, field in enumerate(level.ancestor_fields)
    }
    if status_filter and level.kind in STATUS_FILTERABLE_KINDS:
        kwargs["status_in"] = list(status_filter)
    return PageFilters(**kwargs)


def entity_to_row(entity: Entity, level: GroupLevel) -> RowRecord:
    data = entity.model_dump()
    if level.leaf:
        return RowRecord(**data)
    data[level.key_field] = data.pop("id")
    return RowRecord(isGroup=True, **data)


class HierarchicalRowSource:
    """Serves ``[start_row, end_row)`` windows for hierarchy nodes.

    Cursors come from the token cache when it has a usable one for the node;
    otherwise a cursor is minted at the requested offset. Identical requests
    that arrive while one is in flight share its result.
    """

    def __init__(self, fetcher: PageFetcher, token_cache: TokenCache, mode: str):
        self.fetcher = fetcher
        self.token_cache = token_cache
        self.mode = mode
        self._in_flight: dict[tuple, asyncio.Future[RowsResult]] = {}

    async def get_rows(
        self,
        route: Sequence[str],
        start_row: int,
        end_row: int,
        status_filter: Sequence[str] | None = None,
    ) -> RowsResult:
        request_key = (
            tuple(route),
            start_row,
            end_row,
            tuple(sorted(set(status_filter or ()))),
        )
        task = self._in_flight.get(request_key)
        if task is None:
            task = asyncio.ensure_future(
                self._load(list(route), start_row, end_row, status_filter)
            )
            self._in_flight[request_key] = task
            task.add_done_callback(lambda _: self._in_flight.pop(request_key, None))
        else:
            logger.debug("Joining in-flight request for %s", request_key)
        return await asyncio.shield(task)

    def _cursor_for(
        self, cache_key: str, start_row: int, fingerprint: dict[str, object]
    ) -> str | None:
        cursor = self.token_cache.resolve_cursor(cache_key, start_row)
        if cursor is not None:
            if decode_cursor(cursor).filters == fingerprint:
                return cursor
            logger.debug("Cached cursor for %s was issued for other filters", cache_key)
        if start_row == 0:
            return None
        return encode_cursor(start_row, fingerprint)

    async def _load(
        self,
        route: list[str],
        start_row: int,
        end_row: int,
        status_filter: Sequence[str] | None,
    ) -> RowsResult:
        depth = len(route)
        try:
            level = level_for(self.mode, depth)
            filters = build_filters(level, route, status_filter)
            cache_key = self.token_cache.key_for(depth, route, self.mode)
            cursor = self._cursor_for(cache_key, start_row, filters.fingerprint())
            page = await self.fetcher.fetch_page(
                level.kind, filters, cursor, end_row - start_row
            )
        except (FetchFailure, ValueError) as exc:
            logger.warning(
                "Row load failed for route=%s rows=[%d, %d): %s",
                route,
                start_row,
                end_row,
                exc,
            )
            return RowsResult(success=False, error=str(exc))

        self.token_cache.record(
            cache_key, start_row, page.nextPageToken, page.prevPageToken
        )
        rows = [entity_to_row(entity, level) for entity in page.results]
        # Only report a total once the returned rows reach the end of the set.
        # The backend may cap the page below the window size.
        row_count = page.totalSize if start_row + len(rows) >= page.totalSize else None
        logger.debug(
            "Loaded %d %s rows for route=%s (total=%d)",
            len(rows),
            level.kind,
            route,
            page.totalSize,
        )
        return RowsResult(success=True, rowData=rows, rowCount=row_count)
