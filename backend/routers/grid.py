from fastapi import APIRouter, HTTPException, Request

from backend.models.grid import GridSnapshot, ReconcileReport, RowsResult
from backend.models.request import (
    CreateViewRequest,
    GetRowsRequest,
    RouteRequest,
    ScrollRequest,
)
from backend.services.grid_session import GridSession, GridSessionRegistry

router = APIRouter(prefix="/api/grid", tags=["grid"])


def _registry(request: Request) -> GridSessionRegistry:
    return request.app.state.grid_sessions


def _session(request: Request, view_id: str) -> GridSession:
    session = _registry(request).get(view_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"View {view_id} not open")
    return session


@router.post("/{view_id}", response_model=GridSnapshot)
async def open_view(view_id: str, body: CreateViewRequest, request: Request) -> GridSnapshot:
    return _registry(request).open(view_id, body.grouping_mode).snapshot()


@router.get("/{view_id}", response_model=GridSnapshot)
async def get_view(view_id: str, request: Request) -> GridSnapshot:
    return _session(request, view_id).snapshot()


@router.delete("/{view_id}")
async def close_view(view_id: str, request: Request) -> dict:
    if not await _registry(request).close(view_id):
        raise HTTPException(status_code=404, detail=f"View {view_id} not open")
    return {"closed": True}


@router.post("/{view_id}/rows", response_model=RowsResult)
async def get_rows(view_id: str, body: GetRowsRequest, request: Request) -> RowsResult:
    session = _session(request, view_id)
    return await session.get_rows(body.route, body.start_row, body.end_row, body.status_filter)


@router.post("/{view_id}/expand")
async def expand_group(view_id: str, body: RouteRequest, request: Request) -> dict:
    _session(request, view_id).state.expand(body.route)
    return {"expanded": body.route}


@router.post("/{view_id}/collapse")
async def collapse_group(view_id: str, body: RouteRequest, request: Request) -> dict:
    _session(request, view_id).state.collapse(body.route)
    return {"collapsed": body.route}


@router.post("/{view_id}/scroll")
async def set_scroll(view_id: str, body: ScrollRequest, request: Request) -> dict:
    _session(request, view_id).state.scroll_top = body.scroll_top
    return {"scroll_top": body.scroll_top}


@router.post("/{view_id}/refresh", response_model=ReconcileReport)
async def refresh_now(view_id: str, request: Request) -> ReconcileReport:
    return await _session(request, view_id).refresh_now()


@router.post("/{view_id}/refresh/enable")
async def enable_refresh(view_id: str, request: Request) -> dict:
    session = _session(request, view_id)
    session.reconciler.enable()
    return {"enabled": session.reconciler.enabled}


@router.post("/{view_id}/refresh/disable")
async def disable_refresh(view_id: str, request: Request) -> dict:
    session = _session(request, view_id)
    session.reconciler.disable()
    return {"enabled": session.reconciler.enabled}
