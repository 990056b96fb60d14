from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from plantmonitor.models import SORT_KEYS, STATUSES, SortPayload, ViewState
from plantmonitor.services import derivation
from plantmonitor.store import ReadingStore, RefreshResult


router = APIRouter()


def _store(request: Request) -> ReadingStore:
    return request.app.state.store


def _view(request: Request) -> ViewState:
    return request.app.state.view


def _unknown_status(status: str) -> JSONResponse:
    return JSONResponse(
        {"error": "unknown status", "status": status, "known": list(STATUSES)},
        status_code=400,
    )


@router.get("/plants")
def plants(
    request: Request,
    sort_by: Optional[str] = Query(default=None, description="name, humidity or status"),
    status: Optional[str] = Query(default=None, description="healthy, warning or critical"),
):
    store = _store(request)
    view = _view(request)

    if status is not None and status not in STATUSES:
        return _unknown_status(status)

    effective = ViewState(
        sort_by=sort_by if sort_by in SORT_KEYS else view.sort_by,
        status_filter=status if status is not None else view.status_filter,
        view_mode=view.view_mode,
    )
    projection = store.project(effective)
    now = datetime.now(timezone.utc)

    return {
        **effective.as_dict(),
        "empty": projection.empty,
        "plants": [derivation.card(r, now) for r in projection.readings],
        "counts": store.counts(),
    }


@router.get("/stats")
def stats(request: Request) -> dict:
    return _store(request).counts()


@router.get("/connection")
def connection(request: Request) -> dict:
    return _store(request).connection()


@router.post("/refresh")
async def refresh(request: Request):
    store = _store(request)
    result = await store.refresh()
    if result is RefreshResult.REJECTED:
        return JSONResponse({"error": "refresh already in progress"}, status_code=409)

    return {"result": result.value, **store.connection(), "counts": store.counts()}


# ---------------------------
# View state
# ---------------------------
@router.get("/view")
def view(request: Request) -> dict:
    return _view(request).as_dict()


@router.put("/view/sort")
def set_sort(request: Request, payload: SortPayload):
    if payload.sort_by not in SORT_KEYS:
        return JSONResponse(
            {"error": "unknown sort key", "sort_by": payload.sort_by, "known": list(SORT_KEYS)},
            status_code=400,
        )
    v = _view(request)
    v.sort_by = payload.sort_by
    return v.as_dict()


@router.post("/view/filter/{status}")
def toggle_filter(request: Request, status: str):
    if status not in STATUSES:
        return _unknown_status(status)
    v = _view(request)
    v.status_filter = derivation.toggle_filter(v.status_filter, status)
    return v.as_dict()


@router.post("/view/mode")
def toggle_mode(request: Request) -> dict:
    v = _view(request)
    v.view_mode = "list" if v.view_mode == "card" else "card"
    return v.as_dict()
