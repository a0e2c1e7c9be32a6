from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from account_mapper.application import MappingEngine, get_mapping_engine
from account_mapper.core.slot_grid import PlaceOutcome
from account_mapper.domain import (
    DestinationRecord,
    EngineNotActive,
    MasterCategory,
    RecordNotFound,
    RowNotFound,
    SaveInProgress,
    SearchTermTooLong,
    Slot,
    SlotEmpty,
)
from account_mapper.domain.records import SLOT_ORDER

router = APIRouter(tags=["mapping"])


def _engine() -> MappingEngine:
    engine = get_mapping_engine()
    if engine.active_category is None:
        raise HTTPException(status_code=409, detail="no category is active")
    return engine


def _require(payload: dict, key: str) -> str:
    value = payload.get(key)
    if value in (None, ""):
        raise HTTPException(status_code=400, detail=f"{key} is required")
    return str(value)


def _slot(payload: dict, key: str) -> Slot:
    try:
        return Slot.parse(_require(payload, key))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _translate(exc: Exception) -> HTTPException:
    if isinstance(exc, (RowNotFound, RecordNotFound)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (EngineNotActive, SaveInProgress)):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _record(record: DestinationRecord | None) -> dict[str, Any] | None:
    if record is None:
        return None
    return {**record.as_summary(), "type": record.raw_type, "group": record.raw_group}


def _outcome(outcome: PlaceOutcome) -> dict[str, Any]:
    if not outcome.placed:
        conflict = outcome.conflict
        raise HTTPException(
            status_code=409,
            detail={
                "message": str(conflict),
                "record_id": outcome.record.id,
                "row_id": conflict.row_id if conflict else None,
                "slot": conflict.slot.value if conflict else None,
            },
        )
    return {
        "status": "placed",
        "row_id": outcome.row_id,
        "slot": outcome.slot.value,
        "record": _record(outcome.record),
        "evicted": [_record(item) for item in outcome.evicted],
    }


def serialise_grid(engine: MappingEngine) -> dict[str, Any]:
    grid = engine.grid
    rows = []
    for source in engine.rows():
        cells = grid.row(source.id)
        rows.append(
            {
                "row_id": source.id,
                "row_index": source.row_index,
                "number": source.number,
                "name": source.name,
                "heading": source.group_heading,
                "mapped": grid.has_any_mapping(source.id),
                "slots": {slot.value: _record(record) for slot, record in zip(SLOT_ORDER, cells)},
            }
        )
    category = engine.active_category
    return {
        "category": category.value if category else None,
        "updated_at": engine.last_updated(),
        "mapped_rows": grid.mapped_row_count(),
        "can_undo": engine.can_undo,
        "rows": rows,
    }


@router.get("/mapping")
async def get_mapping() -> dict:
    return serialise_grid(_engine())


@router.get("/destinations")
async def list_destinations(
    category_filter: str | None = Query(default=None, alias="filter"),
    group: str | None = Query(default=None),
    search: str | None = Query(default=None),
) -> dict:
    engine = _engine()
    local_filter: MasterCategory | None = None
    unfiltered = category_filter == "all"
    if category_filter and not unfiltered:
        try:
            local_filter = MasterCategory.parse(category_filter)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        items = engine.visible_destinations(local_filter, search, group, unfiltered=unfiltered)
    except SearchTermTooLong as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"items": [_record(item) for item in items], "groups": engine.subgroups()}


@router.post("/mapping/place")
async def place_record(payload: dict) -> dict:
    engine = _engine()
    row_id = _require(payload, "row_id")
    slot = _slot(payload, "slot")
    record_id = _require(payload, "record_id")
    try:
        outcome = engine.place(row_id, slot, record_id)
    except (RowNotFound, RecordNotFound, SaveInProgress) as exc:
        raise _translate(exc) from exc
    return _outcome(outcome)


@router.post("/mapping/move")
async def move_record(payload: dict) -> dict:
    engine = _engine()
    try:
        outcome = engine.move(
            _require(payload, "from_row"),
            _slot(payload, "from_slot"),
            _require(payload, "to_row"),
            _slot(payload, "to_slot"),
        )
    except (RowNotFound, SlotEmpty, SaveInProgress) as exc:
        raise _translate(exc) from exc
    return _outcome(outcome)


@router.post("/mapping/remove")
async def remove_record(payload: dict) -> dict:
    engine = _engine()
    row_id = _require(payload, "row_id")
    slot = _slot(payload, "slot")
    try:
        removed = engine.remove(row_id, slot)
    except (RowNotFound, SaveInProgress) as exc:
        raise _translate(exc) from exc
    return {"removed": _record(removed), "mapped": engine.has_any_mapping(row_id)}


@router.post("/mapping/undo")
async def undo_last() -> dict:
    engine = _engine()
    try:
        snapshot = engine.undo()
    except SaveInProgress as exc:
        raise _translate(exc) from exc
    view = serialise_grid(engine)
    view["undone"] = snapshot is not None
    view["label"] = snapshot.label if snapshot else None
    return view


@router.post("/mapping/save")
async def save_mapping() -> dict:
    engine = _engine()
    result = engine.save()
    body: dict[str, Any] = {
        "saved": result.saved,
        "key": result.key,
        "updated_at": result.updated_at,
        "attempts": result.attempts,
        "degraded": result.degraded,
    }
    if result.error is not None:
        body["detail"] = str(result.error)
    return body
