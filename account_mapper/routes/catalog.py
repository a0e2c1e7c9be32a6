from __future__ import annotations

from fastapi import APIRouter, HTTPException

from account_mapper.application import Catalog, get_mapping_engine
from account_mapper.domain import MasterCategory

from .mapping import serialise_grid

router = APIRouter(tags=["catalog"])


def _parse_category(value: str) -> MasterCategory:
    try:
        return MasterCategory.parse(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.put("/catalog")
async def replace_catalog(payload: dict) -> dict:
    sources = payload.get("sources")
    destinations = payload.get("destinations")
    if not isinstance(sources, list) or not isinstance(destinations, list):
        raise HTTPException(status_code=400, detail="sources and destinations must be lists")
    if not all(isinstance(row, dict) for row in [*sources, *destinations]):
        raise HTTPException(status_code=400, detail="every catalog row must be an object")

    catalog = Catalog.from_rows(sources, destinations)
    engine = get_mapping_engine()
    engine.replace_catalog(catalog)
    return {
        "categories": [category.value for category in catalog.categories()],
        "source_rows": sum(len(catalog.source_rows(category)) for category in catalog.categories()),
        "destinations": len(catalog.destinations()),
    }


@router.get("/categories")
async def list_categories() -> dict:
    engine = get_mapping_engine()
    active = engine.active_category
    return {
        "items": [
            {
                "category": category.value,
                "rows": len(engine.catalog.source_rows(category)),
                "destinations": len(engine.catalog.destinations(category)),
            }
            for category in engine.catalog.categories()
        ],
        "active": active.value if active else None,
    }


@router.post("/categories/{category}/activate")
async def activate_category(category: str) -> dict:
    master = _parse_category(category)
    engine = get_mapping_engine()
    if master not in engine.catalog.categories():
        raise HTTPException(status_code=404, detail="category not in catalog")
    restored = engine.activate(master)
    view = serialise_grid(engine)
    view["restored"] = restored
    return view
