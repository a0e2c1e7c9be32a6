"""Derive the visible destination pool from filters and the current grid."""
from __future__ import annotations

from typing import Callable, Iterable

from account_mapper.core.classifier import classify
from account_mapper.core.slot_grid import SlotGrid
from account_mapper.domain import DestinationRecord, MasterCategory, SearchTermTooLong

MAX_SEARCH_LENGTH = 100


def normalize_search_term(term: str | None) -> str:
    sanitized = (term or "").strip().lower()
    if len(sanitized) > MAX_SEARCH_LENGTH:
        raise SearchTermTooLong(f"search term longer than {MAX_SEARCH_LENGTH} characters")
    return sanitized


def search_text(record: DestinationRecord) -> str:
    return f"{record.number} {record.name}".lower()


def filter_destinations(
    pool: Iterable[DestinationRecord],
    grid: SlotGrid | None,
    *,
    local_filter: MasterCategory | None = None,
    search_term: str = "",
    group: str | None = None,
    classifier: Callable[[str, str], MasterCategory] = classify,
) -> list[DestinationRecord]:
    """Return unplaced records matching the filters, in pool order."""

    placed = grid.placed_ids() if grid is not None else frozenset()
    term = (search_term or "").strip().lower()

    visible: list[DestinationRecord] = []
    for record in pool:
        if record.id in placed:
            continue
        if local_filter is not None and classifier(record.raw_type, record.raw_group) is not local_filter:
            continue
        if group and record.raw_group != group:
            continue
        if term and term not in search_text(record):
            continue
        visible.append(record)
    return visible
