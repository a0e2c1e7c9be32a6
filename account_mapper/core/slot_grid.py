"""Ranked three-slot grid with cascading displacement."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from account_mapper.domain import (
    DestinationRecord,
    DuplicateRecordConflict,
    RowNotFound,
    Slot,
    SlotAssignment,
    SlotEmpty,
)
from account_mapper.domain.records import SLOT_ORDER

logger = logging.getLogger(__name__)

RowCells = tuple[DestinationRecord | None, DestinationRecord | None, DestinationRecord | None]
EMPTY_ROW: RowCells = (None, None, None)


@dataclass(frozen=True, slots=True)
class UndoSnapshot:
    """Materialized, read-only copy of a grid taken before a mutation."""

    label: str
    rows: Mapping[str, RowCells]

    def get(self, row_id: str, slot: Slot) -> DestinationRecord | None:
        return self.rows[row_id][slot.rank]


@dataclass(slots=True)
class PlaceOutcome:
    """Result of :meth:`SlotGrid.place`; conflicts are values, not exceptions."""

    placed: bool
    row_id: str
    slot: Slot
    record: DestinationRecord
    evicted: list[DestinationRecord] = field(default_factory=list)
    conflict: DuplicateRecordConflict | None = None


class SlotGrid:
    """Per-row ``[most, likely, possible]`` cells plus a reverse location index.

    A record id lives in at most one cell of the whole grid. The only way
    occupants change rank is the cascade in :meth:`place`.
    """

    def __init__(self, row_ids: Iterable[str]) -> None:
        self._rows: dict[str, list[DestinationRecord | None]] = {row_id: [None, None, None] for row_id in row_ids}
        self._index: dict[str, tuple[str, Slot]] = {}

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------
    def _cells(self, row_id: str) -> list[DestinationRecord | None]:
        try:
            return self._rows[row_id]
        except KeyError:
            raise RowNotFound(row_id) from None

    def _put(self, row_id: str, slot: Slot, record: DestinationRecord | None) -> None:
        self._rows[row_id][slot.rank] = record
        if record is not None:
            self._index[record.id] = (row_id, slot)

    def _evict(self, row_id: str, slot: Slot) -> DestinationRecord | None:
        cells = self._rows[row_id]
        occupant = cells[slot.rank]
        if occupant is not None:
            cells[slot.rank] = None
            self._index.pop(occupant.id, None)
        return occupant

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    @property
    def row_ids(self) -> list[str]:
        return list(self._rows)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, row_id: str, slot: Slot) -> DestinationRecord | None:
        return self._cells(row_id)[slot.rank]

    def row(self, row_id: str) -> RowCells:
        cells = self._cells(row_id)
        return (cells[0], cells[1], cells[2])

    def has_any_mapping(self, row_id: str) -> bool:
        return any(cell is not None for cell in self._cells(row_id))

    def locate(self, record_id: str) -> tuple[str, Slot] | None:
        return self._index.get(record_id)

    def is_placed(self, record_id: str) -> bool:
        return record_id in self._index

    def placed_ids(self) -> frozenset[str]:
        return frozenset(self._index)

    def assignments(self) -> Iterator[SlotAssignment]:
        for row_id, cells in self._rows.items():
            for slot, record in zip(SLOT_ORDER, cells):
                if record is not None:
                    yield SlotAssignment(row_id=row_id, slot=slot, record=record)

    def mapped_row_count(self) -> int:
        return sum(1 for cells in self._rows.values() if any(cell is not None for cell in cells))

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------
    def check_place(self, row_id: str, record_id: str) -> DuplicateRecordConflict | None:
        """Return the conflict a placement would hit, without touching the grid."""

        self._cells(row_id)
        location = self._index.get(record_id)
        if location is None:
            return None
        return DuplicateRecordConflict(record_id, *location)

    def place(self, row_id: str, slot: Slot, record: DestinationRecord) -> PlaceOutcome:
        conflict = self.check_place(row_id, record.id)
        if conflict is not None:
            logger.debug("rejecting %s for %s/%s: %s", record.id, row_id, slot.value, conflict)
            return PlaceOutcome(placed=False, row_id=row_id, slot=slot, record=record, conflict=conflict)

        cells = self._rows[row_id]
        evicted: list[DestinationRecord] = []

        if cells[slot.rank] is not None:
            if slot is Slot.MOST:
                if cells[Slot.LIKELY.rank] is not None:
                    gone = self._evict(row_id, Slot.POSSIBLE)
                    if gone is not None:
                        evicted.append(gone)
                    self._put(row_id, Slot.POSSIBLE, self._evict(row_id, Slot.LIKELY))
                self._put(row_id, Slot.LIKELY, self._evict(row_id, Slot.MOST))
            elif slot is Slot.LIKELY:
                gone = self._evict(row_id, Slot.POSSIBLE)
                if gone is not None:
                    evicted.append(gone)
                self._put(row_id, Slot.POSSIBLE, self._evict(row_id, Slot.LIKELY))
            else:
                gone = self._evict(row_id, Slot.POSSIBLE)
                if gone is not None:
                    evicted.append(gone)

        self._put(row_id, slot, record)
        if evicted:
            logger.debug("placing %s at %s/%s evicted %s", record.id, row_id, slot.value, [item.id for item in evicted])
        return PlaceOutcome(placed=True, row_id=row_id, slot=slot, record=record, evicted=evicted)

    def remove(self, row_id: str, slot: Slot) -> DestinationRecord | None:
        self._cells(row_id)
        return self._evict(row_id, slot)

    def move(self, from_row: str, from_slot: Slot, to_row: str, to_slot: Slot) -> PlaceOutcome:
        """Lift a placed record out of its cell and drop it on another one."""

        record = self.get(from_row, from_slot)
        self._cells(to_row)
        if record is None:
            raise SlotEmpty(f"nothing to move at {from_row}/{from_slot.value}")
        if (from_row, from_slot) == (to_row, to_slot):
            return PlaceOutcome(placed=True, row_id=to_row, slot=to_slot, record=record)

        self._evict(from_row, from_slot)
        outcome = self.place(to_row, to_slot, record)
        if not outcome.placed:
            self._put(from_row, from_slot, record)
        return outcome

    # ------------------------------------------------------------------
    # snapshots
    # ------------------------------------------------------------------
    def snapshot(self, label: str) -> UndoSnapshot:
        rows = {row_id: (cells[0], cells[1], cells[2]) for row_id, cells in self._rows.items()}
        return UndoSnapshot(label=label, rows=MappingProxyType(rows))

    def restore(self, snapshot: UndoSnapshot) -> None:
        """Replace the whole grid with ``snapshot``."""

        self._rows = {row_id: list(cells) for row_id, cells in snapshot.rows.items()}
        self._index = {}
        for row_id, cells in self._rows.items():
            for slot, record in zip(SLOT_ORDER, cells):
                if record is not None:
                    self._index[record.id] = (row_id, slot)

    def clear(self) -> None:
        for row_id in self._rows:
            self._rows[row_id] = [None, None, None]
        self._index.clear()
