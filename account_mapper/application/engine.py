"""Application service: one explicit mapping session over a catalog."""
from __future__ import annotations

import logging

from account_mapper.core.classifier import classify
from account_mapper.core.schema import PersistedMapping
from account_mapper.core.search import filter_destinations, normalize_search_term
from account_mapper.core.slot_grid import PlaceOutcome, SlotGrid, UndoSnapshot
from account_mapper.core.undo import DEFAULT_UNDO_DEPTH, UndoStack
from account_mapper.domain import (
    DestinationRecord,
    EngineNotActive,
    MasterCategory,
    SaveInProgress,
    Slot,
    SourceRow,
)
from account_mapper.infrastructure import InMemoryKeyValueStore, PersistenceGateway, SaveResult

from .catalog import Catalog

logger = logging.getLogger(__name__)

LABEL_MOVED = "Item moved"
LABEL_REMOVED = "Item removed"


class MappingEngine:
    """Owns the active category, its slot grid and its undo history.

    Lifecycle is ``activate(category)`` -> commands -> ``deactivate()``.
    Every command snapshots the grid before it changes anything, so
    :meth:`undo` always returns to the state the user last saw.
    """

    def __init__(
        self,
        catalog: Catalog,
        gateway: PersistenceGateway,
        *,
        undo_depth: int = DEFAULT_UNDO_DEPTH,
    ) -> None:
        self._catalog = catalog
        self._gateway = gateway
        self._undo = UndoStack(undo_depth)
        self._category: MasterCategory | None = None
        self._grid: SlotGrid | None = None

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    @property
    def active_category(self) -> MasterCategory | None:
        return self._category

    @property
    def grid(self) -> SlotGrid:
        if self._grid is None:
            raise EngineNotActive("no master category is active")
        return self._grid

    def activate(self, category: MasterCategory) -> int:
        """Switch to ``category`` and restore its saved mapping; returns restored placements."""

        self._category = category
        self._grid = SlotGrid(row.id for row in self._catalog.source_rows(category))
        self._undo.clear()
        restored = 0
        persisted = self._gateway.load(category)
        if persisted is not None:
            restored = self._apply_persisted(persisted)
        logger.info("activated %s: %d rows, %d restored placements", category.value, len(self._grid), restored)
        return restored

    def deactivate(self) -> None:
        if self._category is not None:
            logger.info("deactivated %s", self._category.value)
        self._category = None
        self._grid = None
        self._undo.clear()

    def replace_catalog(self, catalog: Catalog) -> None:
        self.deactivate()
        self._catalog = catalog

    def _apply_persisted(self, persisted: PersistedMapping) -> int:
        grid = self.grid
        restored = 0
        for row_id, row in persisted.rows.items():
            if row_id not in grid:
                logger.debug("skipping persisted row %s missing from the catalog", row_id)
                continue
            for slot, cell in row.items():
                if self._catalog.has_destination(cell.id):
                    record = self._catalog.get_destination(cell.id)
                else:
                    record = DestinationRecord(id=cell.id, number=cell.number, name=cell.name)
                outcome = grid.place(row_id, slot, record)
                if outcome.placed:
                    restored += 1
                else:
                    logger.warning("persisted record %s repeated at %s/%s; keeping first", cell.id, row_id, slot.value)
        return restored

    def _active(self) -> tuple[MasterCategory, SlotGrid]:
        category, grid = self._category, self._grid
        if category is None or grid is None:
            raise EngineNotActive("no master category is active")
        return category, grid

    def _require_mutable(self) -> tuple[MasterCategory, SlotGrid]:
        category, grid = self._active()
        if self._gateway.is_saving(category):
            raise SaveInProgress(f"{category.value} is being saved")
        return category, grid

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------
    def place(self, row_id: str, slot: Slot, record_id: str) -> PlaceOutcome:
        _, grid = self._require_mutable()
        record = self._catalog.get_destination(record_id)
        conflict = grid.check_place(row_id, record.id)
        if conflict is not None:
            return PlaceOutcome(placed=False, row_id=row_id, slot=slot, record=record, conflict=conflict)
        self._undo.push(grid.snapshot(LABEL_MOVED))
        return grid.place(row_id, slot, record)

    def move(self, from_row: str, from_slot: Slot, to_row: str, to_slot: Slot) -> PlaceOutcome:
        _, grid = self._require_mutable()
        before = grid.snapshot(LABEL_MOVED)
        outcome = grid.move(from_row, from_slot, to_row, to_slot)
        if outcome.placed and (from_row, from_slot) != (to_row, to_slot):
            self._undo.push(before)
        return outcome

    def remove(self, row_id: str, slot: Slot) -> DestinationRecord | None:
        _, grid = self._require_mutable()
        if grid.get(row_id, slot) is None:
            return None
        self._undo.push(grid.snapshot(LABEL_REMOVED))
        return grid.remove(row_id, slot)

    def undo(self) -> UndoSnapshot | None:
        """Restore the most recent snapshot; ``None`` when there is nothing to undo."""

        _, grid = self._require_mutable()
        snapshot = self._undo.pop()
        if snapshot is None:
            return None
        grid.restore(snapshot)
        logger.debug("undid %r", snapshot.label)
        return snapshot

    def save(self) -> SaveResult:
        category, grid = self._active()
        return self._gateway.save(category, grid)

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def undo_depth(self) -> int:
        return self._undo.depth

    @property
    def undo_labels(self) -> list[str]:
        return self._undo.labels()

    def rows(self) -> list[SourceRow]:
        category, _ = self._active()
        return self._catalog.source_rows(category)

    def has_any_mapping(self, row_id: str) -> bool:
        return self.grid.has_any_mapping(row_id)

    def visible_destinations(
        self,
        local_filter: MasterCategory | None = None,
        search_term: str | None = "",
        group: str | None = None,
        *,
        unfiltered: bool = False,
    ) -> list[DestinationRecord]:
        """Unplaced destinations; the category filter defaults to the active category."""

        category, _ = self._active()
        return filter_destinations(
            self._catalog.destinations(),
            self.grid,
            local_filter=None if unfiltered else (local_filter or category),
            search_term=normalize_search_term(search_term),
            group=group,
        )

    def subgroups(self) -> list[str]:
        category, _ = self._active()
        return self._catalog.subgroups(category)

    def last_updated(self) -> str | None:
        if self._category is None:
            return None
        return self._gateway.last_updated(self._category)

    @staticmethod
    def classify(raw_type: str | None, raw_group: str | None = "") -> MasterCategory:
        return classify(raw_type, raw_group)


def build_engine(catalog: Catalog | None = None, gateway: PersistenceGateway | None = None, **kwargs) -> MappingEngine:
    return MappingEngine(
        catalog or Catalog(),
        gateway or PersistenceGateway(InMemoryKeyValueStore()),
        **kwargs,
    )


_engine = build_engine()


def get_mapping_engine() -> MappingEngine:
    """Return the engine shared by the HTTP adapter."""

    return _engine


def configure_mapping_engine(engine: MappingEngine) -> None:
    """Install the engine used by the HTTP adapter."""

    global _engine
    _engine = engine


def reset_mapping_engine() -> None:
    """Reset to an empty in-memory engine (used in tests)."""

    configure_mapping_engine(build_engine())
