"""Per-category persistence of slot grids with quota and corruption recovery."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from pydantic import ValidationError

from account_mapper.core.schema import PersistedMapping, PersistedRecord, PersistedRow
from account_mapper.core.slot_grid import SlotGrid
from account_mapper.domain import (
    MappingError,
    MasterCategory,
    SaveInProgress,
    StorageCorrupted,
    StorageError,
    StorageQuotaExceeded,
)
from account_mapper.domain.records import SLOT_ORDER

from .storage import KeyValueStore, StorageQuotaError

logger = logging.getLogger(__name__)

KEY_PREFIX = "account_mapping::"
MAX_SERIALIZED_CHARS = 5_000_000
MAX_ATTEMPTS = 3
RETENTION = timedelta(days=30)


def storage_key(category: MasterCategory) -> str:
    return f"{KEY_PREFIX}{category.value}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""

    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_persisted_mapping(category: MasterCategory, grid: SlotGrid, updated_at: str) -> PersistedMapping:
    rows: dict[str, PersistedRow] = {}
    for row_id in grid.row_ids:
        cells = {
            slot.value: PersistedRecord.from_record(record)
            for slot, record in zip(SLOT_ORDER, grid.row(row_id))
            if record is not None
        }
        if cells:
            rows[row_id] = PersistedRow(**cells)
    return PersistedMapping(master_category=category.value, updated_at=updated_at, rows=rows)


@dataclass(slots=True)
class SaveResult:
    saved: bool
    key: str
    updated_at: str | None = None
    attempts: int = 0
    degraded: bool = False
    error: MappingError | None = None


class PersistenceGateway:
    """Reads and writes one category's mapping at a time through a :class:`KeyValueStore`."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_serialized_chars: int = MAX_SERIALIZED_CHARS,
        max_attempts: int = MAX_ATTEMPTS,
        retention: timedelta = RETENTION,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._max_serialized_chars = max_serialized_chars
        self._max_attempts = max_attempts
        self._retention = retention
        self._clock = clock
        self._in_flight: set[MasterCategory] = set()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def is_saving(self, category: MasterCategory) -> bool:
        return category in self._in_flight

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------
    def save(self, category: MasterCategory, grid: SlotGrid) -> SaveResult:
        key = storage_key(category)
        if category in self._in_flight:
            return SaveResult(saved=False, key=key, error=SaveInProgress(f"save already running for {category.value}"))

        self._in_flight.add(category)
        try:
            updated_at = format_timestamp(self._clock())
            mapping = build_persisted_mapping(category, grid, updated_at)
            payload = mapping.to_json()

            attempts = 0
            while attempts < self._max_attempts:
                attempts += 1
                try:
                    if len(payload) > self._max_serialized_chars:
                        raise StorageQuotaError(f"serialized mapping is {len(payload)} characters")
                    self._store.set(key, payload)
                except StorageQuotaError as exc:
                    logger.warning("quota hit saving %s (attempt %d/%d): %s", key, attempts, self._max_attempts, exc)
                    self.purge_stale()
                    continue
                except OSError as exc:
                    error = StorageError(f"could not write {key}: {exc}")
                    logger.warning("%s", error)
                    return SaveResult(saved=False, key=key, attempts=attempts, error=error)

                logger.info("saved %s with %d mapped rows", key, len(mapping.rows))
                return SaveResult(saved=True, key=key, updated_at=updated_at, attempts=attempts)

            logger.warning("mapping for %s left unsaved after %d attempts", category.value, attempts)
            return SaveResult(
                saved=False,
                key=key,
                attempts=attempts,
                degraded=True,
                error=StorageQuotaExceeded(f"storage full; mapping for {category.value} is not saved"),
            )
        finally:
            self._in_flight.discard(category)

    def purge_stale(self) -> list[str]:
        """Drop mappings older than the retention window and unreadable ones."""

        now = self._clock()
        removed: list[str] = []
        for key in self._store.keys():
            if not key.startswith(KEY_PREFIX):
                continue
            try:
                raw = self._store.get(key)
                data = json.loads(raw) if raw is not None else None
            except ValueError:
                self._store.remove(key)
                removed.append(key)
                continue
            stamp = data.get("updatedAt") if isinstance(data, dict) else None
            if not isinstance(stamp, str):
                continue
            try:
                age = now - parse_timestamp(stamp)
            except ValueError:
                continue
            if age > self._retention:
                self._store.remove(key)
                removed.append(key)
        if removed:
            logger.info("purged %d stale mappings: %s", len(removed), removed)
        return removed

    def delete(self, category: MasterCategory) -> None:
        self._store.remove(storage_key(category))

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    def load(self, category: MasterCategory) -> PersistedMapping | None:
        key = storage_key(category)
        try:
            raw = self._store.get(key)
            if raw is None:
                return None
            mapping = PersistedMapping.model_validate(json.loads(raw))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            error = StorageCorrupted(f"discarding corrupted mapping {key}")
            logger.warning("%s: %s", error, exc)
            self._store.remove(key)
            return None
        if mapping.master_category != category.value:
            logger.warning("mapping under %s is labelled %r", key, mapping.master_category)
        return mapping

    def last_updated(self, category: MasterCategory) -> str | None:
        mapping = self.load(category)
        return mapping.updated_at if mapping else None
