"""Error taxonomy shared by the mapping layers."""
from __future__ import annotations


class MappingError(Exception):
    """Base class for every error raised by the mapping engine."""


class RowNotFound(MappingError, KeyError):
    """An operation referenced a source row the active grid does not have."""

    def __init__(self, row_id: str) -> None:
        super().__init__(row_id)
        self.row_id = row_id

    def __str__(self) -> str:
        return f"source row not found: {self.row_id}"


class RecordNotFound(MappingError, KeyError):
    """A destination record id is not part of the loaded catalog."""

    def __init__(self, record_id: str) -> None:
        super().__init__(record_id)
        self.record_id = record_id

    def __str__(self) -> str:
        return f"destination record not found: {self.record_id}"


class SlotEmpty(MappingError):
    """A move was requested from a cell that holds nothing."""


class EngineNotActive(MappingError):
    """A command was issued before a master category was activated."""


class SaveInProgress(MappingError):
    """The active category is being persisted; mutations must wait."""


class DuplicateRecordConflict(MappingError):
    """A record is already placed; reported as a value, never raised on the hot path."""

    def __init__(self, record_id: str, row_id: str, slot: object) -> None:
        super().__init__(f"record {record_id} already mapped at {row_id}/{getattr(slot, 'value', slot)}")
        self.record_id = record_id
        self.row_id = row_id
        self.slot = slot


class StorageError(MappingError):
    """Raised when the persistence medium cannot complete an operation."""


class StorageQuotaExceeded(StorageError):
    """The serialized mapping did not fit in storage after cleanup and retries."""


class StorageCorrupted(StorageError):
    """A persisted mapping failed to parse or validate and was discarded."""


class SearchTermTooLong(MappingError, ValueError):
    """Search input exceeded the accepted length."""
