"""Domain layer definitions."""

from .errors import (
    DuplicateRecordConflict,
    EngineNotActive,
    MappingError,
    RecordNotFound,
    RowNotFound,
    SaveInProgress,
    SearchTermTooLong,
    SlotEmpty,
    StorageCorrupted,
    StorageError,
    StorageQuotaExceeded,
)
from .records import (
    DestinationRecord,
    MasterCategory,
    Slot,
    SlotAssignment,
    SourceGroup,
    SourceRow,
)

__all__ = [
    "DestinationRecord",
    "DuplicateRecordConflict",
    "EngineNotActive",
    "MappingError",
    "MasterCategory",
    "RecordNotFound",
    "RowNotFound",
    "SaveInProgress",
    "SearchTermTooLong",
    "Slot",
    "SlotAssignment",
    "SlotEmpty",
    "SourceGroup",
    "SourceRow",
    "StorageCorrupted",
    "StorageError",
    "StorageQuotaExceeded",
]
