from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from account_mapper.domain import DestinationRecord, Slot


class PersistedRecord(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    number: str = ""
    name: str = ""

    @classmethod
    def from_record(cls, record: DestinationRecord) -> "PersistedRecord":
        return cls(id=record.id, number=record.number, name=record.name)


class PersistedRow(BaseModel):
    most: PersistedRecord | None = None
    likely: PersistedRecord | None = None
    possible: PersistedRecord | None = None

    def items(self) -> list[tuple[Slot, PersistedRecord]]:
        return [(slot, cell) for slot in Slot if (cell := getattr(self, slot.value)) is not None]


class PersistedMapping(BaseModel):
    """On-disk mapping for one master category.

    Slot keys absent from a row mean the slot is empty; they are never written
    as ``null``.
    """

    model_config = ConfigDict(populate_by_name=True)

    master_category: str = Field(alias="type", min_length=1)
    updated_at: str | None = Field(default=None, alias="updatedAt")
    rows: dict[str, PersistedRow]

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
