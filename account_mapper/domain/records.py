"""Domain entities for the account mapping workspace."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class MasterCategory(str, Enum):
    """Closed set of top-level buckets a chart of accounts is split into."""

    ASSETS = "Assets"
    LIABILITIES = "Liabilities"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    COST_OF_GOODS = "COGS"
    EXPENSE = "Expense"
    OTHER = "Other Rev & Exp"

    @classmethod
    def parse(cls, text: str) -> "MasterCategory":
        """Resolve a category from its value or member name, ignoring case."""

        candidate = (text or "").strip().lower()
        for member in cls:
            if candidate in {member.value.lower(), member.name.lower()}:
                return member
        raise ValueError(f"unknown master category: {text!r}")


class Slot(str, Enum):
    """The three ranked cells attached to every source row."""

    MOST = "most"
    LIKELY = "likely"
    POSSIBLE = "possible"

    @property
    def rank(self) -> int:
        return SLOT_ORDER.index(self)

    @classmethod
    def parse(cls, text: str) -> "Slot":
        try:
            return cls((text or "").strip().lower())
        except ValueError:
            raise ValueError(f"unknown slot: {text!r}") from None


SLOT_ORDER: tuple[Slot, ...] = (Slot.MOST, Slot.LIKELY, Slot.POSSIBLE)


@dataclass(frozen=True, slots=True)
class SourceRow:
    """A line of the canonical chart that can receive ranked assignments."""

    id: str
    number: str
    name: str
    group_heading: str
    row_index: int = 0


@dataclass(slots=True)
class SourceGroup:
    heading: str
    rows: list[SourceRow] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DestinationRecord:
    """An account from the destination chart waiting to be mapped."""

    id: str
    number: str
    name: str
    raw_type: str = ""
    raw_group: str = ""

    def as_summary(self) -> dict[str, str]:
        return {"id": self.id, "number": self.number, "name": self.name}


@dataclass(frozen=True, slots=True)
class SlotAssignment:
    row_id: str
    slot: Slot
    record: DestinationRecord
