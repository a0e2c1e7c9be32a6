"""Session catalog: the source chart grouped per category and the destination pool."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from account_mapper.core.classifier import classify
from account_mapper.core.name_normalize import clean_number, clean_text
from account_mapper.domain import DestinationRecord, MasterCategory, RecordNotFound, RowNotFound, SourceGroup, SourceRow

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "Other"


class Catalog:
    """Immutable view over both charts for one session."""

    def __init__(
        self,
        groups: Mapping[MasterCategory, Iterable[SourceGroup]] | None = None,
        destinations: Iterable[DestinationRecord] = (),
    ) -> None:
        self._groups: dict[MasterCategory, list[SourceGroup]] = {}
        self._rows: dict[MasterCategory, dict[str, SourceRow]] = {}
        for category, category_groups in (groups or {}).items():
            materialised = [SourceGroup(heading=group.heading, rows=list(group.rows)) for group in category_groups]
            self._groups[category] = materialised
            self._rows[category] = {row.id: row for group in materialised for row in group.rows}

        self._destinations: list[DestinationRecord] = []
        self._by_id: dict[str, DestinationRecord] = {}
        for record in destinations:
            if record.id in self._by_id:
                logger.warning("duplicate destination id %s ignored", record.id)
                continue
            self._by_id[record.id] = record
            self._destinations.append(record)

    # ------------------------------------------------------------------
    # construction from parsed tabular rows
    # ------------------------------------------------------------------
    @classmethod
    def from_rows(
        cls,
        source_rows: Iterable[Mapping[str, Any]],
        destination_rows: Iterable[Mapping[str, Any]],
    ) -> "Catalog":
        grouped: dict[MasterCategory, list[SourceGroup]] = {}
        seen: dict[MasterCategory, set[str]] = {}
        for raw in source_rows:
            raw_type = clean_text(raw.get("type"))
            number = clean_number(raw.get("number"))
            if not raw_type or not number:
                continue
            # Header rows repeated inside the sheet carry the type as the number.
            if number.upper() == raw_type.upper():
                continue

            category = classify(raw_type, "")
            if number in seen.setdefault(category, set()):
                logger.warning("duplicate source row %s in %s ignored", number, category.value)
                continue
            seen[category].add(number)

            heading = clean_text(raw.get("group")) or DEFAULT_GROUP
            groups = grouped.setdefault(category, [])
            group = next((item for item in groups if item.heading == heading), None)
            if group is None:
                group = SourceGroup(heading=heading)
                groups.append(group)
            group.rows.append(
                SourceRow(id=number, number=number, name=clean_text(raw.get("name")), group_heading=heading)
            )

        # Row indexes follow display order: group by group, row by row.
        indexed: dict[MasterCategory, list[SourceGroup]] = {}
        for category, groups in grouped.items():
            position = 0
            indexed[category] = []
            for group in groups:
                rows: list[SourceRow] = []
                for row in group.rows:
                    rows.append(
                        SourceRow(
                            id=row.id,
                            number=row.number,
                            name=row.name,
                            group_heading=row.group_heading,
                            row_index=position,
                        )
                    )
                    position += 1
                indexed[category].append(SourceGroup(heading=group.heading, rows=rows))

        destinations: list[DestinationRecord] = []
        for raw in destination_rows:
            number = clean_number(raw.get("number"))
            name = clean_text(raw.get("name"))
            if not number or not name:
                continue
            destinations.append(
                DestinationRecord(
                    id=f"d{number}",
                    number=number,
                    name=name,
                    raw_type=clean_text(raw.get("type")),
                    raw_group=clean_text(raw.get("group")),
                )
            )

        catalog = cls(indexed, destinations)
        logger.info(
            "catalog loaded: %d categories, %d source rows, %d destination accounts",
            len(indexed),
            sum(len(rows) for rows in catalog._rows.values()),
            len(catalog._destinations),
        )
        return catalog

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def categories(self) -> list[MasterCategory]:
        return list(self._groups)

    def groups(self, category: MasterCategory) -> list[SourceGroup]:
        return list(self._groups.get(category, []))

    def source_rows(self, category: MasterCategory) -> list[SourceRow]:
        return list(self._rows.get(category, {}).values())

    def find_row(self, category: MasterCategory, row_id: str) -> SourceRow:
        try:
            return self._rows[category][row_id]
        except KeyError:
            raise RowNotFound(row_id) from None

    def destinations(self, category: MasterCategory | None = None) -> list[DestinationRecord]:
        if category is None:
            return list(self._destinations)
        return [record for record in self._destinations if classify(record.raw_type, record.raw_group) is category]

    def get_destination(self, record_id: str) -> DestinationRecord:
        try:
            return self._by_id[record_id]
        except KeyError:
            raise RecordNotFound(record_id) from None

    def has_destination(self, record_id: str) -> bool:
        return record_id in self._by_id

    def subgroups(self, category: MasterCategory) -> list[str]:
        return sorted({record.raw_group for record in self.destinations(category) if record.raw_group})
