import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from account_mapper.application import Catalog, MappingEngine, reset_mapping_engine
from account_mapper.domain import DestinationRecord
from account_mapper.infrastructure import InMemoryKeyValueStore, PersistenceGateway


SOURCE_ROWS = [
    {"type": "Assets", "group": "Current Assets", "number": 1000.0, "name": "Cash"},
    {"type": "Assets", "group": "Current Assets", "number": 1100.0, "name": "Accounts Receivable"},
    {"type": "Assets", "group": "Fixed Assets", "number": 1500.0, "name": "Equipment"},
    {"type": "Assets", "group": "Assets", "number": "Assets", "name": "header row"},
    {"type": "Liabilities", "group": "Current Liabilities", "number": 2000, "name": "Accounts Payable"},
    {"type": "Other Rev & Exp", "group": None, "number": 8000, "name": "Interest Income"},
]

DESTINATION_ROWS = [
    {"type": "Bank", "group": "Checking", "number": 10100, "name": "Operating Account"},
    {"type": "Bank", "group": "Savings", "number": 10200, "name": "Reserve Account"},
    {"type": "Accounts Receivable", "group": "Trade", "number": 11000, "name": "Customer Invoices"},
    {"type": "Fixed Asset", "group": "Equipment", "number": 15000.0, "name": "Computers"},
    {"type": "Fixed Asset", "group": "Equipment", "number": 15100, "name": "Furniture"},
    {"type": "Accounts Payable", "group": "Trade", "number": 20000, "name": "Vendor Bills"},
    {"type": "Other Income", "group": "Finance", "number": 80100, "name": "Bank Interest"},
]


def make_record(record_id: str, name: str | None = None, raw_type: str = "Bank", raw_group: str = "") -> DestinationRecord:
    return DestinationRecord(id=record_id, number=record_id.lstrip("d"), name=name or f"Account {record_id}", raw_type=raw_type, raw_group=raw_group)


@pytest.fixture(autouse=True)
def reset_state():
    reset_mapping_engine()
    yield
    reset_mapping_engine()


@pytest.fixture()
def catalog() -> Catalog:
    return Catalog.from_rows(SOURCE_ROWS, DESTINATION_ROWS)


@pytest.fixture()
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def gateway(store) -> PersistenceGateway:
    return PersistenceGateway(store)


@pytest.fixture()
def engine(catalog, gateway) -> MappingEngine:
    return MappingEngine(catalog, gateway)
