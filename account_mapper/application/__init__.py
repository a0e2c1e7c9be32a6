"""Application services."""

from .catalog import Catalog
from .engine import (
    MappingEngine,
    build_engine,
    configure_mapping_engine,
    get_mapping_engine,
    reset_mapping_engine,
)

__all__ = [
    "Catalog",
    "MappingEngine",
    "build_engine",
    "configure_mapping_engine",
    "get_mapping_engine",
    "reset_mapping_engine",
]
