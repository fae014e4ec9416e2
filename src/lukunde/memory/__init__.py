"""Persistence layer for Lukunde."""

from .persister import SheetPersister
from .serialization import Theme, dump_sheets, load_sheets, parse_theme
from .store import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore

__all__ = [
    "SheetPersister",
    "Theme",
    "dump_sheets",
    "load_sheets",
    "parse_theme",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
]
