"""Match store implementations."""

from .base import MatchRecord, MatchStore
from .sqlite_store import SQLiteMatchStore

__all__ = ["MatchRecord", "MatchStore", "SQLiteMatchStore"]
