"""
Data-store module.
"""

from .base import DataStore
from .memory import InMemoryDataStore
from .sqlite import SQLiteDataStore

__all__ = [
    "DataStore",
    "InMemoryDataStore",
    "SQLiteDataStore",
]
