"""
CourseGate Store - Remote table store contract and implementations.

This module provides:
- RemoteStore: async contract the core runs against
- InMemoryStore: process-local store for tests and previews
- SqliteStore: single-file store for local deployments
"""

from .base import (
    RemoteStore,
    Table,
    TABLE_KEYS,
)

from .memory import InMemoryStore

from .sqlite import SqliteStore

__all__ = [
    "RemoteStore",
    "Table",
    "TABLE_KEYS",
    "InMemoryStore",
    "SqliteStore",
]
