"""In-memory table of cached schema rows.

Each row is identified by its source key (where the schema was loaded
from). A second, non-unique lookup by the identifier declared inside the
schema document is supported by scanning the table.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheRow:
    """A single cached schema.

    Attributes:
        source_key: Canonical origin of the schema. Primary identity of the row.
        id_key: Identifier declared inside the document, if any.
        mtime: Modification time of the source. ``0`` means the row is never
            considered stale.
        document: The parsed schema, opaque to the cache.
    """

    source_key: str
    id_key: str | None
    mtime: float
    document: Any


class SchemaStore:
    """Thread-safe table of :class:`CacheRow` keyed by source key.

    The backing table is created lazily on first insert (or by an explicit
    :meth:`ensure_table` call). Until then :meth:`table_exists` returns
    ``False``, which the directory refresh uses to skip freshness checks on
    the very first population.
    """

    def __init__(self) -> None:
        self._table: dict[str, CacheRow] | None = None
        self._lock = threading.RLock()

    def table_exists(self) -> bool:
        """Return True once the backing table has been created."""
        return self._table is not None

    def ensure_table(self) -> dict[str, CacheRow]:
        """Create the backing table if absent and return it.

        Uses double-checked locking: the fast path reads the attribute
        without the lock, creation happens under the lock and re-checks
        so that concurrent first use still creates a single table.
        """
        table = self._table
        if table is not None:
            return table
        with self._lock:
            table = self._table
            if table is None:
                logger.debug("Creating schema table")
                table = self._table = {}
            return table

    def lookup_by_source(self, key: str) -> CacheRow | None:
        """Return the row stored under source key ``key``, or None."""
        with self._lock:
            if self._table is None:
                return None
            return self._table.get(key)

    def lookup_by_id(self, key: str) -> CacheRow | None:
        """Return the most recently admitted row whose ``id_key`` equals ``key``."""
        with self._lock:
            if self._table is None:
                return None
            # Insertion order is refreshed on every insert, so the last match
            # is the newest row.
            for row in reversed(list(self._table.values())):
                if row.id_key == key:
                    return row
            return None

    def insert(self, row: CacheRow) -> None:
        """Insert ``row``, replacing any existing row with the same source key."""
        with self._lock:
            table = self.ensure_table()
            table.pop(row.source_key, None)
            table[row.source_key] = row

    def delete_by_source(self, key: str) -> int:
        """Remove the row with source key ``key``; return the number removed."""
        with self._lock:
            if self._table is None or key not in self._table:
                return 0
            del self._table[key]
            return 1

    def delete_by_id(self, key: str) -> int:
        """Remove every row whose ``id_key`` is ``key``; return the number removed."""
        with self._lock:
            if self._table is None:
                return 0
            matching = [
                source_key
                for source_key, row in self._table.items()
                if row.id_key == key
            ]
            for source_key in matching:
                del self._table[source_key]
            return len(matching)

    def list_all(self) -> list[CacheRow]:
        """Return a snapshot of every row currently stored."""
        with self._lock:
            if self._table is None:
                return []
            return list(self._table.values())

    def clear(self) -> None:
        """Drop the table, returning the store to its never-populated state."""
        with self._lock:
            self._table = None

    def __len__(self) -> int:
        with self._lock:
            return 0 if self._table is None else len(self._table)
