"""Directory scanning and staleness detection for file-backed schemas."""

from __future__ import annotations

import logging
import os
import sys

from .keys import FILE_PREFIX
from .store import SchemaStore

logger = logging.getLogger(__name__)


def file_mtime(path: str | os.PathLike[str]) -> float:
    """Return the modification time of a file for storage in a cache row.

    Never returns ``0``: that value marks rows that are never stale, so a
    file genuinely stamped at the epoch is stored just above it.
    """
    mtime = os.stat(path).st_mtime
    return mtime if mtime != 0 else sys.float_info.min


def list_files(root: str) -> list[str]:
    """Recursively list all regular files below ``root``.

    No filtering by extension is done. A regular file yields a one-element
    list and a missing root yields an empty list.

    Args:
        root: Directory to scan, or a single file.

    Returns:
        Sorted list of absolute file paths.
    """
    root = os.path.abspath(root)
    if os.path.isfile(root):
        return [root]
    if not os.path.isdir(root):
        logger.warning("Schema path does not exist: %s", root)
        return []

    files: list[str] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            path = os.path.join(dirpath, filename)
            if os.path.isfile(path):
                files.append(path)
    files.sort()
    return files


def is_outdated(store: SchemaStore, file_path: str) -> bool:
    """Check whether the cached row for ``file_path`` must be reloaded.

    A file that was never loaded is outdated. A row stored with mtime ``0``
    is never outdated. Otherwise the row is outdated only when the file's
    current mtime is strictly greater than the stored one.
    """
    row = store.lookup_by_source(FILE_PREFIX + file_path)
    if row is None:
        return True
    if row.mtime == 0:
        return False
    try:
        current_mtime = os.stat(file_path).st_mtime
    except OSError:
        # Removed since the scan; let the reload report it.
        return True
    return current_mtime > row.mtime


def list_outdated(store: SchemaStore, root: str) -> list[str]:
    """Return files below ``root`` whose cache entries need a refresh.

    When the store has never been populated every file is a candidate and
    freshness is not consulted.
    """
    files = list_files(root)
    if not files or not store.table_exists():
        return files
    return [path for path in files if is_outdated(store, path)]
