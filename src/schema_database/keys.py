"""Canonical form of cache keys.

Every public operation normalises its key with :func:`canonicalize` before
touching the store, so that ``/tmp/a.json``, ``file:///tmp/./a.json`` and
``file:///tmp/a.json`` all end up as the same source key.
"""

from __future__ import annotations

import os
import re

FILE_SCHEME = "file"
FILE_PREFIX = "file://"

# Two or more letters so that Windows drive letters ("C:") are not mistaken
# for a URI scheme.
_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]+):")


def get_scheme(key: str) -> str | None:
    """Return the lower-cased URI scheme of ``key``, or None for bare keys."""
    match = _SCHEME_RE.match(key)
    if match is None:
        return None
    return match.group(1).lower()


def file_source_key(path: str | os.PathLike[str]) -> str:
    """Build the source key of a file from a filesystem path."""
    return FILE_PREFIX + os.path.abspath(os.fspath(path))


def path_from_source_key(key: str) -> str:
    """Return the filesystem path of a ``file://`` source key.

    Raises:
        ValueError: If ``key`` is not a ``file://`` key.
    """
    if not key.startswith(FILE_PREFIX):
        raise ValueError(f"Not a file source key: {key}")
    return key[len(FILE_PREFIX) :]


def canonicalize(raw_key: str, default_scheme: str | None = None) -> str:
    """Normalise ``raw_key`` into a canonical source key.

    - ``file://`` keys get an absolute, normalised path.
    - Keys with any other scheme (``http``, ``https``, ``ftp``...) are kept
      verbatim.
    - Bare keys become ``file://`` keys when ``default_scheme`` is
      ``"file"`` and are otherwise kept verbatim as opaque keys.

    Args:
        raw_key: Key or path supplied by the caller.
        default_scheme: Scheme to assume for bare keys.

    Raises:
        ValueError: If ``raw_key`` is empty.

    Returns:
        The canonical key.
    """
    if not raw_key:
        raise ValueError("Schema key cannot be empty")

    if raw_key.startswith(FILE_PREFIX):
        return file_source_key(path_from_source_key(raw_key))

    if get_scheme(raw_key) is not None:
        return raw_key

    if default_scheme == FILE_SCHEME:
        return file_source_key(raw_key)

    return raw_key
