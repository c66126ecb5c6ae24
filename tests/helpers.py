"""Helper functions for tests."""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx


def _write_schema(
    directory: Path,
    name: str,
    data: Any,
    mtime: float | None = None,
) -> Path:
    """Write a JSON schema file and optionally pin its modification time.

    Args:
        directory: Directory to write into (created if missing).
        name: File name, may contain subdirectories.
        data: Schema data to write as JSON.
        mtime: Modification time to set on the written file.

    Returns:
        Absolute path of the written file.
    """
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    if mtime is not None:
        _set_mtime(path, mtime)
    return path


def _set_mtime(path: Path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


def _mock_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> httpx.Client:
    """Build an httpx client that answers every request with ``handler``."""
    return httpx.Client(transport=httpx.MockTransport(handler))
