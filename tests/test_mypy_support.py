"""Tests for mypy type checking support."""

from __future__ import annotations

import subprocess  # nosec B404
import sys
from pathlib import Path

_PACKAGE_DIR = Path(__file__).parent.parent / "src" / "schema_database"


def test_py_typed_file_exists() -> None:
    """Verify that py.typed marker file exists in the package."""
    py_typed = _PACKAGE_DIR / "py.typed"

    assert py_typed.exists(), "py.typed marker file must exist for mypy support"


def test_mypy_type_checking() -> None:
    """Verify that mypy can type-check the package without errors."""
    result = subprocess.run(  # nosec B603
        [
            sys.executable,
            "-m",
            "mypy",
            str(_PACKAGE_DIR),
            "--no-error-summary",
        ],
        capture_output=True,
        text=True,
        cwd=Path(__file__).parent.parent,
    )

    assert (
        result.returncode == 0
    ), f"mypy found type errors:\n{result.stdout}\n{result.stderr}"


def test_mypy_strict_type_checking() -> None:
    """Verify that mypy can type-check the package in strict mode without errors."""
    result = subprocess.run(  # nosec B603
        [
            sys.executable,
            "-m",
            "mypy",
            str(_PACKAGE_DIR),
            "--strict",
            "--no-error-summary",
        ],
        capture_output=True,
        text=True,
        cwd=Path(__file__).parent.parent,
    )

    assert (
        result.returncode == 0
    ), f"mypy strict mode found type errors:\n{result.stdout}\n{result.stderr}"
