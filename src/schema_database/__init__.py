"""Top-level package for schema_database.

This package provides an in-memory cache of schema documents that can be
looked up by the URI they were loaded from or by the identifier they
declare. File-backed schemas are refreshed from disk only when the file's
modification time has advanced.
"""

from __future__ import annotations

from .admission import AdmissionResult, Candidate
from .database import (
    SchemaDatabase,
    add,
    add_path,
    add_uri,
    delete,
    get_default_database,
    load,
    load_all,
    load_uri,
    reset_default_database,
)
from .errors import (
    AdmissionFailure,
    SchemaDatabaseError,
    SchemaFetchError,
    SchemaNotFoundError,
    SchemaParseError,
    UnknownUriSchemeError,
    ValidationRejected,
)
from .loader import is_document
from .store import CacheRow

__all__ = [
    "AdmissionFailure",
    "AdmissionResult",
    "CacheRow",
    "Candidate",
    "SchemaDatabase",
    "SchemaDatabaseError",
    "SchemaFetchError",
    "SchemaNotFoundError",
    "SchemaParseError",
    "UnknownUriSchemeError",
    "ValidationRejected",
    "add",
    "add_path",
    "add_uri",
    "delete",
    "get_default_database",
    "is_document",
    "load",
    "load_all",
    "load_uri",
    "reset_default_database",
]
