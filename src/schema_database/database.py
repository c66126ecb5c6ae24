"""Public operations of the schema database.

:class:`SchemaDatabase` owns one :class:`SchemaStore` and exposes the
add/load/delete operations on it. Module-level functions with the same
names operate on a process-wide default database that is created lazily on
first use.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from types import TracebackType
from typing import Any

import httpx

from .admission import AdmissionResult, Candidate, Validator, admit
from .errors import SchemaNotFoundError, SchemaParseError
from .freshness import file_mtime, list_outdated
from .keys import (
    FILE_SCHEME,
    canonicalize,
    file_source_key,
    get_scheme,
    path_from_source_key,
)
from .loader import (
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_ID_FIELD,
    HTTP_SCHEMES,
    Parser,
    inject_identifier,
    is_document,
    load_document,
    parse_document,
)
from .store import CacheRow, SchemaStore

logger = logging.getLogger(__name__)


class SchemaDatabase:
    """Cache of schema documents addressable by source key or identifier.

    Example:
        >>> db = SchemaDatabase()
        >>> db.add("person", {"id": "urn:person", "type": "object"}).ok
        True
        >>> db.load("urn:person") == db.load("person")
        True
    """

    def __init__(
        self,
        *,
        id_field: str = DEFAULT_ID_FIELD,
        http_timeout: float = DEFAULT_HTTP_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialise an empty database.

        Args:
            id_field: Document field holding the identifier key.
            http_timeout: Timeout in seconds for HTTP fetches made with the
                database's own client.
            http_client: Client to use for HTTP fetches. When given, the
                caller keeps ownership and :meth:`close` leaves it open.
        """
        self.id_field = id_field
        self.http_timeout = http_timeout
        self.store = SchemaStore()
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._client_lock = threading.Lock()

    def _get_http_client(self) -> httpx.Client:
        with self._client_lock:
            if self._http_client is None:
                self._http_client = httpx.Client(
                    timeout=self.http_timeout, follow_redirects=True
                )
            return self._http_client

    def close(self) -> None:
        """Close the HTTP client if this database created it."""
        with self._client_lock:
            if self._owns_http_client and self._http_client is not None:
                self._http_client.close()
                self._http_client = None

    def __enter__(self) -> SchemaDatabase:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def add(
        self,
        key: str,
        document: Any,
        validate: Validator = is_document,
    ) -> AdmissionResult:
        """Store ``document`` under ``key``, replacing any previous row.

        Rows added this way have mtime ``0``: a directory refresh never
        replaces them. Call :meth:`add` again to update them.
        """
        source_key = canonicalize(key)
        candidates = [Candidate(source_key, 0, document)]
        return admit(self.store, candidates, validate, self.id_field)

    def add_uri(self, key: str) -> AdmissionResult:
        """Fetch the JSON schema at ``key`` and store it.

        Supported schemes are ``file``, ``http`` and ``https``. The document
        is always fetched again, regardless of what is cached.

        Raises:
            UnknownUriSchemeError: For any other scheme.
            SchemaFetchError: When an HTTP source does not answer 200.
            SchemaParseError: When the body is not valid JSON.
            OSError: When a file cannot be read.
            httpx.HTTPError: On transport failures.
        """
        source_key = canonicalize(key)
        http_client = None
        if get_scheme(source_key) in HTTP_SCHEMES:
            http_client = self._get_http_client()
        mtime, document = load_document(
            source_key,
            json.loads,
            self.id_field,
            http_client,
        )
        candidates = [Candidate(source_key, mtime, document)]
        return admit(self.store, candidates, is_document, self.id_field)

    def add_path(
        self,
        path: str | os.PathLike[str],
        parse: Parser = json.loads,
        validate: Validator = is_document,
    ) -> AdmissionResult:
        """Load every outdated schema file below ``path``.

        Files whose cached row is at least as new as the file itself are
        skipped. Read, parse and validation problems of single files are
        reported in the result instead of being raised.

        Args:
            path: Directory to scan recursively, or a single file. Bare
                paths and ``file://`` URIs are accepted.
            parse: Turns the raw file content into a document.
            validate: Predicate deciding whether a document may be stored.
        """
        root = path_from_source_key(canonicalize(os.fspath(path), FILE_SCHEME))
        candidates = [
            self._read_candidate(file, parse)
            for file in list_outdated(self.store, root)
        ]
        logger.debug("Refreshing %d schema file(s) below %s", len(candidates), root)
        return admit(self.store, candidates, validate, self.id_field)

    def _read_candidate(self, file: str, parse: Parser) -> Candidate:
        source_key = file_source_key(file)
        try:
            # Stat before reading so a concurrent write is picked up next time.
            mtime = file_mtime(file)
            with open(file, "rb") as f:
                raw = f.read()
        except OSError as exc:
            return Candidate(source_key, 0, SchemaParseError(source_key, exc))

        try:
            document = parse_document(source_key, raw, parse)
        except SchemaParseError as exc:
            return Candidate(source_key, mtime, exc)
        document = inject_identifier(document, source_key, self.id_field)
        return Candidate(source_key, mtime, document)

    def load(self, key: str) -> Any:
        """Return the schema stored under ``key``.

        ``key`` is matched first as a source key, then as an identifier key.

        Raises:
            SchemaNotFoundError: If neither matches.
        """
        canonical_key = canonicalize(key)
        row = self.store.lookup_by_source(canonical_key)
        if row is None:
            row = self.store.lookup_by_id(canonical_key)
        if row is None:
            raise SchemaNotFoundError(canonical_key)
        return row.document

    def load_uri(self, key: str) -> Any:
        """Return the schema for ``key``, fetching it once if not cached.

        Only :class:`SchemaNotFoundError` triggers the fetch; everything
        else, including a second miss after the fetch, propagates.
        """
        try:
            return self.load(key)
        except SchemaNotFoundError:
            logger.debug("Schema %s not cached, fetching", key)
        self.add_uri(key)
        return self.load(key)

    def load_all(self) -> list[CacheRow]:
        """Return every stored row, in no particular order."""
        return self.store.list_all()

    def delete(self, key: str) -> None:
        """Remove rows whose source key or identifier key equals ``key``."""
        canonical_key = canonicalize(key)
        removed = self.store.delete_by_source(canonical_key)
        removed += self.store.delete_by_id(canonical_key)
        logger.debug("Deleted %d row(s) for %s", removed, canonical_key)

    def clear(self) -> None:
        """Remove every row."""
        self.store.clear()


# Process-wide default database, created on first use. Double-checked
# locking guarantees a single instance under concurrent first use.
_default_database: SchemaDatabase | None = None
_default_database_lock = threading.Lock()


def get_default_database() -> SchemaDatabase:
    """Return the process-wide database, creating it if needed."""
    global _default_database

    database = _default_database
    if database is not None:
        return database
    with _default_database_lock:
        database = _default_database
        if database is None:
            database = _default_database = SchemaDatabase()
        return database


def reset_default_database() -> None:
    """Close and forget the process-wide database.

    The next module-level call creates a fresh, empty one.
    """
    global _default_database

    with _default_database_lock:
        if _default_database is not None:
            _default_database.close()
        _default_database = None


def add(key: str, document: Any, validate: Validator = is_document) -> AdmissionResult:
    """Store ``document`` in the default database. See :meth:`SchemaDatabase.add`."""
    return get_default_database().add(key, document, validate)


def add_uri(key: str) -> AdmissionResult:
    """Fetch and store ``key`` in the default database."""
    return get_default_database().add_uri(key)


def add_path(
    path: str | os.PathLike[str],
    parse: Parser = json.loads,
    validate: Validator = is_document,
) -> AdmissionResult:
    """Refresh schema files below ``path`` in the default database."""
    return get_default_database().add_path(path, parse, validate)


def load(key: str) -> Any:
    """Return the schema stored under ``key`` in the default database."""
    return get_default_database().load(key)


def load_uri(key: str) -> Any:
    """Like :func:`load`, but fetch ``key`` once on a miss."""
    return get_default_database().load_uri(key)


def load_all() -> list[CacheRow]:
    """Return every row of the default database."""
    return get_default_database().load_all()


def delete(key: str) -> None:
    """Remove rows matching ``key`` from the default database."""
    get_default_database().delete(key)
