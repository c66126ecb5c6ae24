"""Fetching and parsing of schema documents by URI scheme.

Supported schemes are ``file``, ``http`` and ``https``. Files report their
filesystem modification time. HTTP sources report the ``Last-Modified``
header, or ``0`` when the header is missing or cannot be parsed, which
makes such rows never stale.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from datetime import timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Any

import httpx

from .errors import SchemaFetchError, SchemaParseError, UnknownUriSchemeError
from .freshness import file_mtime
from .keys import FILE_PREFIX, get_scheme, path_from_source_key

logger = logging.getLogger(__name__)

DEFAULT_ID_FIELD = "id"
DEFAULT_HTTP_TIMEOUT = 30.0
HTTP_SCHEMES = ("http", "https")

Parser = Callable[[bytes], Any]


def is_document(value: Any) -> bool:
    """Return True if ``value`` is a well-formed document container (a mapping)."""
    return isinstance(value, Mapping)


def get_schema_id(document: Any, id_field: str = DEFAULT_ID_FIELD) -> str | None:
    """Return the identifier declared by ``document``, or None.

    Only string identifiers on mapping documents count.
    """
    if not isinstance(document, Mapping):
        return None
    value = document.get(id_field)
    if isinstance(value, str) and value:
        return value
    return None


def inject_identifier(
    document: Any,
    source_key: str,
    id_field: str = DEFAULT_ID_FIELD,
) -> Any:
    """Give an anonymous mapping document an identifier derived from its source.

    Documents that already declare ``id_field``, and non-mapping documents,
    are returned unchanged. Otherwise a copy carrying
    ``{id_field: source_key}`` is returned.
    """
    if not isinstance(document, Mapping) or id_field in document:
        return document
    return {id_field: source_key, **document}


def parse_http_mtime(headers: Mapping[str, str]) -> float:
    """Return the ``Last-Modified`` header as a POSIX timestamp, or 0.

    Args:
        headers: Response headers. Lookup is case-insensitive when given
            :class:`httpx.Headers`.
    """
    value = headers.get("last-modified")
    if not value:
        return 0
    try:
        modified = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        logger.debug("Ignoring unparseable Last-Modified header: %r", value)
        return 0
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=timezone.utc)
    return modified.timestamp()


def _fetch_file(source_key: str) -> tuple[float, bytes]:
    path = Path(path_from_source_key(source_key))
    body = path.read_bytes()
    return file_mtime(path), body


def _fetch_http(
    source_key: str,
    http_client: httpx.Client | None,
) -> tuple[float, bytes]:
    if http_client is None:
        with httpx.Client(
            timeout=DEFAULT_HTTP_TIMEOUT, follow_redirects=True
        ) as client:
            response = client.get(source_key)
    else:
        response = http_client.get(source_key)

    if response.status_code != 200:
        raise SchemaFetchError(source_key, response.status_code)
    return parse_http_mtime(response.headers), response.content


def fetch(
    source_key: str,
    http_client: httpx.Client | None = None,
) -> tuple[float, bytes]:
    """Fetch the raw bytes and modification time of ``source_key``.

    Args:
        source_key: Canonical source key.
        http_client: Client used for ``http``/``https`` keys. A short-lived
            client is created when omitted.

    Raises:
        UnknownUriSchemeError: For any scheme other than file, http, https.
        SchemaFetchError: When an HTTP source does not answer 200.
        OSError: When a file cannot be read.
        httpx.HTTPError: On transport failures.

    Returns:
        Tuple of (mtime, raw bytes).
    """
    if source_key.startswith(FILE_PREFIX):
        return _fetch_file(source_key)
    if get_scheme(source_key) in HTTP_SCHEMES:
        logger.debug("Fetching schema over HTTP: %s", source_key)
        return _fetch_http(source_key, http_client)
    raise UnknownUriSchemeError(source_key)


def parse_document(source_key: str, raw: bytes, parse: Parser = json.loads) -> Any:
    """Run ``parse`` on ``raw``, wrapping any failure in SchemaParseError."""
    try:
        return parse(raw)
    except Exception as exc:
        raise SchemaParseError(source_key, exc) from exc


def load_document(
    source_key: str,
    parse: Parser = json.loads,
    id_field: str = DEFAULT_ID_FIELD,
    http_client: httpx.Client | None = None,
) -> tuple[float, Any]:
    """Fetch, parse and identify the document behind ``source_key``.

    Returns:
        Tuple of (mtime, document).
    """
    mtime, raw = fetch(source_key, http_client)
    document = parse_document(source_key, raw, parse)
    return mtime, inject_identifier(document, source_key, id_field)
