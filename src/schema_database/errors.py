"""Custom exception types used by schema_database."""

from __future__ import annotations

from dataclasses import dataclass


class SchemaDatabaseError(Exception):
    """Base class for all errors raised by the schema database.

    Attributes:
        key: The (canonical) key the failing operation was working on.
    """

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or key)


class SchemaNotFoundError(SchemaDatabaseError):
    """Raised when neither a source key nor an identifier key matches."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Schema not found: {key}")


class UnknownUriSchemeError(SchemaDatabaseError):
    """Raised when a URI uses a scheme other than file, http or https."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f"Unknown URI scheme: {key}")


class SchemaFetchError(SchemaDatabaseError):
    """Raised when an HTTP source answers with anything but 200 OK.

    Attributes:
        status_code: HTTP status code of the response.
    """

    def __init__(self, key: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(key, f"Failed to fetch {key}: HTTP {status_code}")


class SchemaParseError(SchemaDatabaseError):
    """Raised (or recorded) when a raw document cannot be read or parsed.

    During a directory refresh this error is not raised. It is stored as the
    candidate document and later reported as the reason of an
    :class:`AdmissionFailure`, so one broken file does not block the others.

    Attributes:
        cause: The exception raised by the parser or by the file read.
    """

    def __init__(self, key: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(key, f"Failed to parse schema {key}: {cause}")


class ValidationRejected(SchemaDatabaseError):
    """Reason recorded when the validation function refuses a document."""

    def __init__(self, key: str, detail: str | None = None) -> None:
        message = f"Schema rejected by validation: {key}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(key, message)


@dataclass(frozen=True)
class AdmissionFailure:
    """Describes a single candidate that was not admitted into the store.

    Attributes:
        source_key: Source key of the rejected candidate.
        mtime: Modification time the candidate was loaded with.
        reason: Why it was rejected. Either :class:`SchemaParseError` or
            :class:`ValidationRejected`.
    """

    source_key: str
    mtime: float
    reason: SchemaDatabaseError
