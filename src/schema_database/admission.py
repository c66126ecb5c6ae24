"""Validate-then-insert admission of candidate schemas into the store.

Each candidate is judged on its own: a rejected or unparseable candidate is
reported in the result and never prevents the remaining candidates from
being stored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from .errors import AdmissionFailure, SchemaParseError, ValidationRejected
from .loader import DEFAULT_ID_FIELD, get_schema_id
from .store import CacheRow, SchemaStore

logger = logging.getLogger(__name__)

Validator = Callable[[Any], bool]


class Candidate(NamedTuple):
    """A schema waiting for admission.

    ``document`` holds a :class:`SchemaParseError` when the source could not
    be read or parsed.
    """

    source_key: str
    mtime: float
    document: Any


@dataclass
class AdmissionResult:
    """Outcome of a batch admission.

    Attributes:
        admitted: Source keys stored, in processing order.
        failures: Candidates that were not stored.
    """

    admitted: list[str] = field(default_factory=list)
    failures: list[AdmissionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return True if every candidate was admitted."""
        return not self.failures


def _check_candidate(
    candidate: Candidate,
    validate: Validator,
) -> AdmissionFailure | None:
    """Return the failure for ``candidate``, or None if it may be stored."""
    source_key, mtime, document = candidate
    if isinstance(document, SchemaParseError):
        return AdmissionFailure(source_key, mtime, document)

    try:
        valid = validate(document)
    except Exception as exc:
        reason = ValidationRejected(source_key, f"validator raised {exc!r}")
        return AdmissionFailure(source_key, mtime, reason)

    if not valid:
        return AdmissionFailure(
            source_key,
            mtime,
            ValidationRejected(source_key),
        )
    return None


def admit(
    store: SchemaStore,
    candidates: Iterable[Candidate],
    validate: Validator,
    id_field: str = DEFAULT_ID_FIELD,
) -> AdmissionResult:
    """Validate each candidate and store the valid ones.

    Candidates are processed in input order. Rows are inserted one by one;
    there is no atomicity across rows.

    Args:
        store: Store to insert into. Its table is created on first insert.
        candidates: Candidates to admit.
        validate: Predicate deciding whether a document may be stored.
        id_field: Document field holding the identifier key.

    Returns:
        The admission result. ``result.ok`` is True when nothing failed.
    """
    result = AdmissionResult()
    for candidate in candidates:
        failure = _check_candidate(candidate, validate)
        if failure is not None:
            logger.warning("Schema not admitted: %s", failure.reason)
            result.failures.append(failure)
            continue

        row = CacheRow(
            source_key=candidate.source_key,
            id_key=get_schema_id(candidate.document, id_field),
            mtime=candidate.mtime,
            document=candidate.document,
        )
        store.insert(row)
        logger.debug("Admitted schema %s (id=%s)", row.source_key, row.id_key)
        result.admitted.append(row.source_key)
    return result
