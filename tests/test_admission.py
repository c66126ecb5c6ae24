"""Tests for batch admission."""

from __future__ import annotations

from typing import Any

from schema_database.admission import AdmissionResult, Candidate, admit
from schema_database.errors import SchemaParseError, ValidationRejected
from schema_database.loader import is_document
from schema_database.store import SchemaStore


def test_valid_candidates_are_stored_in_order() -> None:
    store = SchemaStore()
    candidates = [
        Candidate("a", 10, {"id": "urn:a"}),
        Candidate("b", 20, {"title": "no id"}),
    ]

    result = admit(store, candidates, is_document)

    assert result.ok
    assert result.admitted == ["a", "b"]
    row_a = store.lookup_by_source("a")
    row_b = store.lookup_by_source("b")
    assert row_a is not None and row_a.id_key == "urn:a" and row_a.mtime == 10
    assert row_b is not None and row_b.id_key is None


def test_rejected_candidate_does_not_abort_batch() -> None:
    """Partial success: invalid candidates are reported, the rest stored."""
    store = SchemaStore()
    candidates = [
        Candidate("bad", 5, ["not", "an", "object"]),
        Candidate("good", 6, {"id": "urn:good"}),
    ]

    result = admit(store, candidates, is_document)

    assert not result.ok
    assert result.admitted == ["good"]
    [failure] = result.failures
    assert failure.source_key == "bad"
    assert failure.mtime == 5
    assert isinstance(failure.reason, ValidationRejected)
    assert store.lookup_by_source("bad") is None
    assert store.lookup_by_source("good") is not None


def test_parse_failure_is_reported_with_its_cause() -> None:
    store = SchemaStore()
    error = SchemaParseError("file:///tmp/broken.json", ValueError("boom"))

    result = admit(store, [Candidate("file:///tmp/broken.json", 7, error)], is_document)

    [failure] = result.failures
    assert failure.reason is error
    assert not store.table_exists()


def test_raising_validator_is_treated_as_rejection() -> None:
    def validate(document: Any) -> bool:
        raise RuntimeError("validator crashed")

    store = SchemaStore()
    result = admit(store, [Candidate("a", 0, {})], validate)

    [failure] = result.failures
    assert isinstance(failure.reason, ValidationRejected)
    assert "validator crashed" in str(failure.reason)


def test_custom_id_field() -> None:
    store = SchemaStore()
    admit(store, [Candidate("a", 0, {"$id": "urn:a"})], is_document, "$id")
    assert store.lookup_by_id("urn:a") is not None


def test_empty_batch_is_ok() -> None:
    store = SchemaStore()
    result = admit(store, [], is_document)
    assert result == AdmissionResult()
    assert result.ok
    assert not store.table_exists()
