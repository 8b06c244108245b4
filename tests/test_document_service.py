"""Tests for DocumentService (core/document_service.py).

The :class:`DocumentStore` dependency is a :class:`FakeStore` — no
network, no google-cloud invocation.  These tests verify:

* get-by-id, including not-found and exception mapping
* the iteration bound for ``documents`` and ``where``
* that every opened stream is closed exactly once on every exit path
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from conftest import FakeStore, make_documents
from firestore_cli.core.document_service import OPERATION_TIMEOUT, DocumentService
from firestore_cli.core.models import IterationBound, QueryPredicate
from firestore_cli.exceptions import (
    NotFoundError,
    SerializationError,
    TimeoutError,
    TransportError,
    ValidationError,
)


class _Collector:
    """Render callable that records every document it receives."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.documents: list[dict[str, Any]] = []
        self._fail_on = fail_on

    def __call__(self, document: dict[str, Any]) -> None:
        if self._fail_on is not None and len(self.documents) == self._fail_on:
            raise SerializationError("unable to marshal document to json: boom")
        self.documents.append(document)


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------

class TestGet:
    def test_returns_field_map(self, fake_store: FakeStore) -> None:
        svc = DocumentService(fake_store, "users")
        assert svc.get("alice") == {"name": "alice", "age": 30, "tags": ["admin"]}

    def test_scoped_to_collection_with_timeout(self, fake_store: FakeStore) -> None:
        DocumentService(fake_store, "users").get("bob")
        assert fake_store.get_calls == [("users", "bob", OPERATION_TIMEOUT)]

    def test_missing_document_raises_not_found(self, fake_store: FakeStore) -> None:
        svc = DocumentService(fake_store, "users")
        with pytest.raises(NotFoundError, match="'nobody' not found"):
            svc.get("nobody")

    def test_empty_id_rejected_before_store_call(self, fake_store: FakeStore) -> None:
        svc = DocumentService(fake_store, "users")
        with pytest.raises(ValidationError):
            svc.get("")
        assert fake_store.get_calls == []

    def test_domain_error_propagates_unchanged(self) -> None:
        original = TimeoutError("unable to get document: deadline exceeded")
        svc = DocumentService(FakeStore(get_error=original), "users")
        with pytest.raises(TimeoutError) as exc_info:
            svc.get("alice")
        assert exc_info.value is original

    def test_unexpected_error_wrapped(self) -> None:
        original = RuntimeError("socket closed")
        svc = DocumentService(FakeStore(get_error=original), "users")
        with pytest.raises(TransportError, match="unable to get document") as exc_info:
            svc.get("alice")
        assert exc_info.value.__cause__ is original


# ---------------------------------------------------------------------------
# documents: iteration bound
# ---------------------------------------------------------------------------

class TestDocumentsBound:
    @pytest.mark.parametrize("size", [0, 1, 7, 250])
    def test_unlimited_renders_whole_collection(self, size: int) -> None:
        store = FakeStore(make_documents(size))
        render = _Collector()
        count = DocumentService(store, "c").documents(
            IterationBound(limit=1, unlimited=True), render,
        )
        assert count == size
        assert len(render.documents) == size

    @pytest.mark.parametrize("limit", [1, 3, 9])
    def test_limit_renders_exactly_limit(self, limit: int) -> None:
        store = FakeStore(make_documents(10))
        render = _Collector()
        count = DocumentService(store, "c").documents(IterationBound(limit=limit), render)
        assert count == limit
        assert [d["index"] for d in render.documents] == list(range(limit))

    def test_limit_does_not_read_past_bound(self) -> None:
        store = FakeStore(make_documents(10))
        DocumentService(store, "c").documents(IterationBound(limit=4), _Collector())
        assert store.streams[0].consumed == 4

    def test_limit_larger_than_collection(self) -> None:
        store = FakeStore(make_documents(3))
        count = DocumentService(store, "c").documents(IterationBound(limit=100), _Collector())
        assert count == 3

    def test_default_bound_is_one_hundred(self) -> None:
        store = FakeStore(make_documents(150))
        count = DocumentService(store, "c").documents(IterationBound(), _Collector())
        assert count == 100

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_rejected_without_opening_stream(self, limit: int) -> None:
        store = FakeStore(make_documents(3))
        with pytest.raises(ValidationError, match="positive"):
            DocumentService(store, "c").documents(IterationBound(limit=limit), _Collector())
        assert store.streams == []

    def test_non_positive_limit_ignored_when_unlimited(self) -> None:
        store = FakeStore(make_documents(3))
        count = DocumentService(store, "c").documents(
            IterationBound(limit=0, unlimited=True), _Collector(),
        )
        assert count == 3


# ---------------------------------------------------------------------------
# where
# ---------------------------------------------------------------------------

class TestWhere:
    def test_predicate_forwarded_to_store(self, fake_store: FakeStore) -> None:
        predicate = QueryPredicate(field="age", operator=">=", value=30)
        render = _Collector()
        count = DocumentService(fake_store, "users").where(
            predicate, IterationBound(), render,
        )
        assert fake_store.stream_calls == [("users", predicate, OPERATION_TIMEOUT)]
        assert count == 2
        assert {d["name"] for d in render.documents} == {"alice", "carol"}

    def test_same_bound_policy_as_documents(self) -> None:
        store = FakeStore(make_documents(20))
        predicate = QueryPredicate(field="index", operator=">=", value=5)
        count = DocumentService(store, "c").where(predicate, IterationBound(limit=2), _Collector())
        assert count == 2

    def test_no_match_renders_nothing(self, fake_store: FakeStore) -> None:
        predicate = QueryPredicate(field="age", operator="==", value=99)
        render = _Collector()
        assert DocumentService(fake_store, "users").where(
            predicate, IterationBound(), render,
        ) == 0
        assert render.documents == []


# ---------------------------------------------------------------------------
# Stream lifecycle
# ---------------------------------------------------------------------------

class TestStreamClosed:
    def test_closed_once_when_exhausted(self) -> None:
        store = FakeStore(make_documents(3))
        DocumentService(store, "c").documents(IterationBound(unlimited=True), _Collector())
        assert store.streams[0].close_calls == 1

    def test_closed_once_when_bound_reached(self) -> None:
        store = FakeStore(make_documents(10))
        DocumentService(store, "c").documents(IterationBound(limit=2), _Collector())
        assert store.streams[0].close_calls == 1

    def test_closed_once_on_empty_collection(self) -> None:
        store = FakeStore()
        DocumentService(store, "c").documents(IterationBound(), _Collector())
        assert store.streams[0].close_calls == 1

    def test_closed_once_when_render_fails(self) -> None:
        store = FakeStore(make_documents(5))
        render = _Collector(fail_on=2)
        with pytest.raises(SerializationError):
            DocumentService(store, "c").documents(IterationBound(), render)
        assert len(render.documents) == 2
        assert store.streams[0].close_calls == 1

    def test_closed_once_when_output_pipe_closes(self) -> None:
        store = FakeStore(make_documents(5))

        def _render(document: dict[str, Any]) -> None:
            raise BrokenPipeError(32, "Broken pipe")

        with pytest.raises(BrokenPipeError):
            DocumentService(store, "c").documents(IterationBound(unlimited=True), _render)
        assert store.streams[0].consumed == 1
        assert store.streams[0].close_calls == 1

    def test_closed_once_when_stream_fails(self) -> None:
        store = FakeStore(make_documents(5), stream_error=RuntimeError("reset"), fail_at=3)
        render = _Collector()
        with pytest.raises(TransportError, match="unable to iterate documents"):
            DocumentService(store, "c").documents(IterationBound(), render)
        assert len(render.documents) == 3
        assert store.streams[0].close_calls == 1

    def test_domain_stream_error_propagates_unchanged(self) -> None:
        original = TimeoutError("unable to iterate documents: deadline")
        store = FakeStore(make_documents(2), stream_error=original)
        with pytest.raises(TimeoutError) as exc_info:
            DocumentService(store, "c").documents(IterationBound(), _Collector())
        assert exc_info.value is original
        assert store.streams[0].close_calls == 1

    def test_closed_once_when_interrupted(self) -> None:
        store = FakeStore(make_documents(5), stream_error=KeyboardInterrupt(), fail_at=1)
        with pytest.raises(KeyboardInterrupt):
            DocumentService(store, "c").documents(IterationBound(), _Collector())
        assert store.streams[0].close_calls == 1

    def test_where_closes_stream(self, fake_store: FakeStore) -> None:
        predicate = QueryPredicate(field="age", operator="<", value=100)
        DocumentService(fake_store, "users").where(predicate, IterationBound(limit=1), _Collector())
        assert fake_store.streams[0].close_calls == 1

    def test_open_failure_wrapped(self) -> None:
        store = MagicMock()
        store.stream_documents.side_effect = RuntimeError("no channel")
        with pytest.raises(TransportError, match="unable to query documents"):
            DocumentService(store, "c").documents(IterationBound(), _Collector())
