"""Shared pytest fixtures and configuration for the firestore-cli test suite.

Guidelines
----------
* No internet access and no Google credentials in any test.
* google-cloud-firestore is replaced at the ``DocumentStore`` protocol
  boundary by :class:`FakeStore`.
* Core tests must be pure — no side effects.
* Tests must not depend on OS state: every test runs from an empty
  temporary working/home directory with the tool's variables unset.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from firestore_cli.core.models import QueryPredicate

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


# ---------------------------------------------------------------------------
# Fake store collaborator
# ---------------------------------------------------------------------------

class FakeStream:
    """Iterator over documents that counts ``close()`` calls.

    When *error* is given it is raised instead of yielding the document
    at index *fail_at*.
    """

    def __init__(
        self,
        documents: list[dict[str, Any]],
        *,
        error: BaseException | None = None,
        fail_at: int = 0,
    ) -> None:
        self._documents = list(documents)
        self._error = error
        self._fail_at = fail_at
        self.consumed = 0
        self.close_calls = 0

    def __iter__(self) -> FakeStream:
        return self

    def __next__(self) -> dict[str, Any]:
        if self._error is not None and self.consumed == self._fail_at:
            raise self._error
        if self.consumed >= len(self._documents):
            raise StopIteration
        document = self._documents[self.consumed]
        self.consumed += 1
        return document

    def close(self) -> None:
        self.close_calls += 1


class FakeStore:
    """In-memory :class:`~firestore_cli.core.protocols.DocumentStore`."""

    def __init__(
        self,
        documents: dict[str, dict[str, Any]] | None = None,
        *,
        get_error: Exception | None = None,
        stream_error: BaseException | None = None,
        fail_at: int = 0,
    ) -> None:
        self.documents: dict[str, dict[str, Any]] = dict(documents or {})
        self.get_error = get_error
        self.stream_error = stream_error
        self.fail_at = fail_at
        self.get_calls: list[tuple[str, str, float]] = []
        self.stream_calls: list[tuple[str, QueryPredicate | None, float]] = []
        self.streams: list[FakeStream] = []

    def get_document(
        self,
        collection: str,
        document_id: str,
        *,
        timeout: float,
    ) -> dict[str, Any] | None:
        self.get_calls.append((collection, document_id, timeout))
        if self.get_error is not None:
            raise self.get_error
        document = self.documents.get(document_id)
        return dict(document) if document is not None else None

    def stream_documents(
        self,
        collection: str,
        predicate: QueryPredicate | None = None,
        *,
        timeout: float,
    ) -> FakeStream:
        self.stream_calls.append((collection, predicate, timeout))
        matches = [
            dict(document)
            for document in self.documents.values()
            if predicate is None or _matches(document, predicate)
        ]
        stream = FakeStream(matches, error=self.stream_error, fail_at=self.fail_at)
        self.streams.append(stream)
        return stream


def _matches(document: dict[str, Any], predicate: QueryPredicate) -> bool:
    if predicate.field not in document:
        return False
    compare = _COMPARATORS[predicate.operator]
    try:
        return compare(document[predicate.field], predicate.value)
    except TypeError:
        return False


def make_documents(count: int) -> dict[str, dict[str, Any]]:
    """Return *count* small documents keyed ``doc-0`` … ``doc-N``."""
    return {
        f"doc-{index}": {"index": index, "name": f"user {index}"}
        for index in range(count)
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
) -> Path:
    """Run every test from an empty cwd/home with tool variables unset."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.chdir(work)
    for name in (
        "FIRESTORE_CLI_PROJECT",
        "FIRESTORE_CLI_COLLECTION",
        "FIRESTORE_EMULATOR_HOST",
    ):
        monkeypatch.delenv(name, raising=False)
    return work


@pytest.fixture()
def work_dir(_isolated_environment: Path) -> Path:
    """The temporary working directory of the current test."""
    return _isolated_environment


@pytest.fixture()
def home_dir(work_dir: Path) -> Path:
    """The temporary home directory of the current test."""
    return work_dir.parent / "home"


@pytest.fixture()
def config_file(work_dir: Path) -> Path:
    """A ``firestore-cli.yaml`` in the working directory."""
    path = work_dir / "firestore-cli.yaml"
    path.write_text("project: demo-project\ncollection: users\n", encoding="utf-8")
    return path


@pytest.fixture()
def fake_store() -> FakeStore:
    """A store holding three user documents."""
    return FakeStore(
        {
            "alice": {"name": "alice", "age": 30, "tags": ["admin"]},
            "bob": {"name": "bob", "age": 25, "tags": []},
            "carol": {"name": "carol", "age": 41, "address": {"city": "Oslo"}},
        }
    )
