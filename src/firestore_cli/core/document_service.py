"""Core document service: the three read operations.

This is the central service class consumed by the CLI layer.  It
depends on a :class:`~firestore_cli.core.protocols.DocumentStore`
injected at construction time (dependency inversion), keeping the core
free of any google-cloud imports.

Guarantees
----------
* Pure orchestration — no ``print()``; rendering is delegated to the
  *render* callable supplied by the caller.
* Only :class:`~firestore_cli.exceptions.FirestoreCliError` subclasses
  escape.
* Every stream opened here is closed exactly once, whether it is
  exhausted, cut short by the iteration bound, or aborted by an error.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import closing
from typing import Any

from firestore_cli.core.models import IterationBound, QueryPredicate
from firestore_cli.core.protocols import DocumentStore
from firestore_cli.exceptions import (
    FirestoreCliError,
    NotFoundError,
    TransportError,
    ValidationError,
)

OPERATION_TIMEOUT: float = 5.0
"""Seconds allowed for each store call."""

Renderer = Callable[[dict[str, Any]], None]


def require_document_id(document_id: str) -> str:
    """Return *document_id*, or raise :class:`ValidationError` when blank."""
    if not document_id.strip():
        raise ValidationError("document id must not be empty")
    return document_id


class DocumentService:
    """Stateless service running get/list/query against one collection.

    Parameters
    ----------
    store:
        Any object satisfying the :class:`DocumentStore` protocol.
    collection:
        Collection path every operation is scoped to.
    timeout:
        Per-call time budget in seconds.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        *,
        timeout: float = OPERATION_TIMEOUT,
    ) -> None:
        self._store: DocumentStore = store
        self._collection: str = collection
        self._timeout: float = timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, document_id: str) -> dict[str, Any]:
        """Return the field map of the document with *document_id*.

        Raises
        ------
        ValidationError
            If *document_id* is empty.
        NotFoundError
            If no such document exists.
        TimeoutError
            If the fetch exceeds the time budget.
        TransportError
            For any other store failure.
        """
        require_document_id(document_id)
        try:
            data = self._store.get_document(
                self._collection, document_id, timeout=self._timeout,
            )
        except FirestoreCliError:
            # Already typed, propagate unchanged.
            raise
        except Exception as exc:
            raise TransportError(f"unable to get document: {exc}") from exc

        if data is None:
            raise NotFoundError(
                f"unable to get document: {document_id!r} not found "
                f"in collection {self._collection!r}",
            )
        return data

    def documents(self, bound: IterationBound, render: Renderer) -> int:
        """Render every document in the collection, up to *bound*.

        Returns the number of documents rendered.
        """
        self._validate_bound(bound)
        stream = self._open(None)
        return self._drain(stream, bound, render)

    def where(
        self,
        predicate: QueryPredicate,
        bound: IterationBound,
        render: Renderer,
    ) -> int:
        """Render documents matching *predicate*, up to *bound*.

        Returns the number of documents rendered.
        """
        self._validate_bound(bound)
        stream = self._open(predicate)
        return self._drain(stream, bound, render)

    # ------------------------------------------------------------------
    # Stream handling
    # ------------------------------------------------------------------

    def _open(self, predicate: QueryPredicate | None) -> Iterator[dict[str, Any]]:
        try:
            return self._store.stream_documents(
                self._collection, predicate, timeout=self._timeout,
            )
        except FirestoreCliError:
            raise
        except Exception as exc:
            raise TransportError(f"unable to query documents: {exc}") from exc

    @staticmethod
    def _validate_bound(bound: IterationBound) -> None:
        if not bound.unlimited and bound.limit < 1:
            raise ValidationError(
                f"limit must be a positive integer, got {bound.limit}",
                hint="Use --unlimited to return every document.",
            )

    def _drain(
        self,
        stream: Iterator[dict[str, Any]],
        bound: IterationBound,
        render: Renderer,
    ) -> int:
        """Feed *stream* to *render* until exhausted or *bound* is reached."""
        with closing(stream):  # type: ignore[type-var]
            count = 0
            while True:
                try:
                    document = next(stream)
                except StopIteration:
                    break
                except FirestoreCliError:
                    raise
                except Exception as exc:
                    raise TransportError(
                        f"unable to iterate documents: {exc}",
                    ) from exc

                render(document)
                count += 1
                if bound.reached(count):
                    break
        return count
