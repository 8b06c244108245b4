"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol

from firestore_cli.core.models import QueryPredicate


class DocumentStore(Protocol):
    """Contract for document-store backends scoped to one project.

    Any object that implements :meth:`get_document` and
    :meth:`stream_documents` with the correct signatures satisfies this
    protocol structurally (no explicit inheritance required).
    """

    def get_document(
        self,
        collection: str,
        document_id: str,
        *,
        timeout: float,
    ) -> dict[str, Any] | None:
        """Fetch one document's field map, or ``None`` if it does not exist.

        Implementations must map all backend-specific exceptions to
        :class:`~firestore_cli.exceptions.FirestoreCliError` subclasses.

        Raises
        ------
        TimeoutError
            When the call exceeds *timeout* seconds.
        TransportError
            For any other backend failure.
        """
        ...  # pragma: no cover

    def stream_documents(
        self,
        collection: str,
        predicate: QueryPredicate | None = None,
        *,
        timeout: float,
    ) -> Iterator[dict[str, Any]]:
        """Open a lazy stream over the collection, optionally filtered.

        The returned iterator must support ``close()`` so callers can
        release the underlying cursor on early exit.  A generator
        function satisfies this.

        Raises
        ------
        TimeoutError
            When opening or advancing the stream exceeds *timeout*.
        TransportError
            For any other backend failure.
        """
        ...  # pragma: no cover
