"""google-cloud-firestore backed implementation of :class:`~firestore_cli.core.protocols.DocumentStore`.

This module is the **only** place in the codebase that imports
``google.cloud.firestore``.  All google-cloud exceptions are caught here
and re-raised as typed :class:`~firestore_cli.exceptions.FirestoreCliError`
subclasses — nothing raw escapes the infrastructure boundary.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import closing
from typing import Any

from firestore_cli.core.models import QueryPredicate
from firestore_cli.exceptions import (
    ConnectionError,
    EnvironmentError,
    FirestoreCliError,
    NotFoundError,
    TimeoutError,
    TransportError,
    ValidationError,
    append_credentials_suggestion,
)


def _load_firestore() -> Any:
    """Return the ``google.cloud.firestore`` module or raise ``EnvironmentError``."""
    try:
        import google.cloud.firestore as firestore
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "google-cloud-firestore is not installed. "
            "Install with: pip install google-cloud-firestore",
        ) from exc
    return firestore


def _map_error(exc: Exception, context: str) -> FirestoreCliError:
    """Translate a google-cloud exception into a domain exception."""
    try:
        from google.api_core import exceptions as api_exceptions
    except ModuleNotFoundError:
        return TransportError(f"{context}: {exc}")

    if isinstance(exc, (api_exceptions.DeadlineExceeded, api_exceptions.RetryError)):
        return TimeoutError(
            f"{context}: {exc}",
            hint="The store did not answer in time; check your network or emulator.",
        )
    if isinstance(exc, api_exceptions.NotFound):
        return NotFoundError(f"{context}: {exc}")
    if isinstance(exc, (api_exceptions.PermissionDenied, api_exceptions.Unauthenticated)):
        return TransportError(
            f"{context}: {exc}",
            hint=append_credentials_suggestion(
                "Check that your account can read this project.",
            ),
        )
    return TransportError(f"{context}: {exc}")


class FirestoreDocumentStore:
    """Concrete :class:`DocumentStore` backed by ``google.cloud.firestore.Client``.

    Usage::

        store = FirestoreDocumentStore.connect("my-project")
        data = store.get_document("users", "alice", timeout=5.0)

    This class satisfies the :class:`~firestore_cli.core.protocols.DocumentStore`
    protocol structurally — no explicit inheritance required.
    """

    def __init__(self, client: Any, *, module: Any | None = None) -> None:
        self._client: Any = client
        self._firestore: Any = module if module is not None else _load_firestore()

    # ------------------------------------------------------------------
    # Client factory
    # ------------------------------------------------------------------

    @classmethod
    def connect(cls, project: str) -> FirestoreDocumentStore:
        """Create a client for *project*.

        Honours ``FIRESTORE_EMULATOR_HOST`` through the client library
        itself; nothing here changes in emulator mode.

        Raises
        ------
        EnvironmentError
            When google-cloud-firestore is not installed.
        ConnectionError
            When the client cannot be constructed (e.g. no credentials).
        """
        firestore = _load_firestore()
        try:
            client = firestore.Client(project=project)
        except Exception as exc:
            raise ConnectionError(
                f"unable to create firestore client: {exc}",
                hint=append_credentials_suggestion(
                    "Application Default Credentials could not be resolved.",
                ),
            ) from exc
        return cls(client, module=firestore)

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def get_document(
        self,
        collection: str,
        document_id: str,
        *,
        timeout: float,
    ) -> dict[str, Any] | None:
        """Fetch one document; ``None`` when the snapshot does not exist."""
        reference = self._collection(collection).document(document_id)
        try:
            # Single attempt, bounded by the deadline only.
            snapshot = reference.get(retry=None, timeout=timeout)
        except Exception as exc:
            raise _map_error(exc, "unable to get document") from exc

        if not snapshot.exists:
            return None
        return self._to_plain(snapshot.to_dict() or {})

    def stream_documents(
        self,
        collection: str,
        predicate: QueryPredicate | None = None,
        *,
        timeout: float,
    ) -> Iterator[dict[str, Any]]:
        """Open a lazy, closeable stream of field maps."""
        query = self._collection(collection)
        if predicate is not None:
            try:
                query = query.where(
                    filter=self._firestore.FieldFilter(
                        predicate.field, predicate.operator, predicate.value,
                    ),
                )
            except ValueError as exc:
                raise ValidationError(f"invalid query {predicate}: {exc}") from exc
        return self._iterate(query.stream(retry=None, timeout=timeout))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collection(self, path: str) -> Any:
        try:
            return self._client.collection(path)
        except ValueError as exc:
            raise ValidationError(
                f"invalid collection path {path!r}: {exc}",
                hint="A collection path has an odd number of segments, e.g. users/alice/orders.",
            ) from exc

    def _iterate(self, snapshots: Iterator[Any]) -> Iterator[dict[str, Any]]:
        with closing(snapshots):  # type: ignore[type-var]
            while True:
                try:
                    snapshot = next(snapshots)
                except StopIteration:
                    return
                except Exception as exc:
                    raise _map_error(exc, "unable to iterate documents") from exc
                yield self._to_plain(snapshot.to_dict() or {})

    def _to_plain(self, value: Any) -> Any:
        """Replace Firestore-native values with JSON-friendly equivalents.

        ``GeoPoint`` becomes a ``latitude``/``longitude`` map and a
        ``DocumentReference`` becomes its slash-separated path.
        Timestamps and bytes are left for the serializer.
        """
        if isinstance(value, dict):
            return {key: self._to_plain(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._to_plain(item) for item in value]
        if isinstance(value, self._firestore.GeoPoint):
            return {"latitude": value.latitude, "longitude": value.longitude}
        if isinstance(value, self._firestore.DocumentReference):
            return value.path
        return value
