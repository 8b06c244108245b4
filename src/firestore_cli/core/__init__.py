"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from firestore_cli.core.document_service import DocumentService
from firestore_cli.core.models import IterationBound, QueryPredicate, Settings
from firestore_cli.core.protocols import DocumentStore
from firestore_cli.core.query import build_predicate, coerce_value
from firestore_cli.core.serializer import to_json

__all__: list[str] = [
    "DocumentService",
    "DocumentStore",
    "IterationBound",
    "QueryPredicate",
    "Settings",
    "build_predicate",
    "coerce_value",
    "to_json",
]
