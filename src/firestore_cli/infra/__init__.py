"""Infrastructure layer — external system integration.

This layer wraps all interaction with google-cloud-firestore, the
filesystem and the process environment.  Every raw third-party
exception must be caught here and re-raised as a
:class:`~firestore_cli.exceptions.FirestoreCliError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from firestore_cli.infra.config_loader import (
    config_search_dirs,
    find_config_file,
    read_config_file,
    resolve_settings,
)
from firestore_cli.infra.firestore_store import FirestoreDocumentStore

__all__: list[str] = [
    "FirestoreDocumentStore",
    "config_search_dirs",
    "find_config_file",
    "read_config_file",
    "resolve_settings",
]
