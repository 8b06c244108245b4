"""Custom exception hierarchy for firestore-cli.

All exceptions that cross layer boundaries must inherit from
:class:`FirestoreCliError`.  Raw third-party exceptions (e.g. from
google-cloud-firestore or PyYAML) must NEVER propagate beyond the
infrastructure layer — they must be caught and re-raised as a typed
subclass defined here.

Hierarchy
---------
FirestoreCliError
├── UsageError
├── ConfigError
├── ValidationError
├── EnvironmentError
├── ConnectionError
├── StoreError
│   ├── NotFoundError
│   ├── TimeoutError
│   └── TransportError
└── SerializationError
"""

from __future__ import annotations


class FirestoreCliError(Exception):
    """Base exception for all firestore-cli errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line ----------------------------------------------------------

class UsageError(FirestoreCliError):
    """Raised when the command line cannot be parsed."""


# --- Configuration ---------------------------------------------------------

class ConfigError(FirestoreCliError):
    """Raised when no usable configuration source can be found."""


class ValidationError(FirestoreCliError):
    """Raised when resolved settings or arguments are invalid."""


# --- Environment / client --------------------------------------------------

class EnvironmentError(FirestoreCliError):
    """Raised when a required runtime dependency is not available."""


class ConnectionError(FirestoreCliError):
    """Raised when the Firestore client cannot be constructed."""


# --- Store operations ------------------------------------------------------

class StoreError(FirestoreCliError):
    """Base class for failures of a single store operation."""


class NotFoundError(StoreError):
    """Raised when the requested document does not exist."""


class TimeoutError(StoreError):
    """Raised when a store call exceeds its time budget."""


class TransportError(StoreError):
    """Raised for any other failure reported by the store."""


# --- Rendering -------------------------------------------------------------

class SerializationError(FirestoreCliError):
    """Raised when a document cannot be encoded as JSON."""


def append_credentials_suggestion(hint: str) -> str:
    """Append Application Default Credentials guidance to *hint*.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "To set up credentials:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    gcloud auth application-default login",
        )
    )
