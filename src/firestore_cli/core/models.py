"""Domain models for firestore-cli.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and trivial validation.  They carry zero
I/O, zero dependencies on external packages, and must remain pure
across the entire lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_LIMIT: int = 100
"""Number of documents rendered by ``documents``/``where`` by default."""


# ---------------------------------------------------------------------------
# Resolved settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Settings:
    """Configuration for a single invocation, after all sources are merged."""

    project: str
    """Google Cloud project id."""

    collection: str
    """Collection path (e.g. ``users`` or ``users/alice/orders``)."""

    pretty_print: bool = False
    """Indent emitted JSON with two-space steps."""

    verbose: bool = False
    """Emit diagnostic lines on stderr before each operation."""

    config_path: Path | None = None
    """Config file the values were read from, or ``None``."""

    emulator_host: str | None = None
    """Value of ``FIRESTORE_EMULATOR_HOST`` when set.  Informational only."""

    @property
    def emulator(self) -> bool:
        return bool(self.emulator_host)


# ---------------------------------------------------------------------------
# Query predicate
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class QueryPredicate:
    """A single ``field operator value`` filter evaluated server-side."""

    field: str
    """Field path, dotted for nested maps."""

    operator: str
    """Firestore comparison operator (``==``, ``<``, ``in``, …)."""

    value: int | str
    """Literal value, already coerced by :func:`coerce_value`."""

    def __str__(self) -> str:
        return f"{self.field} {self.operator} {self.value}"


# ---------------------------------------------------------------------------
# Iteration bound
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class IterationBound:
    """How much of a result stream is consumed before stopping.

    When :attr:`unlimited` is set, :attr:`limit` is ignored and the
    stream is drained.
    """

    limit: int = DEFAULT_LIMIT
    unlimited: bool = False

    def reached(self, count: int) -> bool:
        """Return ``True`` once *count* rendered documents hit the limit."""
        return not self.unlimited and count >= self.limit
