"""Per-invocation state threaded through the command handlers.

One :class:`InvocationContext` is built per process run, after the
configuration has been resolved.  It owns the store handle (created
lazily, on first use) and the output stream, so no handler reads or
writes module-level globals.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TextIO

from firestore_cli.cli.console import console, escape
from firestore_cli.cli.render import JsonLineRenderer
from firestore_cli.core.document_service import DocumentService
from firestore_cli.core.models import Settings
from firestore_cli.core.protocols import DocumentStore

StoreFactory = Callable[[str], DocumentStore]


@dataclass
class InvocationContext:
    """Everything a command handler needs for one run."""

    settings: Settings
    store_factory: StoreFactory
    out: TextIO = field(default_factory=lambda: sys.stdout)
    _store: DocumentStore | None = field(default=None, init=False, repr=False)

    @property
    def verbose(self) -> bool:
        return self.settings.verbose

    @property
    def store(self) -> DocumentStore:
        """Return the store, connecting on first access."""
        if self._store is None:
            self._store = self.store_factory(self.settings.project)
        return self._store

    def service(self) -> DocumentService:
        return DocumentService(self.store, self.settings.collection)

    def renderer(self) -> JsonLineRenderer:
        return JsonLineRenderer(self.out, pretty=self.settings.pretty_print)

    def log(self, message: str) -> None:
        """Print a diagnostic line on stderr when ``--verbose`` is set."""
        if self.verbose:
            console.print(f"[dim]{escape(message)}[/dim]")
