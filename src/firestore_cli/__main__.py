"""Allow ``python -m firestore_cli`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m firestore_cli`` behaves identically to the
``firestore-cli`` console script.
"""

from __future__ import annotations

from firestore_cli.cli.app import cli

if __name__ == "__main__":
    cli()
