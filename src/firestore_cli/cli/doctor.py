"""``firestore-cli doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment is ready to talk to Firestore.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No network call is made; the
checks only look at the local installation, the config file and the
environment.
"""

from __future__ import annotations

import os
import platform
import sys
from pathlib import Path

from firestore_cli.cli import exit_codes
from firestore_cli.cli.console import console, escape
from firestore_cli.exceptions import ConfigError
from firestore_cli.infra.config_loader import (
    ENV_EMULATOR_HOST,
    config_search_dirs,
    find_config_file,
    read_config_file,
)
from firestore_cli.version import __version__

OK = "[green]OK[/green]"
WARN = "[yellow]WARN[/yellow]"
FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _tool_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the firestore-cli version row."""
    return "firestore-cli", __version__, OK


def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = OK if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _firestore_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the google-cloud-firestore row."""
    try:
        from google.cloud.firestore import __version__ as fs_ver

        return "google-cloud-firestore", fs_ver, OK
    except ImportError:
        return "google-cloud-firestore", "NOT INSTALLED", FAIL


def _config_checks(config_path: Path | None) -> list[tuple[str, str, str]]:
    """Return rows for the config file and the keys it provides."""
    if config_path is None:
        try:
            config_path = find_config_file(config_search_dirs())
        except ConfigError as exc:
            return [("Config file", str(exc), WARN)]
    if config_path is None or not config_path.is_file():
        return [("Config file", "not found", WARN)]

    try:
        values = read_config_file(config_path)
    except ConfigError as exc:
        return [("Config file", str(exc), FAIL)]

    rows = [("Config file", str(config_path), OK)]
    for key in ("project", "collection"):
        value = str(values.get(key) or "")
        rows.append((key, value or "undefined", OK if value else WARN))
    return rows


def _emulator_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the emulator row."""
    host = os.environ.get(ENV_EMULATOR_HOST)
    return "Emulator", host or "not set", OK


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\nfirestore-cli doctor", file=sys.stderr)
    print("=" * 72, file=sys.stderr)
    print(f"{'Component':<24} {'Value':<38} {'Status':<8}", file=sys.stderr)
    print("-" * 72, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<24} {value:<38} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(config_path: Path | None = None) -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    checks = [
        _tool_version_check(),
        _python_version_check(),
        _firestore_version_check(),
        *_config_checks(config_path),
        _emulator_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
        print("Some checks failed." if has_failure else "All checks passed.", file=sys.stderr)
    else:
        table = Table(
            title="firestore-cli doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, escape(value), status)

        console.print()
        console.print(table)
        console.print()
        if has_failure:
            console.print("[bold red]Some checks failed.[/bold red]")
        else:
            console.print("[bold green]All checks passed.[/bold green]")

    return exit_codes.GENERAL_ERROR if has_failure else exit_codes.SUCCESS
