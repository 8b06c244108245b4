"""CLI application entry point and command routing for firestore-cli.

This module is the **sole error boundary** for the entire application.
It catches :class:`~firestore_cli.exceptions.FirestoreCliError`,
``KeyboardInterrupt``, a closed stdout pipe, and any unexpected
``Exception``, rendering user-friendly messages on stderr and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* stdout carries document JSON only; diagnostics and errors go to stderr
  through the Rich console.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import os
import sys
from contextlib import suppress
from pathlib import Path
from typing import NoReturn

from firestore_cli.cli import exit_codes
from firestore_cli.cli.console import console, escape
from firestore_cli.cli.context import InvocationContext
from firestore_cli.core.document_service import require_document_id
from firestore_cli.core.models import DEFAULT_LIMIT, IterationBound
from firestore_cli.core.protocols import DocumentStore
from firestore_cli.core.query import build_predicate
from firestore_cli.exceptions import FirestoreCliError, UsageError
from firestore_cli.infra.config_loader import resolve_settings
from firestore_cli.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

class _ArgumentParser(argparse.ArgumentParser):
    """``ArgumentParser`` that reports usage errors as :class:`UsageError`.

    Keeps every failure on the single exit code handled by :func:`cli`
    instead of argparse's own ``exit(2)``.
    """

    def error(self, message: str) -> NoReturn:
        raise UsageError(message, hint=f"Run '{self.prog} --help' for usage.")


def _global_options() -> argparse.ArgumentParser:
    """Options accepted both before and after the sub-command.

    Defaults are suppressed so that a flag given on one side is never
    overwritten by the other side's default.
    """
    options = argparse.ArgumentParser(add_help=False)
    options.add_argument(
        "-c", "--collection", default=argparse.SUPPRESS, help="collection path",
    )
    options.add_argument(
        "--project", default=argparse.SUPPRESS, help="gcp project id",
    )
    options.add_argument(
        "-p",
        "--prettyprint",
        action="store_true",
        default=argparse.SUPPRESS,
        help="pretty print document json",
    )
    options.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="verbose mode",
    )
    options.add_argument(
        "--config",
        type=Path,
        default=argparse.SUPPRESS,
        metavar="PATH",
        help="read settings from PATH instead of searching for firestore-cli.yaml",
    )
    return options


def _add_bound_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help="return a maximum of n documents (default: %(default)s)",
    )
    parser.add_argument(
        "--unlimited",
        action="store_true",
        help="return all documents in collection (warning: use with precaution)",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands:
    * ``firestore-cli get <document-id>``
    * ``firestore-cli documents [--limit N] [--unlimited]``
    * ``firestore-cli where <field> <operator> <value> [--limit N] [--unlimited]``
    * ``firestore-cli doctor``
    """
    options = _global_options()
    parser = _ArgumentParser(
        prog="firestore-cli",
        description="(Yet another) command line interface for Google Cloud Firestore.",
        parents=[options],
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    get_parser = commands.add_parser(
        "get", parents=[options], help="get a document by id",
    )
    get_parser.add_argument("document_id", metavar="document-id")

    documents_parser = commands.add_parser(
        "documents", parents=[options], help="return all documents in a collection",
    )
    _add_bound_options(documents_parser)

    where_parser = commands.add_parser(
        "where",
        parents=[options],
        help="query for documents",
        description="query for documents",
        epilog=(
            "examples:\n"
            "  firestore-cli where correlationId == 22da76b6-95c6-4b8f-8381-a60c65752723\n"
            "  firestore-cli where age '>=' 30"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    where_parser.add_argument("field", help="field path, dotted for nested maps")
    where_parser.add_argument("operator", help="comparison operator, e.g. == or <")
    where_parser.add_argument(
        "value", help="literal; 32-bit integers are compared as numbers",
    )
    _add_bound_options(where_parser)

    commands.add_parser(
        "doctor", parents=[options], help="check the local environment",
    )
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _connect_store(project: str) -> DocumentStore:
    """Build the real Firestore-backed store for *project*."""
    from firestore_cli.infra.firestore_store import FirestoreDocumentStore

    return FirestoreDocumentStore.connect(project)


def _bound(args: argparse.Namespace) -> IterationBound:
    return IterationBound(limit=args.limit, unlimited=args.unlimited)


def _handle_get(ctx: InvocationContext, args: argparse.Namespace) -> int:
    """Fetch one document by id and print it."""
    settings = ctx.settings
    document_id = require_document_id(args.document_id)
    ctx.log(
        f"Finding (project:{settings.project}, collection:{settings.collection}, "
        f"id:{document_id}, emulator:{settings.emulator})"
    )
    document = ctx.service().get(document_id)
    ctx.renderer()(document)
    return exit_codes.SUCCESS


def _handle_documents(ctx: InvocationContext, args: argparse.Namespace) -> int:
    """Print every document in the collection, bounded."""
    settings = ctx.settings
    bound = _bound(args)
    ctx.log(
        f"Listing (project:{settings.project}, collection:{settings.collection}, "
        f"limit:{'none' if bound.unlimited else bound.limit}, emulator:{settings.emulator})"
    )
    count = ctx.service().documents(bound, ctx.renderer())
    ctx.log(f"{count} document(s) returned")
    return exit_codes.SUCCESS


def _handle_where(ctx: InvocationContext, args: argparse.Namespace) -> int:
    """Print documents matching a single-field predicate, bounded."""
    settings = ctx.settings
    predicate = build_predicate(args.field, args.operator, args.value)
    bound = _bound(args)
    ctx.log(
        f"Querying (project:{settings.project}, collection:{settings.collection}, "
        f"query:{predicate}, emulator:{settings.emulator})"
    )
    count = ctx.service().where(predicate, bound, ctx.renderer())
    ctx.log(f"{count} document(s) returned")
    return exit_codes.SUCCESS


def _handle_doctor(args: argparse.Namespace) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from firestore_cli.cli.doctor import run_doctor

    return run_doctor(getattr(args, "config", None))


_HANDLERS = {
    "get": _handle_get,
    "documents": _handle_documents,
    "where": _handle_where,
}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the firestore-cli CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.command == "doctor":
        return _handle_doctor(args)

    settings = resolve_settings(
        project=getattr(args, "project", None),
        collection=getattr(args, "collection", None),
        pretty_print=getattr(args, "prettyprint", None),
        verbose=getattr(args, "verbose", False),
        config_path=getattr(args, "config", None),
    )
    ctx = InvocationContext(settings=settings, store_factory=_connect_store)
    if settings.config_path is not None:
        ctx.log(f"Using config file {settings.config_path}")
    return _HANDLERS[args.command](ctx, args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def _discard_stdout() -> None:
    """Point stdout at the null device so the interpreter's final flush
    does not fail again on the closed pipe.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        # Not every stdout has a descriptor (captured or replaced streams).
        with suppress(OSError, ValueError):
            os.dup2(devnull, sys.stdout.fileno())
    finally:
        os.close(devnull)


def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.  Documents already
    written before a failure stay on stdout.
    """
    try:
        code = main()
        sys.exit(code)
    except FirestoreCliError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except BrokenPipeError:
        # The reader closed stdout early (e.g. ``| head``); nothing to report.
        _discard_stdout()
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.GENERAL_ERROR)
