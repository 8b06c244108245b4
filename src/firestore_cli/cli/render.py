"""Line-oriented JSON output to stdout."""

from __future__ import annotations

from typing import Any, TextIO

from firestore_cli.core.serializer import to_json


class JsonLineRenderer:
    """Write each document as one JSON value followed by a newline.

    In pretty mode a "line" spans several physical lines; documents are
    still separated by exactly one newline.
    """

    def __init__(self, out: TextIO, *, pretty: bool = False) -> None:
        self._out = out
        self._pretty = pretty

    def __call__(self, document: dict[str, Any]) -> None:
        # Encode before writing so a failure never leaves a partial line.
        line = to_json(document, pretty=self._pretty)
        self._out.write(line + "\n")
        self._out.flush()
