"""Pure JSON encoding of document field maps.

Output conventions
------------------
* Keys are sorted so that the same document always encodes the same way.
* Compact output uses ``","`` / ``":"`` separators with no spaces.
* Pretty output indents with two-space steps.
* Non-ASCII text is emitted verbatim (UTF-8), not ``\\u`` escaped.

Values the stdlib encoder does not know are handled by
:func:`_encode_default`: ``datetime`` values become RFC 3339 strings
(nanosecond precision for Firestore's ``DatetimeWithNanoseconds``) and
``bytes`` become base64.  Anything else, and NaN/Infinity floats, raise
:class:`~firestore_cli.exceptions.SerializationError`.
"""

from __future__ import annotations

import base64
import datetime as dt
import json
from collections.abc import Mapping
from typing import Any

from firestore_cli.exceptions import SerializationError

_INDENT: int = 2
_COMPACT_SEPARATORS: tuple[str, str] = (",", ":")


def _encode_default(value: Any) -> Any:
    """Fallback hook for :func:`json.dumps`."""
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None and value.utcoffset() == dt.timedelta(0):
            # Firestore timestamps keep nanoseconds past datetime's microseconds.
            if hasattr(value, "rfc3339"):
                return value.rfc3339()
            return value.replace(tzinfo=None).isoformat() + "Z"
        return value.isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(data: Mapping[str, Any], *, pretty: bool = False) -> str:
    """Encode a document's field map as a JSON string.

    Raises
    ------
    SerializationError
        If *data* holds a value that cannot be represented in JSON.
    """
    try:
        if pretty:
            return json.dumps(
                data,
                indent=_INDENT,
                sort_keys=True,
                ensure_ascii=False,
                allow_nan=False,
                default=_encode_default,
            )
        return json.dumps(
            data,
            separators=_COMPACT_SEPARATORS,
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
            default=_encode_default,
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"unable to marshal document to json: {exc}") from exc
