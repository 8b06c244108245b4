"""Pure query-argument handling.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

The value coercion is deliberately narrow: a literal becomes an ``int``
only when it is a plain base-10 integer inside the signed 32-bit range.
Everything else, floats and booleans included, stays a string.
"""

from __future__ import annotations

import re

from firestore_cli.core.models import QueryPredicate
from firestore_cli.exceptions import ValidationError

INT32_MIN: int = -(2**31)
INT32_MAX: int = 2**31 - 1

SUPPORTED_OPERATORS: tuple[str, ...] = (
    "<",
    "<=",
    "==",
    "!=",
    ">=",
    ">",
    "array-contains",
    "array-contains-any",
    "in",
    "not-in",
)

# ASCII digits only; ``str.isdigit`` would also accept other scripts.
_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")


def coerce_value(literal: str) -> int | str:
    """Return *literal* as an ``int`` when it parses as a 32-bit integer.

    >>> coerce_value("30")
    30
    >>> coerce_value("30abc")
    '30abc'
    >>> coerce_value("2147483648")
    '2147483648'
    """
    if not _INTEGER_LITERAL.fullmatch(literal):
        return literal
    value = int(literal, 10)
    if INT32_MIN <= value <= INT32_MAX:
        return value
    return literal


def build_predicate(field: str, operator: str, literal: str) -> QueryPredicate:
    """Validate the three ``where`` arguments and build a predicate.

    Raises
    ------
    ValidationError
        If *field* is empty or *operator* is not a Firestore operator.
    """
    if not field.strip():
        raise ValidationError("field path must not be empty")
    if operator not in SUPPORTED_OPERATORS:
        raise ValidationError(
            f"unsupported operator {operator!r}",
            hint="Use one of: " + ", ".join(SUPPORTED_OPERATORS),
        )
    return QueryPredicate(field=field, operator=operator, value=coerce_value(literal))
