"""Runtime value model for xmas.

Values map onto plain Python objects where possible:

* ``Number``  -> ``int``
* ``Boolean`` -> ``bool``
* ``String``  -> ``str``
* ``Array1D`` -> :class:`Array1D`
* ``Array2D`` -> :class:`Array2D`

Because ``bool`` is a subclass of ``int`` every check in this module uses
``type(value) is ...`` rather than ``isinstance``. Values are never mutated
in place, so handing the same object to two variables behaves like a copy.

The coercion rules for the binary operators live here in one place:

=========  ====================================================
operator   accepted operands
=========  ====================================================
``+``      N+N, N+B, B+N, S+S (concat), A1+A1 (concat)
``- * /``  N,N  N,B  B,N (booleans count as 0/1)
``%``      N,N
``< > <= >=``  N,N
``==``     anything; structural and variant-exact
=========  ====================================================

``5 + true`` is ``6`` but ``5 == true`` is ``false``: arithmetic coerces
booleans, equality never does.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List

from .errors import XmasRuntimeError


@dataclass
class Array1D:
    items: List[Any] = field(default_factory=list)


@dataclass
class Array2D:
    """A grid of values. Rows may have different lengths."""
    rows: List[List[Any]] = field(default_factory=list)


_INTEGER_RE = re.compile(r'[+-]?[0-9]+')


def is_number(value: Any) -> bool:
    return type(value) is int


def is_boolean(value: Any) -> bool:
    return type(value) is bool


def empty_array() -> Array1D:
    return Array1D([])


def type_name(value: Any) -> str:
    """Return the xmas type name of a runtime value."""
    if is_boolean(value):
        return 'Boolean'
    if is_number(value):
        return 'Number'
    if isinstance(value, str):
        return 'String'
    if isinstance(value, Array1D):
        return 'Array1D'
    if isinstance(value, Array2D):
        return 'Array2D'
    return type(value).__name__


def is_truthy(value: Any) -> bool:
    if is_boolean(value):
        return value
    if is_number(value):
        return value != 0
    if isinstance(value, str):
        return value != ''
    if isinstance(value, Array1D):
        return len(value.items) > 0
    if isinstance(value, Array2D):
        return len(value.rows) > 0
    return False


def values_equal(a: Any, b: Any) -> bool:
    # No coercion: a Number never equals a Boolean.
    if type(a) is not type(b):
        return False
    if isinstance(a, Array1D):
        return len(a.items) == len(b.items) and all(
            values_equal(x, y) for x, y in zip(a.items, b.items))
    if isinstance(a, Array2D):
        if len(a.rows) != len(b.rows):
            return False
        for row_a, row_b in zip(a.rows, b.rows):
            if len(row_a) != len(row_b):
                return False
            if not all(values_equal(x, y) for x, y in zip(row_a, row_b)):
                return False
        return True
    return a == b


def _as_arithmetic(a: Any, b: Any):
    """Coerce a Number/Boolean pair to two ints, or return None.

    Two booleans are not an arithmetic pair.
    """
    if is_number(a) and is_number(b):
        return a, b
    if is_number(a) and is_boolean(b):
        return a, int(b)
    if is_boolean(a) and is_number(b):
        return int(a), b
    return None


def truncating_divmod(a: int, b: int):
    """Integer division and remainder rounding toward zero."""
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    return quotient, a - b * quotient


def apply_binary(op: str, a: Any, b: Any) -> Any:
    """Apply an arithmetic, comparison or logical operator to two values."""
    if op == '+':
        if isinstance(a, str) and isinstance(b, str):
            return a + b
        if isinstance(a, Array1D) and isinstance(b, Array1D):
            return Array1D(a.items + b.items)
        pair = _as_arithmetic(a, b)
        if pair is None:
            raise XmasRuntimeError(f'Invalid operands for +: {type_name(a)} and {type_name(b)}')
        return pair[0] + pair[1]
    if op in ('-', '*', '/'):
        pair = _as_arithmetic(a, b)
        if pair is None:
            raise XmasRuntimeError(f'Invalid operands for {op}: {type_name(a)} and {type_name(b)}')
        x, y = pair
        if op == '-':
            return x - y
        if op == '*':
            return x * y
        if y == 0:
            raise XmasRuntimeError('Division by zero')
        return truncating_divmod(x, y)[0]
    if op == '%':
        if not (is_number(a) and is_number(b)):
            raise XmasRuntimeError(f'Invalid operands for %: {type_name(a)} and {type_name(b)}')
        if b == 0:
            raise XmasRuntimeError('Modulo by zero')
        return truncating_divmod(a, b)[1]
    if op in ('<', '>', '<=', '>='):
        if not (is_number(a) and is_number(b)):
            raise XmasRuntimeError(f'Invalid operands for {op}: {type_name(a)} and {type_name(b)}')
        if op == '<':
            return a < b
        if op == '>':
            return a > b
        if op == '<=':
            return a <= b
        return a >= b
    if op == '==':
        return values_equal(a, b)
    # && and || hand back one of the operands, not a boolean
    if op == '&&':
        return b if is_truthy(a) else a
    if op == '||':
        return a if is_truthy(a) else b
    raise XmasRuntimeError(f'Unknown operator {op}')


def _parse_integer(text: str) -> int:
    if not _INTEGER_RE.fullmatch(text):
        raise XmasRuntimeError(f"Cannot convert '{text}' to number")
    return int(text)


def to_number(value: Any) -> int:
    """The ``~`` conversion."""
    if is_boolean(value):
        return 1 if value else 0
    if is_number(value):
        return value
    if isinstance(value, str):
        return _parse_integer(value)
    if isinstance(value, Array1D):
        # a sliced row of characters behaves like a string
        for item in value.items:
            if not isinstance(item, str):
                raise XmasRuntimeError('Cannot convert non-string array element to number')
        return _parse_integer(''.join(value.items))
    raise XmasRuntimeError(f'Cannot convert {type_name(value)} to number')


def to_string(value: Any) -> str:
    """Render a value for the user (the CLI prints the final value this way)."""
    if is_boolean(value):
        return 'true' if value else 'false'
    if is_number(value):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Array1D):
        return '[' + ', '.join(to_string(item) for item in value.items) + ']'
    if isinstance(value, Array2D):
        rows = ('[' + ', '.join(to_string(item) for item in row) + ']' for row in value.rows)
        return '[' + ', '.join(rows) + ']'
    return str(value)


def _is_char_array(value: Array1D) -> bool:
    return bool(value.items) and all(
        isinstance(item, str) and len(item) == 1 for item in value.items)


def debug_repr(value: Any) -> str:
    """Render a value for the debug trace.

    Strings are quoted and a row of single characters reads as one string.
    """
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, Array1D):
        if _is_char_array(value):
            return '"' + ''.join(value.items) + '"'
        return '[' + ', '.join(debug_repr(item) for item in value.items) + ']'
    if isinstance(value, Array2D):
        rows = ('[' + ', '.join(debug_repr(item) for item in row) + ']' for row in value.rows)
        return '[' + ', '.join(rows) + ']'
    return to_string(value)
