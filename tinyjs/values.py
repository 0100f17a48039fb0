"""Runtime values for TinyJS.

Scalars are plain Python objects: ``int`` (kept inside the signed 64-bit
range), ``float`` and ``str``. This module adds the two values that have no
Python counterpart, the ``undefined`` marker and user function values, and
the helpers the evaluator uses to name and print values.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .ast import FunctionDecl
    from .environment import Environment


INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


class Undefined:
    """Marker for the result of an expression that produced no value."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'undefined'

    def __bool__(self) -> bool:
        return False


UNDEFINED = Undefined()


class FunctionValue:
    """A declared function together with the scope it was declared in."""
    def __init__(self, decl: 'FunctionDecl', closure: 'Environment'):
        self.decl = decl
        self.closure = closure

    @property
    def name(self) -> str:
        return self.decl.name

    @property
    def params(self):
        return self.decl.params

    @property
    def body(self):
        return self.decl.body

    def __repr__(self) -> str:
        return f"<function {self.decl.name}>"


def wrap_int(value: int) -> int:
    """Reduce an integer to the signed 64-bit range (two's complement)."""
    if INT64_MIN <= value <= INT64_MAX:
        return value
    return ((value - INT64_MIN) & 0xFFFFFFFFFFFFFFFF) + INT64_MIN


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float))


def type_name(value: Any) -> str:
    if isinstance(value, int):
        return 'integer'
    if isinstance(value, float):
        return 'float'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, FunctionValue):
        return 'function'
    if isinstance(value, Undefined):
        return 'undefined'
    return type(value).__name__


def to_string(value: Any) -> str:
    """Textual form used by ``print`` and by string concatenation."""
    if isinstance(value, str):
        return value
    # floats keep their shortest round-trip form, e.g. 2.0 and 0.1
    return repr(value)
