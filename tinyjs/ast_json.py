"""JSON serialization/deserialization for the TinyJS AST.

Nodes become plain dicts tagged with ``"type"``; lists of nodes become JSON
arrays. Line numbers are kept so that a reloaded AST reports errors at the
same places as a fresh parse.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Type

from .ast import (
    Node,
    Program,
    IntegerLiteral,
    FloatLiteral,
    StringLiteral,
    Variable,
    BinaryOp,
    UnaryOp,
    Call,
    FunctionDecl,
    VarDecl,
    Return,
    Break,
    Continue,
    If,
    While,
    DoWhile,
    For,
    Block,
)


NODE_TYPES: Dict[str, Type[Node]] = {
    cls.__name__: cls
    for cls in (
        Program, IntegerLiteral, FloatLiteral, StringLiteral, Variable,
        BinaryOp, UnaryOp, Call, FunctionDecl, VarDecl, Return, Break,
        Continue, If, While, DoWhile, For, Block,
    )
}


SCALAR_TYPES = {'int': int, 'str': str}


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (int, float, str, bool)):
        return node
    if isinstance(node, list):
        return [ast_to_obj(item) for item in node]
    if isinstance(node, Node) and type(node).__name__ in NODE_TYPES:
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def _check_field(t: str, f, value: Any) -> Any:
    # field annotations are strings such as 'Node', 'Optional[List[Node]]' or 'List[str]'
    expected = f.type
    if expected.startswith('Optional['):
        if value is None:
            return value
        expected = expected[len('Optional['):-1]
    if expected.startswith('List['):
        item = expected[len('List['):-1]
        if isinstance(value, list) and all(_matches(item, v) for v in value):
            return value
    elif _matches(expected, value):
        return float(value) if expected == 'float' else value
    raise ValueError(f"Malformed {t} node: field {f.name!r} expects {f.type}, got {value!r}")


def _matches(expected: str, value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if expected == 'Node':
        return isinstance(value, Node)
    if expected == 'float':
        return isinstance(value, (int, float))
    return isinstance(value, SCALAR_TYPES.get(expected, object))


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, list):
        return [ast_from_obj(item) for item in obj]
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    kwargs = {}
    for f in fields(cls):
        if f.name in obj:
            kwargs[f.name] = _check_field(t, f, ast_from_obj(obj[f.name]))
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ValueError(f"Malformed {t} node: {e}") from None
