"""Abstract Syntax Tree (AST) definitions for TinyJS.

The node classes below are the complete set the parser produces and the
interpreter walks. Every node records the source line it came from so
runtime errors can point back at the program text. Children are owned by
their parent node; no node is shared between two parents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Node:
    """Base class for all AST nodes."""
    line: int = field(default=0, kw_only=True, compare=False)


@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class IntegerLiteral(Node):
    value: int


@dataclass
class FloatLiteral(Node):
    value: float


@dataclass
class StringLiteral(Node):
    value: str


@dataclass
class Variable(Node):
    name: str


@dataclass
class BinaryOp(Node):
    op: str  # '=' for assignment, otherwise an arithmetic/logical operator
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class Call(Node):
    callee: str
    args: List[Node]


@dataclass
class FunctionDecl(Node):
    name: str
    params: List[str]
    body: List[Node]


@dataclass
class VarDecl(Node):
    name: str
    initializer: Optional[Node] = None


@dataclass
class Return(Node):
    value: Optional[Node] = None


@dataclass
class Break(Node):
    pass


@dataclass
class Continue(Node):
    pass


@dataclass
class If(Node):
    condition: Node
    then_branch: List[Node]
    else_branch: Optional[List[Node]] = None


@dataclass
class While(Node):
    condition: Node
    body: List[Node]


@dataclass
class DoWhile(Node):
    condition: Node
    body: List[Node]


@dataclass
class For(Node):
    init: Optional[Node]
    condition: Optional[Node]
    step: Optional[Node]
    body: List[Node]


@dataclass
class Block(Node):
    body: List[Node]
