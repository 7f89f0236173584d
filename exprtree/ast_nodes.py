"""Expression tree node definitions.

The node set is closed: Literal, Unary, Binary, Variable, FunctionCall.
Structural nodes are frozen. A Variable node is shared by every place the
name occurs and by the symbol table. Each FunctionCall keeps its own
arguments but points at one shared Function slot per (name, arity).
Variable.value and Function.callback are the only mutable state in a
compiled expression.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Union


class UnaryOperator(Enum):
    NEG = "-"


class BinaryOperator(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Unary:
    op: UnaryOperator
    operand: Node


@dataclass(frozen=True)
class Binary:
    op: BinaryOperator
    left: Node
    right: Node


@dataclass(eq=False)
class Variable:
    name: str
    value: Optional[Any] = None

    @property
    def is_bound(self) -> bool:
        return self.value is not None


@dataclass(eq=False)
class Function:
    """Binding slot for every call of ``name`` with ``arity`` arguments."""
    name: str
    arity: int
    callback: Optional[Callable[..., Any]] = None

    @property
    def is_bound(self) -> bool:
        return self.callback is not None


@dataclass(frozen=True)
class FunctionCall:
    function: Function
    args: tuple[Node, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.function.name

    @property
    def arity(self) -> int:
        return len(self.args)


Node = Union[Literal, Unary, Binary, Variable, FunctionCall]


def children(node: Node) -> tuple[Node, ...]:
    if isinstance(node, Unary):
        return (node.operand,)
    if isinstance(node, Binary):
        return (node.left, node.right)
    if isinstance(node, FunctionCall):
        return node.args
    return ()


def label(node: Node) -> str:
    """One-line tag used when printing a tree."""
    if isinstance(node, Literal):
        return f"Literal({node.value})"
    if isinstance(node, Unary):
        return f"Unary({node.op.value})"
    if isinstance(node, Binary):
        return f"Binary({node.op.value})"
    if isinstance(node, Variable):
        return f"Variable({node.name})"
    if isinstance(node, FunctionCall):
        return f"Function({node.name}/{node.arity})"
    raise TypeError(f"Not an expression node: {node!r}")
