"""Compiled expression: bind symbols, validate, evaluate.

Typical use::

    expr = compile_expression("dist(a, b) * 2")
    expr.bind_variable("a", 3.0)
    expr.bind_variable("b", 4.0)
    expr.bind_function("dist", 2, lambda x, y: math.hypot(x, y))
    expr.evaluate()   # 10.0

Binding only reaches symbols that occur in the source. Evaluation refuses
to start until every symbol is bound, so a partially bound expression
never invokes any callback.
"""

from __future__ import annotations

import inspect
import logging
import numbers
from typing import Any, Callable, Optional

from exprtree.ast_nodes import Node, children, label
from exprtree.config import ExprConfig
from exprtree.context import Context
from exprtree.errors import (
    ArityMismatch, UndefinedFunction, UndefinedVariable,
    UninitializedFunction, UninitializedVariable,
)
from exprtree.evaluator import evaluate as evaluate_node
from exprtree.parser import parse

logger = logging.getLogger(__name__)


def _accepts(callback: Callable[..., Any], arity: int) -> bool:
    """Whether ``callback`` can be called with exactly ``arity`` positional args.

    Callables without an introspectable signature (some builtins) are
    assumed to accept.
    """
    try:
        sig = inspect.signature(callback)
    except (TypeError, ValueError):
        return True
    try:
        sig.bind(*([0] * arity))
    except TypeError:
        return False
    return True


class Expression:
    """A compiled expression tree together with its symbol table."""

    def __init__(self, root: Node, context: Context,
                 config: Optional[ExprConfig] = None, source: str = ""):
        self.root = root
        self.context = context
        self.config = config or ExprConfig()
        self.source = source
        self._validated = False

    # -------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------

    @property
    def variable_names(self) -> tuple[str, ...]:
        return tuple(self.context.variables)

    @property
    def function_signatures(self) -> tuple[tuple[str, int], ...]:
        return tuple(self.context.functions)

    # -------------------------------------------------------------------
    # Binding
    # -------------------------------------------------------------------

    def bind_variable(self, name: str, value: Any) -> None:
        var = self.context.lookup_variable(name)
        if var is None:
            raise UndefinedVariable(name)
        if isinstance(value, bool) or not isinstance(value, numbers.Number):
            raise TypeError(f"Variable '{name}' must be bound to a number, got {value!r}")
        var.value = value
        logger.debug("Bound variable %s = %r", name, value)

    def bind_function(self, name: str, arity: int, callback: Callable[..., Any]) -> None:
        fn = self.context.lookup_function(name, arity)
        if fn is None:
            raise UndefinedFunction(name, arity)
        if not callable(callback):
            raise TypeError(f"Function '{name}/{arity}' must be bound to a callable, got {callback!r}")
        if not _accepts(callback, arity):
            raise ArityMismatch(name, arity, callback)
        fn.callback = callback
        logger.debug("Bound function %s/%d = %r", name, arity, callback)

    def __setitem__(self, name: str, value: Any) -> None:
        """``expr["a"] = 1.5`` binds a variable.

        ``expr["f"] = fn`` binds ``fn`` as ``f`` with one argument per
        positional parameter of ``fn``; other arities of ``f`` stay unbound.
        """
        if not callable(value):
            self.bind_variable(name, value)
            return
        self.bind_function(name, _positional_count(value), value)

    # -------------------------------------------------------------------
    # Validation / evaluation
    # -------------------------------------------------------------------

    def validate(self) -> None:
        """Raise on the first symbol that has no binding yet."""
        if self._validated:
            return
        for var in self.context.variables.values():
            if not var.is_bound:
                raise UninitializedVariable(var.name)
        for fn in self.context.functions.values():
            if not fn.is_bound:
                raise UninitializedFunction(fn.name, fn.arity)
        self._validated = True
        logger.debug("Validated %r", self.source)

    def evaluate(self) -> Any:
        self.validate()
        return evaluate_node(self.root, self.config.check_division)

    def __call__(self) -> Any:
        return self.evaluate()

    # -------------------------------------------------------------------
    # Printing
    # -------------------------------------------------------------------

    def describe(self) -> str:
        lines: list[str] = []

        def write_node(node: Node, indent: str) -> None:
            lines.append(f"{indent}{label(node)}\n")
            for child in children(node):
                write_node(child, indent + "  ")

        write_node(self.root, "")
        return "".join(lines)

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"Expression({self.source!r})"


def _positional_count(callback: Callable[..., Any]) -> int:
    try:
        params = inspect.signature(callback).parameters.values()
    except (TypeError, ValueError):
        return 0
    return sum(
        1 for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compile_expression(source: str, config: Optional[ExprConfig] = None,
                       filename: str = "<expr>") -> Expression:
    """Compile expression source. Raises CompileError on malformed input."""
    root, context = parse(source, config, filename)
    return Expression(root, context, config, source)
