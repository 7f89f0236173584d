"""Tree-walking evaluator.

Evaluation recomputes the whole tree on every call; nothing is cached
between calls because bindings may change in between.
"""

from __future__ import annotations

import decimal
import math
from typing import Any

from exprtree.ast_nodes import (
    Binary, BinaryOperator, FunctionCall, Literal, Node, Unary, UnaryOperator, Variable,
)
from exprtree.errors import DivisionByZero, UnboundFunction, UnboundVariable


def _signed_inf(left: Any, right: Any) -> float:
    # compare rather than convert: a huge int has no float value
    right_negative = right < 0 or (right == 0 and math.copysign(1.0, right) < 0)
    return -math.inf if (left < 0) != right_negative else math.inf


def _ieee_divide(left: Any, right: Any) -> Any:
    """Divide, returning inf/nan where the host type raises on a zero divisor or overflow."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or left != left:
            return math.nan
        return _signed_inf(left, right)
    except (OverflowError, decimal.Overflow):
        return _signed_inf(left, right)


def _is_infinite(value: Any) -> bool:
    # int and Fraction are never infinite; Decimal has its own predicate
    if isinstance(value, float):
        return math.isinf(value)
    is_infinite = getattr(value, "is_infinite", None)
    return bool(is_infinite()) if callable(is_infinite) else False


def _divide(left: Any, right: Any, check_division: bool) -> Any:
    if not check_division:
        return _ieee_divide(left, right)
    try:
        result = left / right
    except (ZeroDivisionError, OverflowError, decimal.Overflow):
        # an unrepresentable quotient is reported like an infinite one
        raise DivisionByZero() from None
    if _is_infinite(result):
        raise DivisionByZero()
    return result


def evaluate(node: Node, check_division: bool = True) -> Any:
    """Evaluate ``node`` with the values and callbacks currently bound."""
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, Unary):
        if node.op is UnaryOperator.NEG:
            return -evaluate(node.operand, check_division)

    elif isinstance(node, Binary):
        left = evaluate(node.left, check_division)
        right = evaluate(node.right, check_division)
        if node.op is BinaryOperator.ADD:
            return left + right
        if node.op is BinaryOperator.SUB:
            return left - right
        if node.op is BinaryOperator.MUL:
            return left * right
        if node.op is BinaryOperator.DIV:
            return _divide(left, right, check_division)

    elif isinstance(node, Variable):
        if not node.is_bound:
            raise UnboundVariable(node.name)
        return node.value

    elif isinstance(node, FunctionCall):
        fn = node.function
        if not fn.is_bound:
            raise UnboundFunction(fn.name, fn.arity)
        args = [evaluate(arg, check_division) for arg in node.args]
        return fn.callback(*args)

    raise TypeError(f"Cannot evaluate {node!r}")
