"""Expression tests: binding, validation, evaluation and printing."""

import json
import math

import pytest

import exprtree
from exprtree import (
    ArityMismatch, UndefinedFunction, UndefinedVariable,
    UninitializedFunction, UninitializedVariable, compile_expression,
)


class TestBinding:
    """bind_variable / bind_function only reach symbols present in the source."""

    def test_repeated_variable_shares_binding(self):
        expr = compile_expression("a+a")
        expr.bind_variable("a", 5)
        assert expr.evaluate() == 10
        assert expr.variable_names == ("a",)

    def test_undefined_variable(self):
        expr = compile_expression("a+1")
        with pytest.raises(UndefinedVariable) as exc:
            expr.bind_variable("b", 1.0)
        assert str(exc.value) == "undefined variable (b)"

    def test_variable_requires_a_number(self):
        expr = compile_expression("a")
        with pytest.raises(TypeError):
            expr.bind_variable("a", "1.0")
        with pytest.raises(TypeError):
            expr.bind_variable("a", True)

    def test_overloaded_functions_bind_independently(self):
        expr = compile_expression("f(x)+f(x,y)")
        expr.bind_variable("x", 2.0)
        expr.bind_variable("y", 3.0)
        expr.bind_function("f", 1, lambda a: a * 100)
        expr.bind_function("f", 2, lambda a, b: a + b)
        assert expr.evaluate() == 205.0
        assert set(expr.function_signatures) == {("f", 1), ("f", 2)}

    def test_undefined_function_arity(self):
        expr = compile_expression("f(1)")
        with pytest.raises(UndefinedFunction) as exc:
            expr.bind_function("f", 2, lambda a, b: a)
        assert str(exc.value) == "undefined function (f/2)"
        assert exc.value.details == {"name": "f", "arity": 2}

    def test_arity_mismatch(self):
        expr = compile_expression("f(1)")
        with pytest.raises(ArityMismatch):
            expr.bind_function("f", 1, lambda a, b: a + b)
        with pytest.raises(ArityMismatch):
            expr.bind_function("f", 1, lambda: 0)

    def test_flexible_signatures_are_accepted(self):
        expr = compile_expression("f(1) + g(1, 2)")

        def with_default(a, b=10):
            return a + b

        expr.bind_function("f", 1, with_default)
        expr.bind_function("g", 2, lambda *args: sum(args))
        assert expr.evaluate() == 14

    def test_builtin_callbacks(self):
        expr = compile_expression("sqrt(x) + hypot(3, 4)")
        expr.bind_variable("x", 16.0)
        expr.bind_function("sqrt", 1, math.sqrt)
        expr.bind_function("hypot", 2, math.hypot)
        assert expr.evaluate() == 9.0

    def test_callback_must_be_callable(self):
        expr = compile_expression("f()")
        with pytest.raises(TypeError):
            expr.bind_function("f", 0, 3.0)

    def test_rebinding_changes_next_result(self):
        expr = compile_expression("a*2")
        expr.bind_variable("a", 1.0)
        assert expr.evaluate() == 2.0
        assert expr.evaluate() == 2.0
        expr.bind_variable("a", 4.0)
        assert expr.evaluate() == 8.0

    def test_rebinding_function(self):
        expr = compile_expression("f(1)")
        expr.bind_function("f", 1, lambda a: a)
        assert expr.evaluate() == 1.0
        expr.bind_function("f", 1, lambda a: -a)
        assert expr.evaluate() == -1.0


class TestValidation:
    """evaluate() refuses to start until every symbol is bound."""

    def test_uninitialized_variable_is_named(self):
        expr = compile_expression("a+b")
        expr.bind_variable("a", 1.0)
        with pytest.raises(UninitializedVariable) as exc:
            expr.evaluate()
        assert str(exc.value) == "uninitialized variable (b)"
        assert exc.value.details["name"] == "b"

    def test_uninitialized_function_is_named(self):
        expr = compile_expression("g() + 1")
        with pytest.raises(UninitializedFunction) as exc:
            expr.validate()
        assert str(exc.value) == "uninitialized function (g/0)"

    def test_variables_checked_before_functions(self):
        expr = compile_expression("f(1) + a")
        with pytest.raises(UninitializedVariable):
            expr.validate()

    def test_callbacks_not_invoked_when_invalid(self):
        calls = []
        expr = compile_expression("f(1) + a")
        expr.bind_function("f", 1, lambda x: calls.append(x) or x)
        with pytest.raises(UninitializedVariable):
            expr.evaluate()
        assert calls == []

    def test_validation_is_cached(self):
        expr = compile_expression("a + b")
        expr.bind_variable("a", 1.0)
        expr.bind_variable("b", 2.0)
        expr.validate()
        # a symbol added after a successful validation is not re-checked
        expr.context.define_variable("c")
        expr.validate()
        assert expr.evaluate() == 3.0

    def test_expression_without_symbols_is_valid(self):
        expr = compile_expression("1+1")
        expr.validate()
        assert expr.evaluate() == 2.0

    def test_error_json_payload(self):
        expr = compile_expression("x")
        with pytest.raises(UninitializedVariable) as exc:
            expr.evaluate()
        payload = json.loads(exc.value.to_json())
        assert payload == {
            "kind": "uninitialized_variable",
            "message": "uninitialized variable (x)",
            "details": {"name": "x"},
        }


class TestDescribe:
    """Indented tree rendering, one node per line."""

    def test_nested_binary(self):
        expr = compile_expression("1+2*a")
        assert expr.describe() == (
            "Binary(+)\n"
            "  Literal(1.0)\n"
            "  Binary(*)\n"
            "    Literal(2.0)\n"
            "    Variable(a)\n"
        )

    def test_function_and_unary(self):
        expr = compile_expression("f(-x, 2)")
        assert expr.describe() == (
            "Function(f/2)\n"
            "  Unary(-)\n"
            "    Variable(x)\n"
            "  Literal(2.0)\n"
        )

    def test_indent_equals_depth(self):
        expr = compile_expression("((a-b)/c)*g(d+e)")
        lines = expr.describe().splitlines()
        depths = [(len(line) - len(line.lstrip(" "))) // 2 for line in lines]
        assert depths == [0, 1, 2, 3, 3, 2, 1, 2, 3, 3]

    def test_str_is_describe(self):
        expr = compile_expression("a")
        assert str(expr) == expr.describe() == "Variable(a)\n"


class TestConveniences:
    """Indexed assignment and call syntax on top of the canonical API."""

    def test_setitem_binds_variables_and_functions(self):
        expr = compile_expression("dist(a, b)")
        expr["a"] = 3.0
        expr["b"] = 4.0
        expr["dist"] = lambda x, y: math.sqrt(x * x + y * y)
        assert expr() == 5.0

    def test_setitem_arity_is_positional_parameter_count(self):
        expr = compile_expression("f(a) + f(a, a)")
        expr["a"] = 2.0
        expr["f"] = lambda x: x * 10
        with pytest.raises(UninitializedFunction) as exc:
            expr()
        assert exc.value.details == {"name": "f", "arity": 2}
        expr["f"] = lambda x, y: x * y
        assert expr() == 24.0

    def test_setitem_binds_only_the_counted_arity(self):
        expr = compile_expression("f(1) + f(1, 2)")
        expr["f"] = lambda x, y=0: x + y
        with pytest.raises(UninitializedFunction) as exc:
            expr.evaluate()
        assert exc.value.details == {"name": "f", "arity": 1}
        expr.bind_function("f", 1, lambda x: x)
        assert expr.evaluate() == 4.0

    def test_setitem_unknown_function(self):
        expr = compile_expression("a")
        with pytest.raises(UndefinedFunction):
            expr["g"] = lambda x: x

    def test_setitem_undeclared_arity(self):
        expr = compile_expression("f(1)")
        with pytest.raises(UndefinedFunction) as exc:
            expr["f"] = lambda x, y: x
        assert exc.value.details == {"name": "f", "arity": 2}

    def test_compile_alias(self):
        assert exprtree.compile is compile_expression


class TestComposite:
    """A full expression mixing every construct."""

    def expected(self):
        a, b = 3.2, 9.6
        dist1 = lambda dx: math.sqrt(dx * dx + dx * dx)
        dist2 = lambda dx, dy: math.sqrt(dx * dx + dy * dy)
        return dist2(math.sqrt(a), b) * (a + 5.8) / 3 + b / a - (235.6 + 3 * b) / -2.5 + dist1(a)

    def evaluate(self, source):
        expr = compile_expression(source)
        expr.bind_variable("a", 3.2)
        expr.bind_variable("b", 9.6)
        expr.bind_function("sqrt", 1, math.sqrt)
        expr.bind_function("dist", 1, lambda dx: math.sqrt(dx * dx + dx * dx))
        expr.bind_function("dist", 2, lambda dx, dy: math.sqrt(dx * dx + dy * dy))
        return expr.evaluate()

    def test_compact(self):
        source = "dist(sqrt(a),b)*(a+5.8)/3+b/a-(235.6+3*b)/-2.5+dist(a)"
        assert self.evaluate(source) == pytest.approx(self.expected())

    def test_spaced(self):
        source = ("dist ( sqrt ( a ) , b ) * ( a + 5.8 ) / 3 + b / a"
                  " - ( 235.6 + 3 * b) / - 2.5 + dist ( a )")
        assert self.evaluate(source) == pytest.approx(self.expected())
