"""Symbol table shared by the parser and the compiled expression.

Variables are keyed by name, functions by (name, arity). Repeated
occurrences of the same key resolve to one slot, so they share a single
binding. The same name at two arities is two unrelated functions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from exprtree.ast_nodes import Function, FunctionCall, Node, Variable


@dataclass
class Context:
    variables: dict[str, Variable] = field(default_factory=dict)
    functions: dict[tuple[str, int], Function] = field(default_factory=dict)

    def define_variable(self, name: str) -> Variable:
        var = self.variables.get(name)
        if var is None:
            var = Variable(name)
            self.variables[name] = var
        return var

    def define_function(self, name: str, args: Sequence[Node]) -> FunctionCall:
        key = (name, len(args))
        fn = self.functions.get(key)
        if fn is None:
            fn = Function(name, len(args))
            self.functions[key] = fn
        return FunctionCall(fn, tuple(args))

    def lookup_variable(self, name: str) -> Optional[Variable]:
        return self.variables.get(name)

    def lookup_function(self, name: str, arity: int) -> Optional[Function]:
        return self.functions.get((name, arity))
