"""exprtree: compile arithmetic expressions into re-evaluable trees"""

__version__ = "0.1.0"

from exprtree.config import ExprConfig, load_config
from exprtree.errors import (
    ErrorKind, SourceLocation,
    ExpressionError, CompileError, ExpressionSyntaxError, EndOfInput,
    BindingError, UndefinedVariable, UndefinedFunction, ArityMismatch,
    EvaluationError, UninitializedVariable, UninitializedFunction,
    UnboundVariable, UnboundFunction, DivisionByZero,
)
from exprtree.expression import Expression, compile_expression

compile = compile_expression
