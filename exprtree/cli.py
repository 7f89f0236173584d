"""exprtree CLI: Command-line front end for the expression compiler.

Commands:
  exprtree check <expr>                        Compile and list declared symbols
  exprtree tree <expr>                         Print the compiled tree
  exprtree eval <expr> [-s a=1 ...] [--math]   Bind and evaluate
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import os
import sys
from typing import Any, Optional

from exprtree import __version__
from exprtree.config import NUMBER_TYPES, ExprConfig, load_config
from exprtree.errors import ExpressionError
from exprtree.expression import Expression, compile_expression

logger = logging.getLogger(__name__)

MATH_CONSTANTS = ("pi", "e", "tau")


def _resolve_config(args: argparse.Namespace) -> ExprConfig:
    config = load_config(args.config)
    if args.number_type:
        config.number_type = args.number_type
    if args.allow_nonfinite:
        config.check_division = False
    if args.json:
        config.output_format = "json"
    if args.log_level:
        config.log_level = args.log_level
    return config


def _read_source(args: argparse.Namespace) -> str:
    if args.file:
        with open(args.file, "r") as f:
            return f.read().strip()
    return args.expression


def _emit(config: ExprConfig, payload: dict[str, Any], text: str) -> None:
    if config.output_format == "json":
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(text)


def _report_error(config: ExprConfig, error: ExpressionError) -> int:
    if config.output_format == "json":
        print(error.to_json())
    else:
        print(f"error: {error}", file=sys.stderr)
    return 1


def _report_callback_error(config: ExprConfig, error: Exception) -> int:
    message = f"callback failed: {error}"
    if config.output_format == "json":
        print(json.dumps({"kind": "callback_error", "message": message,
                          "details": {"type": type(error).__name__}}, indent=2))
    else:
        print(f"error: {message}", file=sys.stderr)
    return 1


def _compile(args: argparse.Namespace, config: ExprConfig) -> Expression:
    return compile_expression(_read_source(args), config, filename=args.file or "<expr>")


def _symbols(expr: Expression) -> dict[str, Any]:
    return {
        "variables": list(expr.variable_names),
        "functions": [{"name": name, "arity": arity} for name, arity in expr.function_signatures],
    }


def cmd_check(args: argparse.Namespace, config: ExprConfig) -> int:
    """Compile only and report the declared symbols."""
    try:
        expr = _compile(args, config)
    except ExpressionError as e:
        return _report_error(config, e)

    symbols = _symbols(expr)
    lines = ["ok"]
    if expr.variable_names:
        lines.append("variables: " + ", ".join(expr.variable_names))
    if expr.function_signatures:
        lines.append("functions: " + ", ".join(f"{n}/{a}" for n, a in expr.function_signatures))
    _emit(config, {"status": "ok", **symbols}, "\n".join(lines))
    return 0


def cmd_tree(args: argparse.Namespace, config: ExprConfig) -> int:
    """Print the compiled tree."""
    try:
        expr = _compile(args, config)
    except ExpressionError as e:
        return _report_error(config, e)
    tree = expr.describe()
    _emit(config, {"tree": tree.splitlines()}, tree.rstrip("\n"))
    return 0


def _bind_math(expr: Expression, explicit: set[str]) -> None:
    for name in MATH_CONSTANTS:
        if name in expr.variable_names and name not in explicit:
            expr.bind_variable(name, getattr(math, name))
    for name, arity in expr.function_signatures:
        fn = getattr(math, name, None)
        if callable(fn):
            expr.bind_function(name, arity, fn)


def cmd_eval(args: argparse.Namespace, config: ExprConfig) -> int:
    """Bind variables (and optionally math functions), then evaluate."""
    number = config.number_factory()
    try:
        expr = _compile(args, config)
        explicit: set[str] = set()
        for assignment in args.set or []:
            name, sep, text = assignment.partition("=")
            if not sep:
                print(f"error: expected NAME=VALUE, got '{assignment}'", file=sys.stderr)
                return 1
            try:
                value = number(text.strip())
            except (ValueError, ArithmeticError):
                print(f"error: invalid value for '{name}': '{text}'", file=sys.stderr)
                return 1
            expr.bind_variable(name.strip(), value)
            explicit.add(name.strip())
        if args.math:
            _bind_math(expr, explicit)
        result = expr.evaluate()
    except ExpressionError as e:
        return _report_error(config, e)
    except (ValueError, ArithmeticError) as e:
        # raised by a bound callback, e.g. math.sqrt of a negative number
        return _report_callback_error(config, e)

    _emit(config, {"result": result}, str(result))
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="exprtree",
        description="exprtree: compile and evaluate arithmetic expressions",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Config file (default: nearest .exprtreerc.yml)")
    parser.add_argument("--number-type", dest="number_type", choices=sorted(NUMBER_TYPES),
                        help="Numeric type for literals and values")
    parser.add_argument("--allow-nonfinite", action="store_true", dest="allow_nonfinite",
                        help="Let division by zero produce inf/nan instead of failing")
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    parser.add_argument("--log-level", dest="log_level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_source(p: argparse.ArgumentParser) -> None:
        p.add_argument("expression", nargs="?", default="", help="Expression source text")
        p.add_argument("-f", "--file", help="Read the expression from a file")

    # check
    p_check = subparsers.add_parser("check", help="Compile and list declared symbols")
    add_source(p_check)
    p_check.set_defaults(func=cmd_check)

    # tree
    p_tree = subparsers.add_parser("tree", help="Print the compiled expression tree")
    add_source(p_tree)
    p_tree.set_defaults(func=cmd_tree)

    # eval
    p_eval = subparsers.add_parser("eval", help="Bind variables and evaluate")
    add_source(p_eval)
    p_eval.add_argument("-s", "--set", action="append", metavar="NAME=VALUE",
                        help="Bind a variable (repeatable)")
    p_eval.add_argument("--math", action="store_true",
                        help="Bind functions and constants from the math module by name")
    p_eval.set_defaults(func=cmd_eval)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = _resolve_config(args)
    if getattr(args, "file", None) and not os.path.isfile(args.file):
        print(json.dumps({"error": f"File not found: {args.file}"}))
        sys.exit(1)
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    logger.debug("Running %s with %s", args.command, config)

    sys.exit(args.func(args, config))


if __name__ == "__main__":
    main()
