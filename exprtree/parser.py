"""Recursive-descent expression compiler.

Grammar, lowest precedence first:

    sum     := product (('+' | '-') product)*
    product := atom (('*' | '/') atom)*
    atom    := number
             | identifier ('(' (sum (',' sum)*)? ')')?
             | '-' atom
             | '(' sum ')'

Whitespace may appear before any token. An identifier followed by '(' is
always a function call, otherwise a variable. Unary minus applies to a
single atom, so ``-a*b`` is ``(-a)*b``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from exprtree.ast_nodes import (
    Binary, BinaryOperator, Literal, Node, Unary, UnaryOperator,
)
from exprtree.config import ExprConfig
from exprtree.context import Context
from exprtree.cursor import Cursor
from exprtree.errors import ExpressionSyntaxError, SourceLocation

logger = logging.getLogger(__name__)


def _is_digit(ch: Optional[str]) -> bool:
    return ch is not None and ch.isascii() and ch.isdigit()


def _is_ident_start(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_ident_part(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


class Parser:
    """Compiles one source string into a tree plus its symbol table."""

    def __init__(self, source: str, config: Optional[ExprConfig] = None,
                 filename: str = "<expr>"):
        self.cursor = Cursor(source, filename)
        self.context = Context()
        self.number: Callable[[str], Any] = (config or ExprConfig()).number_factory()

    def _error(self, message: str, location: Optional[SourceLocation] = None) -> ExpressionSyntaxError:
        return ExpressionSyntaxError(message, location or self.cursor.location())

    def _match(self, *chars: str) -> Optional[str]:
        """Skip whitespace, then consume and return the next char if it is one of ``chars``."""
        self.cursor.skip_whitespace()
        for ch in chars:
            if self.cursor.at(ch):
                return self.cursor.advance()
        return None

    # -------------------------------------------------------------------
    # Top-level
    # -------------------------------------------------------------------

    def parse(self) -> Node:
        root = self._parse_sum()
        self.cursor.skip_whitespace()
        if not self.cursor.is_empty():
            raise self._error("syntax error")
        return root

    # -------------------------------------------------------------------
    # Precedence levels
    # -------------------------------------------------------------------

    def _parse_sum(self) -> Node:
        left = self._parse_product()
        while (op := self._match("+", "-")) is not None:
            right = self._parse_product()
            left = Binary(BinaryOperator(op), left, right)
        return left

    def _parse_product(self) -> Node:
        left = self._parse_atom()
        while (op := self._match("*", "/")) is not None:
            right = self._parse_atom()
            left = Binary(BinaryOperator(op), left, right)
        return left

    def _parse_atom(self) -> Node:
        self.cursor.skip_whitespace()
        ch = self.cursor.peek()

        if _is_digit(ch):
            return self._parse_number()

        if _is_ident_start(ch):
            return self._parse_identifier()

        if ch == "-":
            self.cursor.advance()
            return Unary(UnaryOperator.NEG, self._parse_atom())

        if ch == "(":
            self.cursor.advance()
            expr = self._parse_sum()
            if self._match(")") is None:
                raise self._error("closing parenthesis expected")
            return expr

        raise self._error("value expected")

    # -------------------------------------------------------------------
    # Leaves
    # -------------------------------------------------------------------

    def _read_digits(self) -> str:
        digits = ""
        while _is_digit(self._peek_char()):
            digits += self.cursor.advance()
        return digits

    def _peek_char(self) -> Optional[str]:
        return None if self.cursor.is_empty() else self.cursor.peek()

    def _parse_number(self) -> Literal:
        loc = self.cursor.location()
        text = self._read_digits()
        if self.cursor.at("."):
            text += self.cursor.advance()
            text += self._read_digits()
        if self._peek_char() in ("e", "E"):
            nxt = self.cursor.peek_ahead(1)
            if _is_digit(nxt) or (nxt in ("+", "-") and _is_digit(self.cursor.peek_ahead(2))):
                text += self.cursor.advance()
                if not _is_digit(nxt):
                    text += self.cursor.advance()
                text += self._read_digits()
        try:
            value = self.number(text)
        except (ValueError, ArithmeticError):
            raise self._error(f"invalid number literal '{text}'", loc) from None
        return Literal(value)

    def _parse_identifier(self) -> Node:
        name = ""
        while not self.cursor.is_empty() and _is_ident_part(self.cursor.peek()):
            name += self.cursor.advance()

        if self._match("(") is None:
            return self.context.define_variable(name)

        args: list[Node] = []
        while True:
            self.cursor.skip_whitespace()
            ch = self.cursor.peek()
            if ch == ")":
                self.cursor.advance()
                return self.context.define_function(name, args)
            if args:
                if ch != ",":
                    raise self._error("comma expected")
                self.cursor.advance()
            args.append(self._parse_sum())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse(source: str, config: Optional[ExprConfig] = None,
          filename: str = "<expr>") -> tuple[Node, Context]:
    """Parse expression source into a tree and the symbol table it references."""
    logger.debug("Compiling %r", source)
    parser = Parser(source, config, filename)
    root = parser.parse()
    logger.debug(
        "Compiled %r: %d variable(s), %d function(s)",
        source, len(parser.context.variables), len(parser.context.functions),
    )
    return root, parser.context
