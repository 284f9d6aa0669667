"""
Kaleido Language Parser

Parses Kaleido tokens into abstract syntax trees (ASTs).

The parser pulls tokens from a `Lexer` on demand and keeps exactly one token of
lookahead in `cur_tok`. Primary expressions are parsed by recursive descent; binary
operators are resolved by precedence climbing over a per-parser precedence table,
so there is no grammar rule per operator.

Grammar
-------
    toplevel    ::= definition | external | expression | ';'
    definition  ::= 'def' prototype expression
    external    ::= 'extern' prototype
    prototype   ::= identifier '(' identifier* ')'
    expression  ::= primary binoprhs
    binoprhs    ::= (binop primary)*
    primary     ::= identifierexpr | numberexpr | parenexpr
    identifierexpr ::= identifier | identifier '(' (expression (',' expression)*)? ')'
    parenexpr   ::= '(' expression ')'

Parser Behavior
---------------
- Every `parse_*` method expects `cur_tok` to hold the first unconsumed token on
  entry and leaves it on the first unconsumed token on exit.
- Failures raise `ParseError` naming the expected construct. Nothing is recovered
  here: a failure anywhere aborts the enclosing top-level construct, and `cur_tok`
  stays wherever the failing rule stopped. Recovery is the driving loop's job
  (see `kaleido.kaleido_repl.main_loop`).

Entry Points
------------
- `parse()`: Parse a whole input into top-level nodes, failing fast.
- `parse_definition()`, `parse_extern()`, `parse_top_level_expr()`: one construct.
- `parse_expression()`: a single expression.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from kaleido.kaleido_ast import (
    AstNode,
    BinaryOp,
    Call,
    FunctionDef,
    NumberLiteral,
    Prototype,
    TopLevel,
    VariableRef,
)
from kaleido.kaleido_constants import (
    CHAR,
    DEF,
    DEFAULT_BINOP_PRECEDENCE,
    EOF,
    EXTERN,
    IDENT,
    NUMBER,
)
from kaleido.kaleido_lexer import CharacterStream, Lexer, Token

logger = logging.getLogger(__name__)


class ParseError(SyntaxError):
    """A grammar violation.

    Attributes:
        message (str): What the parser expected, e.g. "expected ')'".
        token (Token | None): The token the parser was looking at.
    """

    def __init__(self, message: str, token: Token | None = None):
        self.message = message
        self.token = token
        if token is not None:
            super().__init__(f"{message} at line {token.line}, col {token.col}")
        else:
            super().__init__(message)


class Parser:
    """
    Kaleido Parser Class

    Attributes
    ----------
    lexer : Lexer
        Token source, read one token at a time.
    cur_tok : Token
        The current lookahead token.
    binop_precedence : dict[str, int]
        Binary operator character → precedence. Higher binds tighter.
    """

    def __init__(
        self, lexer: Lexer, precedence: Mapping[str, int] | None = None
    ) -> None:
        self.lexer = lexer
        table = DEFAULT_BINOP_PRECEDENCE if precedence is None else precedence
        for op, prec in table.items():
            if len(op) != 1:
                raise ValueError(f"Binary operator must be a single character: {op!r}")
            if prec <= 0:
                raise ValueError(f"Precedence for {op!r} must be positive, got {prec}")
        self.binop_precedence: dict[str, int] = dict(table)
        self.cur_tok: Token = self.lexer.next_token()

    @classmethod
    def from_source(
        cls, source: str, precedence: Mapping[str, int] | None = None
    ) -> Parser:
        """Builds a parser that reads from an in-memory source string.

        Args:
            source (str): Kaleido source text.
            precedence (Mapping[str, int] | None): Binary operator table; the
                default table when omitted.

        Returns:
            Parser: A parser whose `cur_tok` holds the first token of `source`.
        """
        return cls(Lexer(CharacterStream(source)), precedence)

    def get_next_token(self) -> Token:
        """Reads another token from the lexer into `cur_tok` and returns it."""
        self.cur_tok = self.lexer.next_token()
        return self.cur_tok

    def get_tok_precedence(self) -> int:
        """Precedence of the pending binary operator, or -1 if `cur_tok` is not one."""
        if self.cur_tok.type != CHAR:
            return -1
        return self.binop_precedence.get(str(self.cur_tok.value), -1)

    def expect_char(self, char: str, message: str) -> None:
        """Raises ParseError(message) unless `cur_tok` is `char`. Consumes nothing."""
        if not self.cur_tok.is_char(char):
            raise ParseError(message, self.cur_tok)

    # Expressions

    def parse_number_expr(self) -> NumberLiteral:
        """numberexpr ::= number"""
        result = NumberLiteral(float(self.cur_tok.value))
        self.get_next_token()
        return result

    def parse_paren_expr(self) -> AstNode:
        """parenexpr ::= '(' expression ')'"""
        self.get_next_token()  # eat (
        inner = self.parse_expression()
        self.expect_char(")", "expected ')'")
        self.get_next_token()  # eat )
        return inner

    def parse_identifier_expr(self) -> AstNode:
        """
        identifierexpr
            ::= identifier
            ::= identifier '(' expression* ')'
        """
        name = str(self.cur_tok.value)
        self.get_next_token()  # eat identifier

        if not self.cur_tok.is_char("("):
            return VariableRef(name)

        self.get_next_token()  # eat (
        args: list[AstNode] = []
        if not self.cur_tok.is_char(")"):
            while True:
                args.append(self.parse_expression())
                if self.cur_tok.is_char(")"):
                    break
                self.expect_char(",", "expected ')' or ',' in argument list")
                self.get_next_token()

        self.get_next_token()  # eat )
        return Call(name, tuple(args))

    def parse_primary(self) -> AstNode:
        """
        primary
            ::= identifierexpr
            ::= numberexpr
            ::= parenexpr
        """
        if self.cur_tok.type == IDENT:
            return self.parse_identifier_expr()
        if self.cur_tok.type == NUMBER:
            return self.parse_number_expr()
        if self.cur_tok.is_char("("):
            return self.parse_paren_expr()
        raise ParseError("unexpected token when expecting an expression", self.cur_tok)

    def parse_expression(self) -> AstNode:
        """expression ::= primary binoprhs"""
        lhs = self.parse_primary()
        return self.parse_bin_op_rhs(0, lhs)

    def parse_bounded_expression(self) -> AstNode:
        """Parses an expression, reporting runaway nesting as a ParseError.

        Parenthesized and call expressions recurse once per nesting level, so input
        nested deeper than the interpreter stack would otherwise escape as
        RecursionError.

        Raises:
            ParseError: On a syntax error, or "expression nested too deeply".
        """
        try:
            return self.parse_expression()
        except RecursionError:
            raise ParseError("expression nested too deeply", self.cur_tok) from None

    def parse_bin_op_rhs(self, min_prec: int, lhs: AstNode) -> AstNode:
        """
        Folds `(binop primary)*` into `lhs` by precedence climbing.

        Only operators binding at least as tightly as `min_prec` are consumed. When the
        operator after the right operand binds tighter than the current one, that
        operand first absorbs it (recursing with `prec + 1`); otherwise operators of
        equal precedence group to the left.
        """
        while True:
            tok_prec = self.get_tok_precedence()
            if tok_prec < min_prec:
                return lhs

            bin_op = str(self.cur_tok.value)
            self.get_next_token()  # eat binop

            rhs = self.parse_primary()

            next_prec = self.get_tok_precedence()
            if tok_prec < next_prec:
                rhs = self.parse_bin_op_rhs(tok_prec + 1, rhs)

            lhs = BinaryOp(bin_op, lhs, rhs)

    # Top-level constructs

    def parse_prototype(self) -> Prototype:
        """prototype ::= id '(' id* ')'"""
        if self.cur_tok.type != IDENT:
            raise ParseError("expected function name in prototype", self.cur_tok)
        name = str(self.cur_tok.value)
        self.get_next_token()

        self.expect_char("(", "expected '(' in prototype")

        params: list[str] = []
        while self.get_next_token().type == IDENT:
            params.append(str(self.cur_tok.value))

        self.expect_char(")", "expected ')' in prototype")
        self.get_next_token()  # eat )
        return Prototype(name, tuple(params))

    def parse_definition(self) -> FunctionDef:
        """definition ::= 'def' prototype expression"""
        self.get_next_token()  # eat def
        proto = self.parse_prototype()
        body = self.parse_bounded_expression()
        logger.debug("Parsed definition of %r/%d", proto.name, proto.arity)
        return FunctionDef(proto, body)

    def parse_extern(self) -> Prototype:
        """external ::= 'extern' prototype"""
        self.get_next_token()  # eat extern
        proto = self.parse_prototype()
        logger.debug("Parsed extern %r/%d", proto.name, proto.arity)
        return proto

    def parse_top_level_expr(self) -> FunctionDef:
        """toplevelexpr ::= expression, wrapped in an anonymous function."""
        body = self.parse_bounded_expression()
        logger.debug("Parsed top-level expression")
        return FunctionDef.anonymous(body)

    def parse_top_level(self) -> TopLevel:
        """Dispatches on `cur_tok` to the definition, extern, or expression rule."""
        if self.cur_tok.type == DEF:
            return self.parse_definition()
        if self.cur_tok.type == EXTERN:
            return self.parse_extern()
        return self.parse_top_level_expr()

    def at_end(self) -> bool:
        """True once `cur_tok` is the EOF token."""
        return self.cur_tok.type == EOF

    def parse(self) -> list[TopLevel]:
        """Parse the whole input and return its top-level nodes.

        Top-level `;` separators are skipped. Raises on the first syntax error.
        """
        nodes: list[TopLevel] = []
        while not self.at_end():
            if self.cur_tok.is_char(";"):
                self.get_next_token()
                continue
            nodes.append(self.parse_top_level())
        return nodes


__all__ = ["ParseError", "Parser"]
