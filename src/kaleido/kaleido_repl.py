"""
Top-level driving loop and interactive REPL for Kaleido.

`main_loop` repeatedly looks at the parser's current token and dispatches:

    EOF      → stop
    ';'      → skip it
    'def'    → handle_definition
    'extern' → handle_extern
    other    → handle_top_level_expression

Each handler reports what it parsed. On a syntax error it prints the diagnostic
and skips exactly one token before trying again, so malformed input may produce a
cascade of follow-up errors.
"""

import json
import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field

from kaleido.kaleido_ast import TopLevel
from kaleido.kaleido_constants import DEF, EXTERN
from kaleido.kaleido_lexer import CharacterStream, Lexer
from kaleido.kaleido_parser import ParseError, Parser

logger = logging.getLogger(__name__)

PROMPT = "ready> "


@dataclass
class LoopResult:
    """Everything the driving loop produced: parsed nodes and recovered errors, in order."""

    nodes: list[TopLevel] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def report_error(parser: Parser, error: ParseError, result: LoopResult) -> None:
    print(f"Error: {error}", file=sys.stderr)
    logger.debug("Recovering from %r by skipping %r", error.message, parser.cur_tok)
    result.errors.append(error)
    parser.get_next_token()


def _report_parsed(message: str, node: TopLevel, verbose: bool) -> None:
    print(message, file=sys.stderr)
    if verbose:
        print(json.dumps(node.to_dict()))


def handle_definition(parser: Parser, result: LoopResult, verbose: bool = False) -> None:
    try:
        node = parser.parse_definition()
    except ParseError as e:
        report_error(parser, e, result)
        return
    result.nodes.append(node)
    _report_parsed("Parsed a function definition.", node, verbose)


def handle_extern(parser: Parser, result: LoopResult, verbose: bool = False) -> None:
    try:
        node = parser.parse_extern()
    except ParseError as e:
        report_error(parser, e, result)
        return
    result.nodes.append(node)
    _report_parsed("Parsed an extern.", node, verbose)


def handle_top_level_expression(
    parser: Parser, result: LoopResult, verbose: bool = False
) -> None:
    try:
        node = parser.parse_top_level_expr()
    except ParseError as e:
        report_error(parser, e, result)
        return
    result.nodes.append(node)
    _report_parsed("Parsed a top-level expr.", node, verbose)


def main_loop(
    parser: Parser,
    prompt: str | None = None,
    verbose: bool = False,
    result: LoopResult | None = None,
) -> LoopResult:
    """Drives `parser` over its whole input.

    Args:
        parser (Parser): A primed parser.
        prompt (str | None): Printed to stderr before each top-level construct.
        verbose (bool): Also print each parsed node as JSON on stdout.
        result (LoopResult | None): Accumulator to append to; a new one by default.

    Returns:
        LoopResult: Parsed nodes and the syntax errors that were skipped over.
    """
    if result is None:
        result = LoopResult()
    while True:
        if prompt:
            print(prompt, end="", file=sys.stderr, flush=True)
        tok = parser.cur_tok
        if parser.at_end():
            return result
        if tok.is_char(";"):
            parser.get_next_token()
        elif tok.type == DEF:
            handle_definition(parser, result, verbose)
        elif tok.type == EXTERN:
            handle_extern(parser, result, verbose)
        else:
            handle_top_level_expression(parser, result, verbose)


def start_repl(
    precedence: Mapping[str, int] | None = None, verbose: bool = False
) -> LoopResult:
    """Runs the driving loop over standard input until EOF or Ctrl-C."""
    print("Kaleido REPL. Press Ctrl-D to leave.", file=sys.stderr)
    result = LoopResult()
    reconfigure = getattr(sys.stdin, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(errors="surrogateescape")
    try:
        print(PROMPT, end="", file=sys.stderr, flush=True)
        parser = Parser(Lexer(CharacterStream(sys.stdin)), precedence)
        main_loop(parser, prompt=PROMPT, verbose=verbose, result=result)
    except KeyboardInterrupt:
        pass
    print("\nExiting Kaleido REPL.", file=sys.stderr)
    return result


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
