"""
Kaleido CLI Entrypoint.

This module provides the command-line interface for the Kaleido front end.
It parses source into an AST and prints it as JSON, or runs the interactive REPL.

Features:
    - Read source from `.kl` files or inline strings.
    - Lex and parse with the same error recovery as the REPL driving loop.
    - Output the AST as JSON to the console or a file.
    - Extend or override binary operator precedence with `--binop`.
    - Launch an interactive REPL.

Example usage:
    kaleido fib.kl
    kaleido -s "def add(a b) a+b" -p
    kaleido prog.kl -o prog.json --binop "/=40"
    kaleido --repl --verbose

Functions:
    run_kaleido(source: str, is_string: bool = False, out: str | None = None,
                pretty: bool = False, precedence: Mapping[str, int] | None = None) -> LoopResult:
        Runs the pipeline (lex → parse → JSON output).

    main() -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import sys
from collections.abc import Mapping

from kaleido.kaleido_ast import dump
from kaleido.kaleido_constants import DEFAULT_BINOP_PRECEDENCE, SOURCE_SUFFIX
from kaleido.kaleido_lexer import CharacterStream, Lexer
from kaleido.kaleido_parser import Parser
from kaleido.kaleido_repl import LoopResult, main_loop

logger = logging.getLogger(__name__)


def parse_binop_spec(spec: str) -> tuple[str, int]:
    """Parses an `OP=PREC` option value, e.g. `/=40`."""
    op, sep, prec_text = spec.rpartition("=")
    if not sep or len(op) != 1:
        raise argparse.ArgumentTypeError(
            f"Expected OP=PREC with a single-character operator, got {spec!r}"
        )
    try:
        prec = int(prec_text)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Precedence must be an integer: {spec!r}"
        ) from None
    if prec <= 0:
        raise argparse.ArgumentTypeError(f"Precedence must be positive: {spec!r}")
    return op, prec


def build_precedence(binops: list[tuple[str, int]] | None) -> dict[str, int]:
    table = dict(DEFAULT_BINOP_PRECEDENCE)
    for op, prec in binops or []:
        table[op] = prec
    return table


def run_kaleido(
    source: str,
    is_string: bool = False,
    out: str | None = None,
    pretty: bool = False,
    precedence: Mapping[str, int] | None = None,
) -> LoopResult:
    """
    Run the Kaleido front end: lex, parse, and write the AST as JSON.

    Args:
        source (str): Kaleido source code or path to a `.kl` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        out (str | None): Optional path to write the JSON. If None, prints to stdout.
        pretty (bool): If True, indents the JSON and prints a banner.
        precedence (Mapping[str, int] | None): Binary operator table; defaults to the built-in one.

    Returns:
        LoopResult: The parsed nodes and any syntax errors that were skipped.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.kl'.
    """
    if not is_string and not source.endswith(SOURCE_SUFFIX):
        raise ValueError(f"Only {SOURCE_SUFFIX} files are supported.")
    # 1. Read source
    if not is_string:
        # Undecodable bytes become lone surrogates and lex as unknown characters.
        with open(source, encoding="utf-8", errors="surrogateescape") as f:
            source = f.read()

    # 2. Lexing + parsing
    parser = Parser(Lexer(CharacterStream(source)), precedence)
    result = main_loop(parser)
    logger.debug(
        "Parsed %d top-level nodes with %d errors", len(result.nodes), len(result.errors)
    )

    # 3. Output
    text = json.dumps(dump(result.nodes), indent=2 if pretty else None)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        if pretty:
            print(f"(wrote to {out})")
    elif pretty:
        banner = "=" * 20
        print(f"{banner}\nKaleido AST\n{banner}\n{text}\n{banner}\n")
    else:
        print(text)
    return result


def main() -> None:
    """
    Entry point for the Kaleido CLI.

    Launches the REPL if no arguments are passed or `--repl` is given; otherwise
    parses the source and prints its AST. Exits with status 1 when any syntax error
    was reported.
    """
    if len(sys.argv) == 1:
        from kaleido.kaleido_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="kaleido")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Write JSON AST to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Indent JSON and show banners"
    )
    parser.add_argument(
        "--binop",
        action="append",
        type=parse_binop_spec,
        metavar="OP=PREC",
        help="Add or override a binary operator precedence (repeatable)",
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing a source",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Debug logging; REPL echoes parsed ASTs"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    precedence = build_precedence(args.binop)

    if args.repl or args.source is None:
        from kaleido.kaleido_repl import start_repl

        start_repl(precedence=precedence, verbose=args.verbose)
        return

    result = run_kaleido(
        source=args.source,
        is_string=args.string,
        out=args.out,
        pretty=args.pretty,
        precedence=precedence,
    )
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
