"""
Lexical analyzer for the Kaleido language.

This module provides core components for converting raw source text into a token stream:

Classes:
    CharacterStream: Lazy character source with one-character lookahead and line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens, one call at a time.

Features:
    - Skips whitespace and single-line comments (`#` through end of line)
    - Recognizes:
        * Identifiers (`[a-zA-Z][a-zA-Z0-9]*`) and the reserved words `def` / `extern`
        * Numbers (digits and decimal points, converted to float)
        * Any other character as a single-character token

The lexer never raises: every input character either becomes part of a token or is
skipped. Numeric text with several decimal points is converted using its longest
valid decimal prefix, the way C's `strtod` reads it (`1.2.3` → 1.2).

Example:
    >>> lexer = Lexer(CharacterStream("def f(x) x"))
    >>> lexer.next_token()
    Token(DEF, def)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - parse_number
    - token_hashmap
"""

import re
from typing import Any, TextIO

from kaleido.kaleido_constants import (
    CHAR,
    COMMENT_START,
    DIGITS,
    EOF,
    IDENT,
    LINE_ENDS,
    NUMBER,
    WHITESPACE,
    token_hashmap,
)

_DECIMAL_PREFIX = re.compile(r"[0-9]*\.?[0-9]*")


class CharacterStream:
    """
    Reads characters from a string or a text stream with line and column tracking.

    Text streams (e.g. `sys.stdin`) are read one character at a time and only when the
    lexer actually needs the next character, so interactive input is never read ahead.

    Attributes:
        source (str | TextIO): The input source.
        position (int): Number of characters consumed so far.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str | TextIO):
        """
        Initializes the character stream.

        Args:
            source (str | TextIO): Source text, or a readable text stream.
        """
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1
        self._lookahead = ""
        self._text = source if isinstance(source, str) else None

    def _fill(self) -> None:
        if self._lookahead:
            return
        if self._text is not None:
            if self.position < len(self._text):
                self._lookahead = self._text[self.position]
        else:
            self._lookahead = self.source.read(1)  # type: ignore[union-attr]

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            Exception: If reading past the end of the source.
        """
        self._fill()
        if not self._lookahead:
            raise Exception(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char, self._lookahead = self._lookahead, ""
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self) -> str:
        """
        Returns the next character without consuming it.

        Returns:
            str: The upcoming character, or an empty string at end of input.
        """
        self._fill()
        return self._lookahead

    def end_of_file(self) -> bool:
        """Checks whether the source has no characters left.

        Returns:
            bool: True once every character has been consumed.
        """
        return self.peek() == ""


class Token:
    """Represents a single lexical token in the Kaleido language.

    Attributes:
        type (str): The canonical token type ('EOF', 'DEF', 'EXTERN', 'IDENT', 'NUMBER', 'CHAR').
        value (str | float): Identifier text, parsed number, or the raw character.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str | float, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def is_char(self, char: str) -> bool:
        """True if this is the single-character token `char`."""
        return self.type == CHAR and self.value == char

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


def parse_number(text: str) -> float:
    """Converts scanned numeric text to a float using its longest valid decimal prefix.

    Args:
        text (str): A run of digits and decimal points.

    Returns:
        float: The parsed value; 0.0 when no digits precede the first invalid point.
    """
    prefix = _DECIMAL_PREFIX.match(text)
    digits = prefix.group() if prefix else ""
    if digits in ("", "."):
        return 0.0
    return float(digits)


def _is_ident_start(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_ident_char(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


class Lexer:
    """Lexical analyzer for the Kaleido language.

    The Lexer pulls characters from a CharacterStream and hands out one Token per
    `next_token()` call. It keeps no token history; the stream's one-character
    lookahead is its only buffered state.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        """
        Args:
            stream (CharacterStream): Characters to tokenize.
        """
        self.stream = stream

    def peek(self) -> str:
        """Returns the next character without consuming it ("" at end of input)."""
        return self.stream.peek()

    def advance(self) -> str:
        """Consumes and returns the next character."""
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in WHITESPACE:
                self.advance()
            elif self.peek() == COMMENT_START:
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Advances through the stream until the end of a comment line."""
        while not self.stream.end_of_file() and self.peek() not in LINE_ENDS:
            self.advance()

    def read_identifier(self) -> Token:
        """Reads `[a-zA-Z][a-zA-Z0-9]*` as an IDENT token, or DEF/EXTERN for reserved words."""
        line, col = self.stream.line, self.stream.column
        ident = ""
        while not self.stream.end_of_file() and _is_ident_char(self.peek()):
            ident += self.advance()
        if ident in token_hashmap:
            return Token(token_hashmap[ident], ident, line, col)
        return Token(IDENT, ident, line, col)

    def read_number(self) -> Token:
        """Reads a run of digits and decimal points as a NUMBER token.

        Returns:
            Token: The number token, valued by `parse_number`.
        """
        line, col = self.stream.line, self.stream.column
        num = ""
        while not self.stream.end_of_file() and (
            self.peek() in DIGITS or self.peek() == "."
        ):
            num += self.advance()
        return Token(NUMBER, parse_number(num), line, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token; an EOF token once the input is exhausted.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token(EOF, "EOF", self.stream.line, self.stream.column)

        ch = self.peek()

        # 1. Identifier or keyword
        if _is_ident_start(ch):
            return self.read_identifier()

        # 2. Number
        if ch in DIGITS or ch == ".":
            return self.read_number()

        # 3. Anything else is returned verbatim
        line, col = self.stream.line, self.stream.column
        return Token(CHAR, self.advance(), line, col)


__all__ = ["CharacterStream", "Lexer", "Token", "parse_number", "token_hashmap"]
