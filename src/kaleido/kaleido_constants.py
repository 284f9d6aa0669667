"""
Shared constants for the Kaleido lexer and parser.

Exports:
    - EOF, DEF, EXTERN, IDENT, NUMBER, CHAR: canonical token type names
    - token_hashmap: reserved word → token type
    - DEFAULT_BINOP_PRECEDENCE: built-in binary operator precedence table
    - WHITESPACE, DIGITS: character classes used by the lexer
"""

from types import MappingProxyType

EOF = "EOF"
DEF = "DEF"
EXTERN = "EXTERN"
IDENT = "IDENT"
NUMBER = "NUMBER"
CHAR = "CHAR"

token_hashmap: dict[str, str] = {
    "def": DEF,
    "extern": EXTERN,
}

# Higher binds tighter. Precedences must be positive.
DEFAULT_BINOP_PRECEDENCE = MappingProxyType(
    {
        "<": 10,
        "+": 20,
        "-": 20,
        "*": 40,
    }
)

WHITESPACE = " \t\r\n\v\f"
DIGITS = "0123456789"
COMMENT_START = "#"
LINE_ENDS = "\r\n"

SOURCE_SUFFIX = ".kl"
