import os
from typing import Any

import pytest

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop

from kaleido.kaleido_lexer import CharacterStream, Lexer, Token


def tokenize(source: str) -> list[Token]:
    """All tokens of `source`, without the trailing EOF."""
    lexer = Lexer(CharacterStream(source))
    tokens = []
    while True:
        tok = lexer.next_token()
        if tok.type == "EOF":
            break
        tokens.append(tok)
    return tokens


@pytest.fixture  # type: ignore[misc]
def lex() -> Any:
    return tokenize
