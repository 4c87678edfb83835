"""
gatecalc Lexer
==============
Splits one statement into numeric literals, bare text and single-character
operators. Decimal text (`42`, `3.5`, `1e3`) is a NUMBER; everything else is TEXT
and is classified later by the tree builder.
"""
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from .nodes import OPERATOR_CHARS, OperatorKind


class TokenType(Enum):
    """Token classes of the gatecalc token stream."""
    NUMBER      = auto()   # 42, 3.5, 1e3
    TEXT        = auto()   # a, w1, nand
    OPERATOR    = auto()   # + - * / ( ) ^ % , & | ~ =
    EOF         = auto()


@dataclass
class Token:
    """A single token of one statement."""
    type: TokenType
    value: str
    col: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, C{self.col})"

    @property
    def operator(self) -> OperatorKind | None:
        if self.type != TokenType.OPERATOR:
            return None
        return OPERATOR_CHARS[self.value]


NUMBER_PATTERN = re.compile(r"(\d+\.?\d*|\.\d+)([eE]\d+)?")


def is_number(text: str) -> bool:
    """Plain decimal digits with an optional fraction and exponent.

    Words such as `inf` or `nan` and digit separators (`1_000`) are text.
    """
    return NUMBER_PATTERN.fullmatch(text) is not None


class Lexer:
    """
    Tokenizes a single gatecalc statement.

    Usage:
        tokens = Lexer("f(x) = x * 2").tokenize()
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def _current(self) -> str | None:
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    def _is_boundary(self, ch: str | None) -> bool:
        return ch is None or ch.isspace() or ch in OPERATOR_CHARS or ch == "#"

    def _read_text(self) -> Token:
        start = self.pos
        while not self._is_boundary(self._current()):
            self.pos += 1
        word = self.source[start:self.pos]
        token_type = TokenType.NUMBER if is_number(word) else TokenType.TEXT
        return Token(token_type, word, start + 1)

    def tokenize(self) -> list[Token]:
        """Tokenize the whole statement, terminated by an EOF token."""
        tokens = list(self._iter_tokens())
        tokens.append(Token(TokenType.EOF, "", len(self.source) + 1))
        return tokens

    def _iter_tokens(self) -> Iterator[Token]:
        while self.pos < len(self.source):
            ch = self._current()

            if ch.isspace():
                self.pos += 1
                continue

            # Comment runs to end of line
            if ch == "#":
                break

            if ch in OPERATOR_CHARS:
                yield Token(TokenType.OPERATOR, ch, self.pos + 1)
                self.pos += 1
                continue

            yield self._read_text()
