"""Tokens produced by the equation lexer."""

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    EOF = "eof"
    IDENT = "ident"
    NUMBER = "num"
    SEMI = "semi"
    OPERATOR = "op"
    STRING = "lit"
    LBRACE = "lbrac"
    RBRACE = "rbrac"
    LPAREN = "lparen"
    RPAREN = "rparen"
    LBRACKET = "lsquare"
    RBRACKET = "rsquare"


# Kinds after which a newline terminates the statement.
ENDS_STATEMENT = frozenset(
    {
        TokenKind.IDENT,
        TokenKind.NUMBER,
        TokenKind.STRING,
        TokenKind.RPAREN,
        TokenKind.RBRACKET,
        TokenKind.RBRACE,
    }
)


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    pos: int  # offset of the first character
    text: str

    def __str__(self) -> str:
        return f"({self.kind.value} {self.text})"
