"""Lexer for SMILE equations.

The lexer is a small state machine: each state consumes the characters of
one token class, emits a token and returns the next state. Tokens are
pulled one at a time through ``peek()``/``next()``, so scanning only runs as
far as the parser needs.

A newline ends the statement when the previous token could end one
(identifier, number, string or closing bracket), the same way Go inserts
semicolons. ``(a)(b)`` is scanned as ``(a)*(b)``.
"""

import logging
import unicodedata
from collections import deque
from collections.abc import Callable, Iterator
from typing import Optional

from .errors import DiagnosticList
from .source import SourceFile
from .tokens import ENDS_STATEMENT, Token, TokenKind

logger = logging.getLogger(__name__)

EOF = ""
DIGITS = "0123456789"
PUNCTUATION = ",+-*/^|&=<>()[]{}"
STRING_DELIM = '"'
TERMINATOR = ";"

_BRACKETS = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
}

State = Callable[[], Optional["State"]]


def is_identifier_start(ch: str) -> bool:
    return not (
        ch == EOF
        or ch.isdigit()
        or ch.isspace()
        or ch in PUNCTUATION
        or ch in (".", STRING_DELIM, TERMINATOR)
        or unicodedata.category(ch) == "Cc"
    )


def is_identifier_char(ch: str) -> bool:
    return not (
        ch == EOF
        or ch.isspace()
        or ch in PUNCTUATION
        or ch == TERMINATOR
        or unicodedata.category(ch) == "Cc"
    )


class Lexer:
    """Pull-based tokenizer with one token of lookahead."""

    def __init__(
        self,
        source: SourceFile,
        diagnostics: DiagnosticList | None = None,
        block_comments: bool = False,
    ):
        self.source = source
        self.text = source.text
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticList(source)
        self.block_comments = block_comments
        self.pos = 0  # current position in the text
        self.start = 0  # start of the token being scanned
        self.width = 0  # width of the last character read
        self.last: Token | None = None
        self._semi = False
        self._items: deque[Token] = deque()
        self._state: State | None = self._statement

    def peek(self) -> Token:
        """Return the next token without consuming it."""
        while not self._items:
            if self._state is None:
                # The stream has ended; keep answering with its EOF token.
                return self.last
            self._state = self._state()
        return self._items[0]

    def next(self) -> Token:
        """Consume and return the next token."""
        tok = self.peek()
        if self._items:
            self._items.popleft()
        return tok

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next()
            yield tok
            if tok.kind is TokenKind.EOF:
                return

    def tokenize(self) -> list[Token]:
        """Scan the whole text; the list ends with an EOF token."""
        return list(self)

    # ------------------------------------------------------------------
    # Character helpers
    # ------------------------------------------------------------------

    def _next(self) -> str:
        if self.pos >= len(self.text):
            self.width = 0
            return EOF
        ch = self.text[self.pos]
        self.pos += 1
        self.width = 1
        if ch == "\n":
            self.source.add_line(self.pos)
        return ch

    def _backup(self) -> None:
        self.pos -= self.width
        self.width = 0

    def _peek(self) -> str:
        ch = self._next()
        self._backup()
        return ch

    def _ignore(self) -> None:
        self.start = self.pos

    def _accept(self, valid: str) -> bool:
        ch = self._next()
        if ch != EOF and ch in valid:
            return True
        self._backup()
        return False

    def _accept_run(self, valid: str) -> None:
        while self._accept(valid):
            pass

    def _emit(self, kind: TokenKind, text: str | None = None) -> None:
        if text is None:
            text = self.text[self.start : self.pos]
        tok = Token(kind, self.start, text)
        self.last = tok
        self._items.append(tok)
        self._ignore()
        self._semi = kind in ENDS_STATEMENT

    def _insert(self, kind: TokenKind, text: str) -> None:
        """Emit a synthesized token at the current position.

        Unlike _emit this neither moves the token start nor changes
        whether a newline would end the statement.
        """
        tok = Token(kind, self.pos, text)
        self.last = tok
        self._items.append(tok)

    def _errorf(self, offset: int, message: str) -> None:
        logger.debug("%s: lexical error at offset %d: %s", self.source.name, offset, message)
        self.diagnostics.add(message, offset)
        self._ignore()
        self._emit(TokenKind.EOF)
        return None

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _statement(self) -> State | None:
        ch = self._next()
        if ch == EOF:
            if self._semi:
                self._emit(TokenKind.SEMI, TERMINATOR)
            self._emit(TokenKind.EOF)
            return None
        if ch == "/":
            if self._peek() == "/":
                self._next()
                return self._line_comment
            if self.block_comments and self._peek() == "*":
                self._next()
                return self._block_comment
            self._emit(TokenKind.OPERATOR)
        elif ch == TERMINATOR:
            self._emit(TokenKind.SEMI)
        elif ch.isspace():
            if ch == "\n" and self._semi:
                self._emit(TokenKind.SEMI, TERMINATOR)
            self._ignore()
        elif ch in DIGITS or ch == ".":
            self._backup()
            return self._number
        elif ch == STRING_DELIM:
            self._backup()
            return self._string
        elif ch in PUNCTUATION:
            self._backup()
            return self._operator
        elif is_identifier_start(ch):
            self._backup()
            return self._identifier
        else:
            return self._errorf(self.start, f"unrecognized char: {ch!r}")
        return self._statement

    def _operator(self) -> State:
        ch = self._next()
        self._emit(_BRACKETS.get(ch, TokenKind.OPERATOR))
        if ch == ")" and self._peek() == "(":
            self._insert(TokenKind.OPERATOR, "*")
        return self._statement

    def _line_comment(self) -> State:
        ch = self._next()
        while ch not in ("\n", EOF):
            ch = self._next()
        # leave the newline for _statement so it can end the statement
        self._backup()
        self._ignore()
        return self._statement

    def _block_comment(self) -> State:
        while True:
            ch = self._next()
            if ch == EOF:
                break
            if ch == "*" and self._peek() == "/":
                self._next()
                break
        self._ignore()
        return self._statement

    def _number(self) -> State:
        self._accept_run(DIGITS)
        self._accept(".")
        self._accept_run(DIGITS)
        if self._accept("eE"):
            self._accept("+-")
            self._accept_run(DIGITS)
        self._emit(TokenKind.NUMBER)
        return self._statement

    def _string(self) -> State | None:
        quote = self.pos
        delim = self._next()
        self._ignore()
        ch = self._next()
        while ch != delim and ch != EOF:
            ch = self._next()
        if ch == EOF:
            return self._errorf(quote, "unterminated string literal")
        self._backup()
        self._emit(TokenKind.STRING)
        self._next()
        self._ignore()
        return self._statement

    def _identifier(self) -> State:
        while is_identifier_char(self._next()):
            pass
        self._backup()
        self._emit(TokenKind.IDENT)
        return self._statement
