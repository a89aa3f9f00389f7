"""Parser for SMILE equations.

Grammar (levels come from ParserConfig, loosest first):
    equation = expr ";"
    expr     = level0
    levelN   = levelN+1 (OP_N levelN+1)*     # left-associative
    factor   = "(" expr ")"
             | ("+" | "-") factor
             | NUMBER
             | IDENT ["(" [expr ("," expr)*] ")"] ("[" expr "]")*

With the default levels ``+ -`` bind loosest and ``^`` tightest, so
``2+3*4`` is ``2+(3*4)`` and ``2^3^2`` is ``(2^3)^2``.
"""

import logging
from collections.abc import Callable

from . import ast
from .config import DEFAULT_CONFIG, ParserConfig
from .errors import DiagnosticList, InternalError, ParseError
from .lexer import TERMINATOR, Lexer
from .source import SourceFile
from .tokens import Token, TokenKind

logger = logging.getLogger(__name__)

ExprFn = Callable[[], ast.Expr | None]


def normalize(eqn: str) -> str:
    """Make sure the equation ends with a terminator."""
    if not eqn.rstrip().endswith(TERMINATOR):
        eqn += TERMINATOR
    return eqn


class Parser:
    """Precedence-climbing parser for a single equation.

    Failures are recorded in ``diagnostics`` and reported by returning None;
    ``parse()`` at module level turns them into a ParseError.
    """

    def __init__(
        self,
        name: str,
        eqn: str,
        config: ParserConfig = DEFAULT_CONFIG,
        block_comments: bool = False,
    ):
        text = normalize(eqn)
        self.source = SourceFile(name, text, appended=len(text) - len(eqn))
        self.diagnostics = DiagnosticList(self.source)
        self.lexer = Lexer(self.source, self.diagnostics, block_comments=block_comments)
        self.levels: list[ExprFn] = [
            self._binary_level(n, ops) for n, ops in enumerate(config.levels)
        ]
        self.levels.append(self._factor)

    def parse(self) -> ast.Expr | None:
        """Parse the equation; None means see ``diagnostics``."""
        try:
            expr = self._expr()
        except RecursionError:
            la = self.lexer.peek()
            logger.debug("%s: nesting limit hit at offset %d", self.source.name, la.pos)
            self._error(la, "expression nested too deeply")
            return None
        if expr is None:
            return None

        la = self.lexer.peek()
        if la.kind is TokenKind.EOF and not self.diagnostics:
            raise InternalError(f"parse {self.source.name!r}: missing terminator")
        if la.kind is not TokenKind.SEMI:
            self._error(la, f"expected end-of-equation, got {la}")
            return None
        while self.lexer.peek().kind is TokenKind.SEMI:
            self.lexer.next()
        la = self.lexer.peek()
        if la.kind is not TokenKind.EOF:
            self._error(la, f"expected end-of-equation, got {la}")
            return None

        if self.diagnostics:
            return None
        return expr

    def _expr(self) -> ast.Expr | None:
        return self.levels[0]()

    def _error(self, tok: Token, message: str) -> None:
        self.diagnostics.add(message, tok.pos)

    def _binary_level(self, n: int, ops: str) -> ExprFn:
        def parse_level() -> ast.Expr | None:
            if n + 1 >= len(self.levels):
                raise InternalError(
                    f"binary level {n} ({ops!r}) has no tighter level (max {len(self.levels)})"
                )
            operand = self.levels[n + 1]

            lhs = operand()
            if lhs is None:
                return None
            while (op := self._consume_any_of(ops)) is not None:
                rhs = operand()
                if rhs is None:
                    return None
                lhs = ast.BinaryExpr(x=lhs, op_pos=op.pos, op=ast.Op(op.text), y=rhs)
            return lhs

        return parse_level

    def _factor(self) -> ast.Expr | None:
        if (lparen := self._consume(TokenKind.LPAREN)) is not None:
            x = self._expr()
            if x is None:
                return None
            rparen = self._consume(TokenKind.RPAREN)
            if rparen is None:
                self._error(self.lexer.peek(), "expected ')'")
                return None
            return ast.ParenExpr(lparen=lparen.pos, x=x, rparen=rparen.pos)

        if (sign := self._consume_any_of("+-")) is not None:
            x = self._factor()
            if x is None:
                return None
            return ast.UnaryExpr(op_pos=sign.pos, op=ast.Op(sign.text), x=x)

        if (num := self._consume(TokenKind.NUMBER)) is not None:
            return ast.BasicLit(value_pos=num.pos, kind=ast.LitKind.NUMBER, value=num.text)

        if (name := self._consume(TokenKind.IDENT)) is not None:
            x: ast.Expr | None = ast.Ident(name_pos=name.pos, name=name.text)
            if (lparen := self._consume(TokenKind.LPAREN)) is not None:
                x = self._call(x, lparen)
            while x is not None and (lbrack := self._consume(TokenKind.LBRACKET)) is not None:
                x = self._index(x, lbrack)
            return x

        self._error(self.lexer.peek(), f"unexpected token {self.lexer.peek()}")
        return None

    def _call(self, fun: ast.Expr, lparen: Token) -> ast.Expr | None:
        args: list[ast.Expr] = []
        if (rparen := self._consume(TokenKind.RPAREN)) is not None:
            return ast.CallExpr(fun=fun, lparen=lparen.pos, args=args, rparen=rparen.pos)

        while True:
            arg = self._expr()
            if arg is None:
                la = self.lexer.peek()
                self._error(la, f"call: expected expression argument, got {la}")
                return None
            args.append(arg)
            if self._consume_any_of(",") is not None:
                continue
            if (rparen := self._consume(TokenKind.RPAREN)) is not None:
                return ast.CallExpr(fun=fun, lparen=lparen.pos, args=args, rparen=rparen.pos)
            la = self.lexer.peek()
            self._error(la, f"call: expected ',' or ')', got {la}")
            return None

    def _index(self, x: ast.Expr, lbrack: Token) -> ast.Expr | None:
        index = self._expr()
        if index is None:
            return None
        rbrack = self._consume(TokenKind.RBRACKET)
        if rbrack is None:
            self._error(self.lexer.peek(), "expected ']'")
            return None
        return ast.IndexExpr(x=x, lbrack=lbrack.pos, index=index, rbrack=rbrack.pos)

    def _consume_any_of(self, ops: str) -> Token | None:
        la = self.lexer.peek()
        if la.kind is TokenKind.OPERATOR and len(la.text) == 1 and la.text in ops:
            return self.lexer.next()
        return None

    def _consume(self, kind: TokenKind) -> Token | None:
        if self.lexer.peek().kind is kind:
            return self.lexer.next()
        return None


def parse(name: str, eqn: str, config: ParserConfig = DEFAULT_CONFIG) -> ast.Expr:
    """Parse one equation into an expression tree.

    ``name`` only labels diagnostics (usually the variable the equation
    belongs to).

    Raises:
        ParseError: with every diagnostic, sorted by position.
    """
    parser = Parser(name, eqn, config)
    expr = parser.parse()
    if parser.diagnostics:
        logger.debug("%s: %d diagnostic(s)", name, len(parser.diagnostics))
        raise ParseError(parser.diagnostics)
    if expr is None:
        raise InternalError(f"parse {name!r}: no expression and no diagnostics")
    return expr
