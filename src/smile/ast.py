"""AST nodes for SMILE equations.

Every node reports ``pos()``, the offset of its first character, and
``end()``, the offset just past its last one. Composite nodes compute both
from their children and brackets instead of storing a span, so a span always
covers what is inside it.
"""

from enum import Enum
from typing import Annotated
from typing import Literal as TypingLiteral

from pydantic import BaseModel, ConfigDict, Field

NO_POS = -1


class Op(str, Enum):
    POW = "^"
    MUL = "*"
    QUO = "/"
    ADD = "+"
    SUB = "-"


class LitKind(str, Enum):
    NUMBER = "number"
    STRING = "string"


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    def pos(self) -> int:
        raise NotImplementedError

    def end(self) -> int:
        raise NotImplementedError


class BadExpr(Node):
    """Placeholder for a span that could not be parsed."""

    type: TypingLiteral["bad"] = "bad"
    from_pos: int
    to_pos: int

    def pos(self) -> int:
        return self.from_pos

    def end(self) -> int:
        return self.to_pos


class Ident(Node):
    """Identifier as written (not normalized)."""

    type: TypingLiteral["ident"] = "ident"
    name_pos: int = NO_POS
    name: str

    def pos(self) -> int:
        return self.name_pos

    def end(self) -> int:
        return self.name_pos + len(self.name)


class BasicLit(Node):
    """Number or string literal. ``value`` is the verbatim source text."""

    type: TypingLiteral["lit"] = "lit"
    value_pos: int
    kind: LitKind = LitKind.NUMBER
    value: str

    def pos(self) -> int:
        return self.value_pos

    def end(self) -> int:
        return self.value_pos + len(self.value)


class ParenExpr(Node):
    type: TypingLiteral["paren"] = "paren"
    lparen: int
    x: "Expr"
    rparen: int

    def pos(self) -> int:
        return self.lparen

    def end(self) -> int:
        return self.rparen + 1


class IndexExpr(Node):
    """Subscript expression (e.g. ``pop[age]``)."""

    type: TypingLiteral["index"] = "index"
    x: "Expr"
    lbrack: int
    index: "Expr"
    rbrack: int

    def pos(self) -> int:
        return self.x.pos()

    def end(self) -> int:
        return self.rbrack + 1


class CallExpr(Node):
    """Function call (e.g. ``MIN(a, b)``)."""

    type: TypingLiteral["call"] = "call"
    fun: "Expr"
    lparen: int
    args: list["Expr"] = []
    rparen: int

    def pos(self) -> int:
        return self.fun.pos()

    def end(self) -> int:
        return self.rparen + 1


class UnaryExpr(Node):
    type: TypingLiteral["unary"] = "unary"
    op_pos: int
    op: Op
    x: "Expr"

    def pos(self) -> int:
        return self.op_pos

    def end(self) -> int:
        return self.x.end()


class BinaryExpr(Node):
    type: TypingLiteral["binary"] = "binary"
    x: "Expr"
    op_pos: int
    op: Op
    y: "Expr"

    def pos(self) -> int:
        return self.x.pos()

    def end(self) -> int:
        return self.y.end()


Expr = Annotated[
    BadExpr | Ident | BasicLit | ParenExpr | IndexExpr | CallExpr | UnaryExpr | BinaryExpr,
    Field(discriminator="type"),
]


# Rebuild models for forward references
ParenExpr.model_rebuild()
IndexExpr.model_rebuild()
CallExpr.model_rebuild()
UnaryExpr.model_rebuild()
BinaryExpr.model_rebuild()


def new_ident(name: str) -> Ident:
    """Ident without a source position, for trees built outside the parser."""
    return Ident(name=name)


def unparse(node: Node) -> str:
    """Rebuild equation text from a tree (no whitespace, explicit ``*``)."""
    match node:
        case Ident(name=name):
            return name
        case BasicLit(kind=LitKind.STRING, value=value):
            return f'"{value}"'
        case BasicLit(value=value) if value[-1:] in ("e", "E"):
            # "2e" followed by "+3" would rescan as one number
            return f"{value} "
        case BasicLit(value=value):
            return value
        case ParenExpr(x=x):
            return f"({unparse(x)})"
        case IndexExpr(x=x, index=index):
            return f"{unparse(x)}[{unparse(index)}]"
        case CallExpr(fun=fun, args=args):
            return f"{unparse(fun)}({','.join(unparse(a) for a in args)})"
        case UnaryExpr(op=op, x=x):
            return f"{op.value}{unparse(x)}"
        case BinaryExpr(x=x, op=op, y=y):
            return f"{unparse(x)}{op.value}{unparse(y)}"
        case _:
            raise TypeError(f"cannot unparse {type(node).__name__}")
