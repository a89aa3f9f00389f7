"""Generic traversal over equation ASTs."""

from collections.abc import Callable, Iterator

from . import ast


def children(node: ast.Node) -> list[ast.Expr]:
    """Direct children of a node, in source order."""
    match node:
        case ast.ParenExpr(x=x):
            return [x]
        case ast.IndexExpr(x=x, index=index):
            return [x, index]
        case ast.CallExpr(fun=fun, args=args):
            return [fun, *args]
        case ast.UnaryExpr(x=x):
            return [x]
        case ast.BinaryExpr(x=x, y=y):
            return [x, y]
        case _:
            return []


def inspect(node: ast.Node, visit: Callable[[ast.Node], bool]) -> None:
    """Walk the tree pre-order, calling ``visit`` on each node.

    If ``visit`` returns a falsy value the node's children are skipped.
    """
    stack = [node]
    while stack:
        current = stack.pop()
        if visit(current):
            stack.extend(reversed(children(current)))


def walk(node: ast.Node) -> Iterator[ast.Node]:
    """Yield every node in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))
