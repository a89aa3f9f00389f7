"""SMILE: parse system-dynamics equations into expression trees.

Pipeline: equation text -> tokens -> AST -> references / dependency graph.

Example:
    from smile import parse, references

    expr = parse("births", "population * birth_rate")
    references(expr)  # ["population", "birth_rate"]
"""

__version__ = "0.1.0"

from .ast import (
    BadExpr,
    BasicLit,
    BinaryExpr,
    CallExpr,
    Expr,
    Ident,
    IndexExpr,
    LitKind,
    Node,
    Op,
    ParenExpr,
    UnaryExpr,
    new_ident,
    unparse,
)
from .config import DEFAULT_CONFIG, ParserConfig
from .deps import (
    CircularDependencyError,
    DependencyGraph,
    build_graph,
    equation_references,
    normalize_name,
    references,
    to_dot,
)
from .errors import Diagnostic, DiagnosticList, InternalError, ParseError
from .lexer import Lexer
from .parser import Parser, parse
from .source import Position, SourceFile
from .tokens import Token, TokenKind
from .walk import children, inspect, walk

__all__ = [
    # Parse
    "parse",
    "Parser",
    "ParserConfig",
    "DEFAULT_CONFIG",
    "ParseError",
    "InternalError",
    "Diagnostic",
    "DiagnosticList",
    # Lex
    "Lexer",
    "Token",
    "TokenKind",
    "SourceFile",
    "Position",
    # AST
    "Node",
    "Expr",
    "BadExpr",
    "Ident",
    "BasicLit",
    "LitKind",
    "ParenExpr",
    "IndexExpr",
    "CallExpr",
    "UnaryExpr",
    "BinaryExpr",
    "Op",
    "new_ident",
    "unparse",
    # Walk
    "inspect",
    "walk",
    "children",
    # Dependencies
    "references",
    "equation_references",
    "normalize_name",
    "DependencyGraph",
    "CircularDependencyError",
    "build_graph",
    "to_dot",
]
