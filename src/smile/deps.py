"""Variable references and the model dependency graph.

Example:
    graph = build_graph({
        "births": "population * birth_rate",
        "birth_rate": ".08",
        "population": "100",
    })
    graph.dependencies("births")  # ["population", "birth_rate"]
    print(to_dot(graph))
"""

import logging
import re
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field

from . import ast
from .errors import ParseError
from .parser import parse
from .walk import inspect

logger = logging.getLogger(__name__)

# Runs of whitespace/underscores (and literal "\n" escapes from model
# files) collapse to a single underscore.
NAME_SEPARATOR_PATTERN = re.compile(r"(?:\\n|[ \t\r\n_])+")


class CircularDependencyError(Exception):
    """Raised when variables depend on each other in a cycle."""


def normalize_name(name: str) -> str:
    """Canonical form of a variable name (e.g. ``Birth Rate`` -> ``birth_rate``)."""
    return NAME_SEPARATOR_PATTERN.sub("_", name.strip()).lower()


def references(expr: ast.Expr) -> list[str]:
    """Normalized names of the variables an expression refers to.

    Function names are not references: the callee of a CallExpr is visited
    but skipped. Names are returned in source order, repeats included.
    """
    refs: list[str] = []
    callee_next = False

    def visit(node: ast.Node) -> bool:
        nonlocal callee_next
        if callee_next:
            # pre-order: the node right after a call is its callee
            callee_next = False
            return True
        if isinstance(node, ast.CallExpr):
            callee_next = True
        elif isinstance(node, ast.Ident):
            refs.append(normalize_name(node.name))
        return True

    inspect(expr, visit)
    return refs


def equation_references(name: str, eqn: str) -> list[str]:
    """Parse an equation and return the variables it refers to."""
    return references(parse(name, eqn))


@dataclass
class DependencyGraph:
    """Directed graph of variable dependencies.

    Names referenced but never added get an empty dependency list, so
    every node of the graph can be sorted.
    """

    _adjacency: dict[str, list[str]] = field(default_factory=dict)

    def add_variable(self, name: str, dependencies: list[str]) -> None:
        unique = list(dict.fromkeys(dependencies))
        self._adjacency[name] = unique
        for dep in unique:
            if dep not in self._adjacency:
                self._adjacency[dep] = []

    def __contains__(self, name: str) -> bool:
        return name in self._adjacency

    def __len__(self) -> int:
        return len(self._adjacency)

    @property
    def variables(self) -> list[str]:
        return list(self._adjacency)

    def dependencies(self, name: str) -> list[str]:
        return list(self._adjacency.get(name, []))

    def dependents(self, name: str) -> list[str]:
        return [node for node, deps in self._adjacency.items() if name in deps]

    def edges(self) -> list[tuple[str, str]]:
        """(dependency, dependent) pairs."""
        return [(dep, node) for node, deps in self._adjacency.items() for dep in deps]

    def topological_sort(self) -> list[str]:
        """Return variables ordered so dependencies come before dependents.

        Raises:
            CircularDependencyError: If the graph has a cycle
        """
        # Kahn's algorithm
        dependents: dict[str, list[str]] = {node: [] for node in self._adjacency}
        for node, deps in self._adjacency.items():
            for dep in deps:
                dependents[dep].append(node)

        in_degree = {node: len(deps) for node, deps in self._adjacency.items()}
        queue = deque(node for node, degree in in_degree.items() if degree == 0)
        result = []

        while queue:
            node = queue.popleft()
            result.append(node)
            for dependent in dependents[node]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        if len(result) != len(self._adjacency):
            remaining = sorted(set(self._adjacency) - set(result))
            raise CircularDependencyError(
                f"Circular dependency detected involving: {', '.join(remaining)}"
            )

        return result


def build_graph(equations: Mapping[str, str]) -> DependencyGraph:
    """Build the dependency graph for a model's equations.

    Args:
        equations: Variable name -> equation text

    Raises:
        ParseError: For the first equation that does not parse
    """
    graph = DependencyGraph()
    for name, eqn in equations.items():
        try:
            refs = equation_references(name, eqn)
        except ParseError:
            logger.warning("could not parse equation for %s: %r", name, eqn)
            raise
        logger.debug("var %s refs %s", name, refs)
        graph.add_variable(normalize_name(name), refs)
    return graph


def _quote(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def to_dot(graph: DependencyGraph, name: str = "model") -> str:
    """Render the graph in Graphviz DOT; edges point from dependency to dependent."""
    lines = [f"digraph {_quote(name)} {{"]
    for node in graph.variables:
        lines.append(f"    {_quote(node)};")
    for dep, node in graph.edges():
        lines.append(f"    {_quote(dep)} -> {_quote(node)};")
    lines.append("}")
    return "\n".join(lines) + "\n"
