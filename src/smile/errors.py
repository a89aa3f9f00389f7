"""Diagnostics and exceptions raised while parsing equations."""

from collections.abc import Iterator
from dataclasses import dataclass

from .source import Position, SourceFile

TAB_WIDTH = 8


@dataclass(frozen=True)
class Diagnostic:
    message: str
    position: Position

    @property
    def offset(self) -> int:
        return self.position.offset

    def __str__(self) -> str:
        return f"{self.position}: error: {self.message}"

    def render(self, source: SourceFile) -> str:
        """Format the diagnostic with the offending line and a caret under it.

        Tabs are expanded to TAB_WIDTH columns so the caret lines up.
        """
        line = source.line_text(self.position.line)
        prefix = line[: self.position.column - 1].replace("\t", " " * TAB_WIDTH)
        expanded = line.replace("\t", " " * TAB_WIDTH)
        return f"{self}\n{expanded}\n{' ' * len(prefix)}^"


class DiagnosticList:
    """Diagnostics for one parse, ordered by position.

    Only the first diagnostic reported at a given offset is kept, so one
    fault does not cascade into a pile of messages at the same place.
    """

    def __init__(self, source: SourceFile):
        self.source = source
        self._items: list[Diagnostic] = []
        self._offsets: set[int] = set()

    def add(self, message: str, offset: int) -> None:
        position = self.source.position(offset)
        if position.offset in self._offsets:
            return
        self._offsets.add(position.offset)
        self._items.append(Diagnostic(message, position))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(sorted(self._items, key=lambda d: d.offset))

    def render(self) -> str:
        return "\n".join(d.render(self.source) for d in self)


class ParseError(Exception):
    """Raised when an equation cannot be parsed.

    Carries every diagnostic collected for the equation, sorted by position.
    """

    def __init__(self, diagnostics: DiagnosticList):
        self.diagnostics = list(diagnostics)
        self.source = diagnostics.source
        super().__init__(diagnostics.render())

    @property
    def name(self) -> str:
        return self.source.name


class InternalError(RuntimeError):
    """A broken parser invariant (a bug, not bad input)."""
