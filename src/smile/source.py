"""Source text and positions for a single equation.

Positions are plain 0-based offsets into the equation text. A SourceFile
owns the text plus a table of line-start offsets that the lexer fills in
as it scans, and converts offsets to line/column pairs on demand.
"""

from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """A resolved source position (line and column are 1-based)."""

    filename: str
    offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


class SourceFile:
    """Equation text with an incrementally built line table."""

    def __init__(self, name: str, text: str, appended: int = 0):
        self.name = name
        self.text = text
        # trailing characters added by the parser, not written by the user
        self.appended = appended
        self._lines: list[int] = [0]

    def add_line(self, offset: int) -> None:
        """Register the start of a new line.

        Offsets must arrive in increasing order; repeats (e.g. after the
        lexer backs up over a newline) are ignored.
        """
        if self._lines[-1] < offset <= len(self.text):
            self._lines.append(offset)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def position(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        index = bisect_right(self._lines, offset) - 1
        return Position(
            filename=self.name,
            offset=offset,
            line=index + 1,
            column=offset - self._lines[index] + 1,
        )

    def line_text(self, line: int) -> str:
        """Text of a 1-based line as the user wrote it, without its trailing newline."""
        start = self._lines[line - 1]
        end = self.text.find("\n", start)
        if end == -1:
            end = len(self.text)
        end = min(end, len(self.text) - self.appended)
        return self.text[start:end]
