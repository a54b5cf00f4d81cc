"""Source positions for XML CST and AST nodes.

Offsets are 0-indexed and half-open. Lines and columns are 1-indexed, and the
``end_line``/``end_column`` pair names the position just past the last character
of the span.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass


@dataclass(frozen=True)
class SourcePosition:
    """A span of characters in the parsed input.

    Attributes:
        start_offset: Offset of the first character.
        end_offset: Offset just past the last character.
        start_line: Line of the first character.
        end_line: Line of ``end_offset``.
        start_column: Column of the first character.
        end_column: Column of ``end_offset``.
    """
    start_offset: int
    end_offset: int
    start_line: int
    end_line: int
    start_column: int
    end_column: int

    def __repr__(self) -> str:
        return (f"{self.start_line}:{self.start_column}-"
                f"{self.end_line}:{self.end_column}")


class LineIndex:
    """Maps character offsets of an input string to (line, column) pairs.

    Example:
        >>> index = LineIndex("<a>\\n</a>")
        >>> index.line_column(4)
        (2, 1)
    """

    def __init__(self, text: str):
        self.text = text
        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == '\n':
                self._line_starts.append(i + 1)

    def line_column(self, offset: int) -> tuple[int, int]:
        """Return the 1-indexed (line, column) of ``offset``.

        Offsets outside the input are clamped to its bounds.
        """
        if offset < 0:
            offset = 0
        if offset > len(self.text):
            offset = len(self.text)
        line = bisect.bisect_right(self._line_starts, offset)
        column = offset - self._line_starts[line - 1] + 1
        return (line, column)

    def span(self, start: int, end: int) -> SourcePosition:
        """Build a SourcePosition for the half-open range ``[start, end)``."""
        start_line, start_column = self.line_column(start)
        end_line, end_column = self.line_column(end)
        return SourcePosition(
            start_offset=start,
            end_offset=end,
            start_line=start_line,
            end_line=end_line,
            start_column=start_column,
            end_column=end_column,
        )
