"""
In-memory view of a document: full text plus a line table for translating
between character offsets and (line, column) positions.
"""

from bisect import bisect_right
from typing import List

from autotex.models import Position, Range


class TextDocument:
    """
    Lines are split on "\\n". A trailing "\\r" is not part of a line's text,
    so columns never address the carriage return of a CRLF ending.
    """

    def __init__(self, text: str, uri: str = "untitled:document"):
        self.uri = uri
        self._text = text
        self._raw_lines = text.split("\n")
        self._lines = [line[:-1] if line.endswith("\r") else line for line in self._raw_lines]

        self._line_offsets: List[int] = []
        offset = 0
        for raw in self._raw_lines:
            self._line_offsets.append(offset)
            offset += len(raw) + 1

    @property
    def text(self) -> str:
        return self._text

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line_at(self, line: int) -> str:
        if line < 0 or line >= self.line_count:
            raise IndexError(f"Line {line} out of range (document has {self.line_count} lines)")
        return self._lines[line]

    def is_blank_line(self, line: int) -> bool:
        return self.line_at(line).strip() == ""

    def clamp_position(self, line: int, column: int) -> Position:
        line = min(max(line, 0), self.line_count - 1)
        column = min(max(column, 0), len(self._lines[line]))
        return Position(line=line, column=column)

    def validate_range(self, range_: Range) -> Range:
        """Returns `range_` clamped to the document bounds."""
        start = self.clamp_position(range_.start.line, range_.start.column)
        end = self.clamp_position(range_.end.line, range_.end.column)
        if end.is_before(start):
            end = start
        return Range(start=start, end=end)

    def line_range(self, start_line: int, end_line: int) -> Range:
        """Range from column 0 of `start_line` to the end of `end_line`, clamped."""
        start = self.clamp_position(start_line, 0)
        end_line = min(max(end_line, start.line), self.line_count - 1)
        end = Position(line=end_line, column=len(self._lines[end_line]))
        return Range(start=start, end=end)

    def offset_at(self, position: Position) -> int:
        pos = self.clamp_position(position.line, position.column)
        return self._line_offsets[pos.line] + pos.column

    def position_at(self, offset: int) -> Position:
        offset = min(max(offset, 0), len(self._text))
        line = bisect_right(self._line_offsets, offset) - 1
        return self.clamp_position(line, offset - self._line_offsets[line])

    def get_text(self, range_: Range = None) -> str:
        if range_ is None:
            return self._text
        return self._text[self.offset_at(range_.start) : self.offset_at(range_.end)]
