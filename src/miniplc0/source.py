"""
Source Buffer and Position Tracking
===================================

The whole source unit is loaded once into a `SourceBuffer`. Both the
tokenizer and the analyzer address it through flat character offsets;
line/column coordinates are derived from those offsets on demand, so a
position is never stored separately from the cursor that produced it.

Positions are zero-based. Their string form is the 1-based `line:column`
that editors expect, which is what appears in diagnostics.

Example
-------
>>> buf = SourceBuffer("begin\\n  end")
>>> buf.position(8)
Position(line=1, column=2)
>>> str(buf.position(8))
'2:3'
"""

from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True, order=True)
class Position:
    """
    A (line, column) coordinate in the source, both zero-based.

    Ordering follows source order, so spans can be compared directly.
    """
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line + 1}:{self.column + 1}"


ORIGIN = Position(0, 0)


class SourceBuffer:
    """
    Owns the text of one source unit.

    Attributes:
        text: The complete source text
        filename: Name used in diagnostics ("<input>" for strings)
        lines: The text split into lines, without terminators
    """

    def __init__(self, text: str, filename: str = "<input>"):
        self.text = text
        self.filename = filename
        # Only '\n' ends a line, both here and in _line_starts. A trailing
        # newline does not open a new line; a '\r' before '\n' is dropped.
        body = text[:-1] if text.endswith("\n") else text
        self.lines = [line.removesuffix("\r") for line in body.split("\n")] if text else []

        # Offset of the first character of every line
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n" and index + 1 < len(text):
                self._line_starts.append(index + 1)

    @classmethod
    def from_file(cls, path: str | Path, encoding: str = "utf-8") -> "SourceBuffer":
        """Read a whole file into a buffer."""
        path = Path(path)
        return cls(path.read_text(encoding=encoding), str(path))

    def __len__(self) -> int:
        return len(self.text)

    def char_at(self, offset: int) -> Optional[str]:
        """Return the character at offset, or None past the end."""
        if 0 <= offset < len(self.text):
            return self.text[offset]
        return None

    def position(self, offset: int) -> Position:
        """
        Convert a flat offset into a Position.

        Valid offsets are 0 through len(text) inclusive; the last one is
        the position just past the final character.
        """
        if offset < 0 or offset > len(self.text):
            raise IndexError(f"offset {offset} outside source of length {len(self.text)}")
        line = bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def line(self, number: int) -> Optional[str]:
        """Return the text of a zero-based line number, if it exists."""
        if 0 <= number < len(self.lines):
            return self.lines[number]
        return None

    @property
    def end(self) -> Position:
        """Position just past the last character."""
        return self.position(len(self.text))
