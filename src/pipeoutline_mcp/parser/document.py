"""Text documents with offset <-> line/character conversion."""

from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """Zero-based line/character position."""
    line: int
    character: int

    def to_dict(self) -> dict:
        return {"line": self.line, "character": self.character}


class TextDocument:
    """Document text plus the line table needed to resolve positions."""

    def __init__(self, text: str, uri: str = ""):
        self.uri = uri
        self.text = text
        self._line_offsets = self._compute_line_offsets(text)

    @staticmethod
    def _compute_line_offsets(text: str) -> list[int]:
        offsets = [0]
        i = 0
        length = len(text)
        while i < length:
            ch = text[i]
            if ch == '\r':
                if i + 1 < length and text[i + 1] == '\n':
                    i += 1
                offsets.append(i + 1)
            elif ch == '\n':
                offsets.append(i + 1)
            i += 1
        return offsets

    @property
    def line_count(self) -> int:
        return len(self._line_offsets)

    def position_at(self, offset: int) -> Position:
        """Convert a character offset to a Position, clamping to the text."""
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self._line_offsets, offset) - 1
        return Position(line=line, character=offset - self._line_offsets[line])

    def offset_at(self, position: Position) -> int:
        """Convert a Position to a character offset, clamping to the line."""
        if position.line >= len(self._line_offsets):
            return len(self.text)
        if position.line < 0:
            return 0
        line_offset = self._line_offsets[position.line]
        if position.line + 1 < len(self._line_offsets):
            next_line_offset = self._line_offsets[position.line + 1]
        else:
            next_line_offset = len(self.text)
        return max(min(line_offset + position.character, next_line_offset), line_offset)
