"""
Offset to line/column mapping over one file's source text.

Lines are 1-indexed and columns 0-indexed, both derived from the newline
characters that precede an offset. Ending positions are those of a node's
last character.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Optional

from solscope.analysis.ast_nodes import ASTNode, throw_if_invalid_node
from solscope.utils.errors import SourceLocation


class SourcePositionIndex:
    """
    Read-only position index for a single source text.

    The index is built once from the text and never mutated, so one
    instance belongs to exactly one file's analysis.

    Example:
        index = SourcePositionIndex("a\\nbc")
        index.position(3)  # (2, 1)
    """

    __slots__ = ("_text", "_line_starts", "filename")

    def __init__(self, text: str, filename: Optional[str] = None) -> None:
        self._text = text
        self.filename = filename
        starts = [0]
        for i, char in enumerate(text):
            if char == "\n":
                starts.append(i + 1)
        self._line_starts: tuple[int, ...] = tuple(starts)

    @property
    def text(self) -> str:
        return self._text

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def _check_offset(self, offset: int) -> None:
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise ValueError(f"offset must be an int, got {offset!r}")
        if offset < 0 or offset > len(self._text):
            raise ValueError(f"offset {offset} outside source of length {len(self._text)}")

    def line_of(self, offset: int) -> int:
        """1-based line of the character at ``offset``."""
        self._check_offset(offset)
        return bisect_right(self._line_starts, offset)

    def column_of(self, offset: int) -> int:
        """0-based column of the character at ``offset``."""
        line = self.line_of(offset)
        return offset - self._line_starts[line - 1]

    def position(self, offset: int) -> tuple[int, int]:
        """(line, column) pair for ``offset``."""
        line = self.line_of(offset)
        return line, offset - self._line_starts[line - 1]

    def offset_of(self, line: int, column: int) -> int:
        """
        Inverse of ``position``.

        Raises:
            ValueError: If the line does not exist or the column runs past it
        """
        if line < 1 or line > len(self._line_starts):
            raise ValueError(f"line {line} outside 1..{len(self._line_starts)}")
        line_start = self._line_starts[line - 1]
        if line < len(self._line_starts):
            line_end = self._line_starts[line] - 1
        else:
            line_end = len(self._text)
        if column < 0 or line_start + column > line_end:
            raise ValueError(f"column {column} outside line {line}")
        return line_start + column

    def location(self, offset: int) -> SourceLocation:
        line, column = self.position(offset)
        return SourceLocation(line=line, column=column, offset=offset, filename=self.filename)

    def line_text(self, line: int) -> str:
        """Text of a 1-based line without its newline."""
        start = self.offset_of(line, 0)
        newline = self._text.find("\n", start)
        return self._text[start:] if newline == -1 else self._text[start:newline]

    # -------------------------------------------------------------------------
    # Node queries
    # -------------------------------------------------------------------------

    def _last_char_offset(self, node: ASTNode) -> int:
        return node.end - 1 if node.end > node.start else node.start

    def get_line(self, node: ASTNode) -> int:
        """Line on which the node starts."""
        throw_if_invalid_node(node, "get_line")
        return self.line_of(node.start)

    def get_column(self, node: ASTNode) -> int:
        """Column of the node's first character."""
        throw_if_invalid_node(node, "get_column")
        return self.column_of(node.start)

    def get_ending_line(self, node: ASTNode) -> int:
        """Line holding the node's last character."""
        throw_if_invalid_node(node, "get_ending_line")
        return self.line_of(self._last_char_offset(node))

    def get_ending_column(self, node: ASTNode) -> int:
        """Column of the node's last character."""
        throw_if_invalid_node(node, "get_ending_column")
        return self.column_of(self._last_char_offset(node))

    def start_location(self, node: ASTNode) -> SourceLocation:
        throw_if_invalid_node(node, "start_location")
        return self.location(node.start)

    def end_location(self, node: ASTNode) -> SourceLocation:
        throw_if_invalid_node(node, "end_location")
        return self.location(self._last_char_offset(node))


__all__ = ["SourcePositionIndex"]
