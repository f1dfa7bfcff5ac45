"""Compact source positions, files and file sets.

A position is an integer. Zero means "no position"; every file added to a
FileSet owns the range ``[base, base + size]`` of positions.
"""

from __future__ import annotations

import dataclasses
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class Position:
    """A decoded position: file name, byte offset, line and column."""

    filename: str = ""
    offset: int = 0
    line: int = 0
    column: int = 0

    @property
    def is_valid(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        text = self.filename
        if self.is_valid:
            if text:
                text += ":"
            text += str(self.line)
            if self.column:
                text += f":{self.column}"
        return text or "-"


@dataclass
class _LineInfo:
    offset: int
    filename: str
    line: int
    column: int


class TokenFile:
    """A file registered in a FileSet, with its line table."""

    def __init__(self, name: str, base: int, size: int) -> None:
        self.name = name
        self.base = base
        self.size = size
        self.lines: list[int] = [0]
        self._infos: list[_LineInfo] = []

    def __repr__(self) -> str:
        return f"TokenFile(name={self.name!r}, base={self.base}, size={self.size})"

    def pos(self, offset: int) -> int:
        """Return the position for a byte offset in this file."""
        if offset < 0 or offset > self.size:
            raise ValueError(f"illegal file offset {offset}")
        return self.base + offset

    def offset(self, pos: int) -> int:
        """Return the byte offset of a position in this file."""
        if pos < self.base or pos > self.base + self.size:
            raise ValueError(f"illegal position {pos}")
        return pos - self.base

    def line(self, pos: int) -> int:
        """Return the (adjusted) line number of a position."""
        return self.position(pos).line

    def position(self, pos: int) -> Position:
        """Decode a position, honouring alternative line information."""
        if pos == 0:
            return Position()
        offset = self.offset(pos)
        filename = self.name
        line = column = 0

        i = bisect_right(self.lines, offset) - 1
        if i >= 0:
            line, column = i + 1, offset - self.lines[i] + 1

        if self._infos:
            j = bisect_right([info.offset for info in self._infos], offset) - 1
            if j >= 0:
                alt = self._infos[j]
                filename = alt.filename
                k = bisect_right(self.lines, alt.offset) - 1
                if k >= 0:
                    distance = line - (k + 1)
                    line = alt.line + distance
                    if alt.column == 0:
                        column = 0
                    elif distance == 0:
                        column = alt.column + (offset - alt.offset)

        return Position(filename, offset, line, column)

    def set_lines_for_content(self, content: bytes | str) -> None:
        """Compute the line table from the file's contents."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        if not content:
            self.lines = []
            return
        self.lines = [0] + [
            i + 1
            for i, byte in enumerate(content)
            if byte == 0x0A and i + 1 < len(content)
        ]

    def add_line_column_info(
        self, offset: int, filename: str, line: int, column: int
    ) -> None:
        """Map the line starting at ``offset`` to another file's line and column.

        Entries must be added in increasing offset order; others are ignored.
        """
        if offset > self.size:
            return
        if self._infos and self._infos[-1].offset >= offset:
            return
        self._infos.append(_LineInfo(offset, filename, line, column))


class FileSet:
    """A set of files sharing one position space."""

    def __init__(self) -> None:
        self.base = 1
        self._files: list[TokenFile] = []

    def add_file(self, filename: str, base: int, size: int) -> TokenFile:
        """Register a file; a negative base means the next free base."""
        if base < 0:
            base = self.base
        if base < self.base:
            raise ValueError(f"invalid base {base} (should be >= {self.base})")
        if size < 0:
            raise ValueError(f"invalid size {size} (should be >= 0)")
        file = TokenFile(filename, base, size)
        self.base = base + size + 1
        self._files.append(file)
        return file

    def file(self, pos: int) -> TokenFile | None:
        """Return the file holding a position, or None."""
        if pos <= 0:
            return None
        i = bisect_right([f.base for f in self._files], pos) - 1
        if i >= 0:
            candidate = self._files[i]
            if pos <= candidate.base + candidate.size:
                return candidate
        return None

    def position(self, pos: int) -> Position:
        """Decode a position anywhere in the set."""
        file = self.file(pos)
        return file.position(pos) if file is not None else Position()


def transform_pos(node: Any, transform: Callable[[int], int]) -> None:
    """Replace, in place, every valid position inside ``node`` and its children.

    Nodes are dataclasses. A field whose metadata has ``"pos": True`` holds a
    position; one whose metadata has ``"skip": True`` is not visited (used for
    fields that alias other parts of the tree). Zero positions are left alone.
    Free-floating comments of files are therefore not transformed.
    """
    if isinstance(node, (list, tuple)):
        for item in node:
            transform_pos(item, transform)
    elif isinstance(node, dict):
        raise TypeError("cannot use maps inside an AST node")
    elif dataclasses.is_dataclass(node) and not isinstance(node, type):
        for field in dataclasses.fields(node):
            if field.metadata.get("skip"):
                continue
            value = getattr(node, field.name)
            if field.metadata.get("pos"):
                if value:
                    setattr(node, field.name, transform(value))
            else:
                transform_pos(value, transform)


def offset_pos(node: Any, offset: int) -> None:
    """Shift every valid position inside ``node`` by ``offset`` in place."""
    transform_pos(node, lambda pos: pos + offset)