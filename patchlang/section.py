"""Splitting a patch file into its changes without parsing their contents.

A patch file holds one or more changes. Each change opens with a header,
``@@`` or ``@ name @``, followed by its metavariables section, a second
``@@`` and the patch section. Lines whose first non-blank character is ``#``
are comments and are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .positions import FileSet, TokenFile

_POS = {"pos": True}


class PatchSyntaxError(ValueError):
    """Raised when a patch file cannot be split into changes.

    ``errors`` holds every message found; the exception text joins them.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


@dataclass
class Line:
    """A single line of a patch file."""

    start_pos: int = field(default=0, metadata=_POS)
    text: bytes = b""

    def pos(self) -> int:
        """Position at which the line begins."""
        return self.start_pos

    def end(self) -> int:
        """Position of the character just past the line."""
        return self.start_pos + len(self.text)


@dataclass
class Change:
    """A single change of a patch file."""

    header_pos: int = field(default=0, metadata=_POS)
    name: str = ""
    meta: list[Line] = field(default_factory=list)
    at_pos: int = field(default=0, metadata=_POS)
    patch: list[Line] = field(default_factory=list)

    def pos(self) -> int:
        """Position at which the change begins."""
        return self.header_pos

    def end(self) -> int:
        """Position of the first character after the change."""
        if self.patch:
            return self.patch[-1].end()
        # An empty change ends after its second "@@".
        return self.at_pos + 2


@dataclass
class LinePos:
    """Maps the offset of a line in a buffer to its original position."""

    offset: int
    pos: int


def _quote_char(ch: str, quote: str) -> str:
    code = ord(ch)
    if ch == quote or ch == "\\":
        return "\\" + ch
    if 0xDC80 <= code <= 0xDCFF:
        return f"\\x{code - 0xDC00:02x}"
    if ch.isprintable():
        return ch
    escapes = {"\a": "\\a", "\b": "\\b", "\f": "\\f", "\n": "\\n",
               "\r": "\\r", "\t": "\\t", "\v": "\\v"}
    if ch in escapes:
        return escapes[ch]
    if code < 0x80:
        return f"\\x{code:02x}"
    if code < 0x10000:
        return f"\\u{code:04x}"
    return f"\\U{code:08x}"


def _quote(text: str) -> str:
    """Quote a string the way Go's %q verb does."""
    return '"' + "".join(_quote_char(ch, '"') for ch in text) + '"'


def _quote_rune(ch: str) -> str:
    """Quote a single character the way Go's %q verb does for runes."""
    return "'" + _quote_char(ch, "'") + "'"


def _is_comment(text: bytes) -> bool:
    return text.lstrip().startswith(b"#")


def _invalid_name_char(name: str) -> tuple[int, str] | None:
    """Return the byte index and character of the first invalid character."""
    byte_index = 0
    for i, ch in enumerate(name):
        if not (ch.isalpha() or ch == "_" or (i > 0 and ch.isdecimal())):
            return byte_index, ch
        byte_index += len(ch.encode("utf-8", "surrogateescape"))
    return None


class _Splitter:
    def __init__(self, file: TokenFile, content: bytes) -> None:
        self.file = file
        self.content = content
        self.text: bytes = b""
        self.pos = 0
        self.eof = False
        self.start_offset = 0
        self.offset = 0
        self.errors: list[str] = []

    def errf(self, offset: int, msg: str) -> None:
        pos = self.file.pos(min(offset, self.file.size))
        self.errors.append(f"{self.file.position(pos)}: {msg}")

    def _end_of_line(self, start: int) -> int:
        end = self.content.find(b"\n", start)
        return len(self.content) if end < 0 else end

    def next(self) -> None:
        """Advance to the next line that is not a comment."""
        while self.offset < len(self.content):
            self.start_offset = self.offset
            self.offset = self._end_of_line(self.offset)
            self.text = self.content[self.start_offset : self.offset]
            self.pos = self.file.pos(self.start_offset)
            self.offset += 1
            if not _is_comment(self.text):
                return
        self.pos = 0
        self.text = b""
        self.eof = True

    def read_program(self) -> list[Change]:
        program = []
        while not self.eof:
            program.append(self.read_change())
        if not program:
            self.errf(self.offset, "unexpected EOF, at least one change is required")
        return program

    def read_change(self) -> Change:
        header_pos = self.pos
        name = self.read_name()
        meta = self.read_meta()
        at_pos = self.pos
        patch = self.read_patch()
        return Change(header_pos=header_pos, name=name, meta=meta,
                      at_pos=at_pos, patch=patch)

    def read_name(self) -> str:
        text = self.text.decode("utf-8", "surrogateescape")
        start = self.start_offset
        self.next()

        if text == "@@":
            return ""
        if len(text) > 2 and text[0] == "@" and text[-1] == "@":
            name = text[1:-1]
            shift = 1
            stripped = name.lstrip()
            shift += len(name[: len(name) - len(stripped)].encode("utf-8", "surrogateescape"))
            name = stripped.rstrip()

            invalid = _invalid_name_char(name)
            if invalid is None:
                return name
            index, ch = invalid
            self.errf(
                start + shift + index,
                "invalid name: must be a valid Go identifier: "
                f"unexpected character {_quote_rune(ch)}",
            )
            return ""
        self.errf(start, f'unexpected {_quote(text)}, expected "@@" or "@ change_name @"')
        return ""

    def read_meta(self) -> list[Line]:
        lines = []
        while not self.eof:
            if self.text == b"@@":
                return lines
            lines.append(Line(self.pos, self.text))
            self.next()
        self.errf(self.offset, 'unexpected EOF, expected "@@"')
        return []

    def read_patch(self) -> list[Line]:
        self.next()  # past the "@@" closing the metavariables
        lines = []
        while not self.eof:
            if self.text.startswith(b"@"):
                break
            lines.append(Line(self.pos, self.text))
            self.next()
        return lines


def split(fset: FileSet, filename: str, content: bytes | str) -> list[Change]:
    """Split a patch file into its changes, registering it with ``fset``.

    Raises PatchSyntaxError listing every problem found.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    file = fset.add_file(filename, -1, len(content))
    file.set_lines_for_content(content)

    splitter = _Splitter(file, content)
    splitter.next()
    program = splitter.read_program()
    if splitter.errors:
        raise PatchSyntaxError(splitter.errors)
    return program


def to_bytes(section: list[Line]) -> tuple[bytes, list[LinePos]]:
    """Join a section's lines into a buffer.

    Returns the buffer and, sorted by offset, the original position of the
    line at each offset.
    """
    buffer = bytearray()
    lines = []
    for line in section:
        lines.append(LinePos(offset=len(buffer), pos=line.pos()))
        buffer += line.text
        buffer += b"\n"
    lines.sort(key=lambda lp: lp.offset)
    return bytes(buffer), lines