"""Syntax tree nodes for Go source and helpers for import declarations.

Fields holding positions carry ``{"pos": True}`` metadata and fields that
alias other parts of the tree carry ``{"skip": True}``, for use by
:func:`patchlang.positions.transform_pos`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_POS = {"pos": True}
_SKIP = {"skip": True}


@dataclass
class Ident:
    """An identifier."""

    name: str = ""
    name_pos: int = field(default=0, metadata=_POS)


@dataclass
class BasicLit:
    """A literal of basic type, such as a string or a number."""

    value: str = ""
    value_pos: int = field(default=0, metadata=_POS)
    kind: str = ""


@dataclass
class ImportSpec:
    """A single package import."""

    doc: Any = None
    name: Ident | None = None
    path: BasicLit | None = None
    comment: Any = None
    end_pos: int = field(default=0, metadata=_POS)


@dataclass
class CallExpr:
    """A function call."""

    fun: Any = None
    lparen: int = field(default=0, metadata=_POS)
    args: list = field(default_factory=list)
    ellipsis: int = field(default=0, metadata=_POS)
    rparen: int = field(default=0, metadata=_POS)


@dataclass
class ExprStmt:
    """An expression used as a statement."""

    x: Any = None


@dataclass
class BlockStmt:
    """A braced list of statements."""

    lbrace: int = field(default=0, metadata=_POS)
    list: list = field(default_factory=list)
    rbrace: int = field(default=0, metadata=_POS)


@dataclass
class GoFile:
    """A Go source file.

    ``imports`` aliases specs found in ``decls`` and ``comments`` aliases
    documentation comments, so neither is visited by position transforms.
    """

    doc: Any = None
    package: int = field(default=0, metadata=_POS)
    name: Ident | None = None
    decls: list = field(default_factory=list)
    imports: list = field(default_factory=list, metadata=_SKIP)
    comments: list = field(default_factory=list, metadata=_SKIP)


_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
}
_HEX_WIDTHS = {"x": 2, "u": 4, "U": 8}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_OCT_DIGITS = frozenset("01234567")


def _unquote(value: str) -> str:
    """Decode a quoted Go string or character literal."""
    if len(value) < 2 or value[0] != value[-1] or value[0] not in "\"'`":
        raise ValueError("invalid syntax")
    quote, body = value[0], value[1:-1]

    if quote == "`":
        if "`" in body:
            raise ValueError("invalid syntax")
        return body.replace("\r", "")

    if "\n" in body:
        raise ValueError("invalid syntax")

    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == quote:
            raise ValueError("invalid syntax")
        if ch != "\\":
            out += ch.encode("utf-8")
            i += 1
            continue
        i += 1
        if i >= len(body):
            raise ValueError("invalid syntax")
        esc = body[i]
        i += 1
        if esc in _SIMPLE_ESCAPES:
            out += _SIMPLE_ESCAPES[esc].encode("utf-8")
        elif esc == quote:
            out += quote.encode("utf-8")
        elif esc in _HEX_WIDTHS:
            width = _HEX_WIDTHS[esc]
            digits = body[i : i + width]
            if len(digits) != width or not set(digits) <= _HEX_DIGITS:
                raise ValueError("invalid syntax")
            i += width
            code = int(digits, 16)
            if esc == "x":
                out.append(code)
            else:
                if code > 0x10FFFF or 0xD800 <= code <= 0xDFFF:
                    raise ValueError("invalid syntax")
                out += chr(code).encode("utf-8")
        elif esc in _OCT_DIGITS:
            digits = body[i - 1 : i + 2]
            if len(digits) != 3 or not set(digits) <= _OCT_DIGITS:
                raise ValueError("invalid syntax")
            i += 2
            code = int(digits, 8)
            if code > 0xFF:
                raise ValueError("invalid syntax")
            out.append(code)
        else:
            raise ValueError("invalid syntax")

    result = out.decode("utf-8", errors="surrogateescape")
    if quote == "'" and len(result) != 1:
        raise ValueError("invalid syntax")
    return result


def import_path(spec: ImportSpec | None) -> str:
    """Return the unquoted import path of an import spec."""
    if spec is None or spec.path is None:
        raise ValueError("ImportSpec and its Path must be non-nil")
    try:
        return _unquote(spec.path.value)
    except ValueError as exc:
        raise ValueError(f"invalid import path {spec.path.value!r}: {exc}") from exc


def import_name(spec: ImportSpec | None) -> str:
    """Return the name of a named import, or an empty string."""
    if spec is None:
        raise ValueError("ImportSpec must be non-nil")
    return spec.name.name if spec.name is not None else ""


def find_import_spec(f: GoFile | None, path: str) -> ImportSpec | None:
    """Return the import spec of ``f`` importing ``path``, or None."""
    if f is None:
        raise ValueError("File must be non-nil")
    return next((spec for spec in f.imports if import_path(spec) == path), None)