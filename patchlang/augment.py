"""Turning patch source into valid Go source.

Patch source may omit the package clause, may hold bare statements or
expressions at the top level, and may use ``...`` where Go does not allow
it. :func:`augment` finds these places, rewrites them into valid Go and
records what it changed so that the parsed tree can be mapped back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .positions import FileSet, Position
from .scanner import Scanner, Token

_FAKE_PACKAGE = b"package _"
_FAKE_FUNC = b"func _() "


class AugmentError(ValueError):
    """Raised when patch source cannot be tokenized.

    ``errors`` holds every message found; the exception text joins them.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


@dataclass
class Dots:
    """A "..." found where Go syntax does not allow it.

    ``named`` tells whether it stands for named entities, such as named
    parameters or results of a function.
    """

    dots_start: int
    dots_end: int
    named: bool = False

    def start(self) -> int:
        return self.dots_start

    def end(self) -> int:
        return self.dots_end


@dataclass
class FakePackage:
    """A package clause added because the source had none."""

    package_start: int

    def start(self) -> int:
        return self.package_start

    def end(self) -> int:
        return self.package_start


@dataclass
class FakeFunc:
    """A function added because the source did not open with a declaration.

    ``braces`` tells whether a ``{ ... }`` was added around the source.
    """

    func_start: int
    braces: bool = False

    def start(self) -> int:
        return self.func_start

    def end(self) -> int:
        return self.func_start


Augmentation = Union[Dots, FakePackage, FakeFunc]


@dataclass
class PosAdjustment:
    """Positions at or after ``offset`` must be reduced by ``reduce_by``."""

    offset: int
    reduce_by: int


class _Finder:
    def __init__(self, src: bytes) -> None:
        fset = FileSet()
        self.file = fset.add_file("src.go", -1, len(src))
        self.errors: list[str] = []
        self.augs: list[Augmentation] = []
        self.scanner = Scanner(self.file, src, self._on_error)
        self.tok = Token.EOF
        self.pos = 0
        self.offset = 0
        self.next()

    def _on_error(self, position: Position, msg: str) -> None:
        self.errors.append(f"{position}: {msg}")

    def next(self) -> None:
        self.pos, self.tok, _ = self.scanner.scan()
        self.offset = self.file.offset(self.pos)

    def find(self) -> list[Augmentation]:
        self.package()
        self.imports()
        self.top_level_decl()
        while self.tok is not Token.EOF:
            self.process()
        return self.augs

    def process(self) -> None:
        if self.tok is Token.IDENT:
            self.ident()
        elif self.tok is Token.ELLIPSIS:
            self.ellipsis()
        elif self.tok is Token.FUNC:
            self.function()
        else:
            self.next()

    def package(self) -> None:
        if self.tok is not Token.PACKAGE:
            self.augs.append(FakePackage(package_start=self.offset))
            return
        self.next()  # package
        self.next()  # name
        self.next()  # ;

    def imports(self) -> None:
        while self.tok is Token.IMPORT:
            self.next()  # import
            if self.tok is Token.LPAREN:
                while self.tok not in (Token.RPAREN, Token.EOF):
                    self.next()
                self.next()  # )
                self.next()  # ;
                continue
            if self.tok in (Token.PERIOD, Token.IDENT):
                self.next()  # . or name
            elif self.tok is Token.EOF:
                return
            self.next()  # path
            self.next()  # ;

    def top_level_decl(self) -> None:
        if self.tok in (Token.TYPE, Token.CONST, Token.VAR):
            self.next()
        elif self.tok is Token.FUNC:
            self.func_decl()
        elif self.tok is Token.LBRACE:
            self.augs.append(FakeFunc(func_start=self.offset))
            self.next()  # {
        else:
            self.augs.append(FakeFunc(func_start=self.offset, braces=True))

    def ident(self) -> None:
        self.next()  # identifier
        if self.tok is Token.ELLIPSIS:
            self.next()  # variadic use: foo...

    def ellipsis(self) -> None:
        pos, offset = self.pos, self.offset
        self.next()  # ...

        # No semicolon is inserted after "...", so a newline between it and
        # an identifier can only be seen through line numbers.
        same_line = self.file.line(pos) == self.file.line(self.pos)
        if self.tok is Token.IDENT and same_line:
            self.next()  # ...foo
            return
        self.augs.append(Dots(dots_start=offset, dots_end=offset + 3))

    def func_decl(self) -> None:
        self.next()  # func
        if self.tok is Token.LPAREN:
            self.next()  # (
            while self.tok not in (Token.RPAREN, Token.EOF):
                self.process()
            self.next()  # )
        self.next()  # name
        self.field_list()
        self.results()

    def function(self) -> None:
        self.next()  # func
        self.field_list()
        self.results()

    def results(self) -> None:
        if self.tok is Token.LPAREN:
            self.field_list()

    def field_list(self) -> None:
        self.next()  # (
        ellipses: list[int] = []
        named = False

        while self.tok not in (Token.RPAREN, Token.EOF):
            if self.tok is Token.FUNC:
                self.function()
            elif self.tok is Token.IDENT:
                self.next()  # identifier
                if self.tok is Token.PERIOD:
                    self.next()  # .
                    self.next()  # selected identifier
                # Anything but "," or ")" after a lone identifier means the
                # identifier named the parameter.
                if self.tok not in (Token.COMMA, Token.RPAREN):
                    named = True
            elif self.tok is Token.ELLIPSIS:
                offset = self.offset
                self.next()  # ...
                if self.tok is Token.IDENT:
                    continue  # variadic parameter
                ellipses.append(offset)
            else:
                self.next()
        self.next()  # )

        self.augs.extend(
            Dots(dots_start=off, dots_end=off + 3, named=named) for off in ellipses
        )


def _rewrite(src: bytes, augs: list[Augmentation]) -> tuple[bytes, list[PosAdjustment]]:
    """Rewrite ``src`` as valid Go, updating the offsets in ``augs``."""
    dst = bytearray()
    tail = bytearray()
    adjustments: list[PosAdjustment] = []
    reduce_by = 0
    pos = 0

    # The sort is stable, so FakePackage stays ahead of FakeFunc.
    augs.sort(key=lambda aug: aug.start())
    for aug in augs:
        start, end = aug.start(), aug.end()
        dst += src[pos:start]

        if isinstance(aug, FakePackage):
            aug.package_start = len(dst)
            dst += _FAKE_PACKAGE + b"\n"
            reduce_by += len(dst) - aug.package_start
            adjustments.append(PosAdjustment(aug.package_start, reduce_by))
        elif isinstance(aug, FakeFunc):
            aug.func_start = len(dst)
            dst += _FAKE_FUNC
            if aug.braces:
                dst += b"{\n"
                tail += b"}\n"
            reduce_by += len(dst) - aug.func_start
            adjustments.append(PosAdjustment(aug.func_start, reduce_by))
        elif isinstance(aug, Dots):
            aug.dots_start = len(dst)
            # Both replacements are as long as "...", so no adjustment.
            dst += b"_ d" if aug.named else b"dts"
            aug.dots_end = len(dst)
        else:
            raise TypeError(f"unknown augmentation type {type(aug).__name__}")
        pos = end

    dst += src[pos:]
    dst += tail
    return bytes(dst), adjustments


def augment(
    src: bytes | str,
) -> tuple[bytes, list[Augmentation], list[PosAdjustment]]:
    """Return valid Go source, the augmentations made and position adjustments.

    Raises AugmentError if the source cannot be tokenized.
    """
    if isinstance(src, str):
        src = src.encode("utf-8")
    finder = _Finder(src)
    augs = finder.find()
    if finder.errors:
        raise AugmentError(finder.errors)
    new_src, adjustments = _rewrite(src, augs)
    return new_src, augs, adjustments