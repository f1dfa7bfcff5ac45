"""A tokenizer for Go source text with automatic semicolon insertion.

Comments are skipped. As in Go, a newline after an identifier, a literal,
one of the keywords ``break``, ``continue``, ``fallthrough`` and ``return``,
or one of ``++ -- ) ] }`` produces a SEMICOLON token whose text is ``"\\n"``.
"""

from __future__ import annotations

import enum
import string
from typing import Callable, Iterator

from .positions import Position, TokenFile

ErrorHandler = Callable[[Position, str], None]


class Token(enum.Enum):
    """Lexical tokens of Go. The value is the token's printed form."""

    ILLEGAL = "ILLEGAL"
    EOF = "EOF"
    COMMENT = "COMMENT"

    IDENT = "IDENT"
    INT = "INT"
    FLOAT = "FLOAT"
    IMAG = "IMAG"
    CHAR = "CHAR"
    STRING = "STRING"

    ADD = "+"
    SUB = "-"
    MUL = "*"
    QUO = "/"
    REM = "%"
    AND = "&"
    OR = "|"
    XOR = "^"
    SHL = "<<"
    SHR = ">>"
    AND_NOT = "&^"
    ADD_ASSIGN = "+="
    SUB_ASSIGN = "-="
    MUL_ASSIGN = "*="
    QUO_ASSIGN = "/="
    REM_ASSIGN = "%="
    AND_ASSIGN = "&="
    OR_ASSIGN = "|="
    XOR_ASSIGN = "^="
    SHL_ASSIGN = "<<="
    SHR_ASSIGN = ">>="
    AND_NOT_ASSIGN = "&^="
    LAND = "&&"
    LOR = "||"
    ARROW = "<-"
    INC = "++"
    DEC = "--"
    EQL = "=="
    LSS = "<"
    GTR = ">"
    ASSIGN = "="
    NOT = "!"
    NEQ = "!="
    LEQ = "<="
    GEQ = ">="
    DEFINE = ":="
    ELLIPSIS = "..."
    LPAREN = "("
    LBRACK = "["
    LBRACE = "{"
    COMMA = ","
    PERIOD = "."
    RPAREN = ")"
    RBRACK = "]"
    RBRACE = "}"
    SEMICOLON = ";"
    COLON = ":"
    TILDE = "~"

    BREAK = "break"
    CASE = "case"
    CHAN = "chan"
    CONST = "const"
    CONTINUE = "continue"
    DEFAULT = "default"
    DEFER = "defer"
    ELSE = "else"
    FALLTHROUGH = "fallthrough"
    FOR = "for"
    FUNC = "func"
    GO = "go"
    GOTO = "goto"
    IF = "if"
    IMPORT = "import"
    INTERFACE = "interface"
    MAP = "map"
    PACKAGE = "package"
    RANGE = "range"
    RETURN = "return"
    SELECT = "select"
    STRUCT = "struct"
    SWITCH = "switch"
    TYPE = "type"
    VAR = "var"

    def __str__(self) -> str:
        return self.value


_KEYWORDS = {
    tok.value: tok
    for tok in Token
    if tok.value.isalpha() and tok.value.islower()
}

_OPERATORS = sorted(
    ((tok.value.encode("ascii"), tok) for tok in Token if not tok.value[0].isalnum()),
    key=lambda pair: -len(pair[0]),
)

_SEMI_AFTER = frozenset({
    Token.IDENT, Token.INT, Token.FLOAT, Token.IMAG, Token.CHAR, Token.STRING,
    Token.BREAK, Token.CONTINUE, Token.FALLTHROUGH, Token.RETURN,
    Token.INC, Token.DEC, Token.RPAREN, Token.RBRACK, Token.RBRACE,
})

_DECIMAL = frozenset(string.digits)
_HEX = frozenset(string.hexdigits)
_OCTAL = frozenset(string.octdigits)
_SIMPLE_ESCAPES = frozenset("abfnrtv\\")
_BOM = b"\xef\xbb\xbf"


def _is_letter(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _format_rune(ch: str) -> str:
    text = f"U+{ord(ch):04X}"
    if ch.isprintable():
        text += f" '{ch}'"
    return text


class Scanner:
    """Splits Go source into tokens, reporting errors to a handler.

    The line table of ``file`` is filled from ``src``.
    """

    def __init__(
        self,
        file: TokenFile,
        src: bytes | str,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        if isinstance(src, str):
            src = src.encode("utf-8")
        if file.size != len(src):
            raise ValueError(
                f"file size ({file.size}) does not match src len ({len(src)})"
            )
        self.file = file
        self.src = src
        self.error_count = 0
        self._error_handler = error_handler
        self._offset = len(_BOM) if src.startswith(_BOM) else 0
        self._insert_semi = False
        if src:
            file.set_lines_for_content(src)

    def __iter__(self) -> Iterator[tuple[int, Token, str]]:
        """Yield tokens up to and including EOF."""
        while True:
            item = self.scan()
            yield item
            if item[1] is Token.EOF:
                return

    def _error(self, offset: int, msg: str) -> None:
        self.error_count += 1
        if self._error_handler is not None:
            position = self.file.position(self.file.pos(offset))
            self._error_handler(position, msg)

    def _rune(self, offset: int) -> tuple[str, int, bool]:
        lead = self.src[offset]
        if lead < 0x80:
            return chr(lead), 1, True
        if 0xC0 <= lead < 0xE0:
            width = 2
        elif 0xE0 <= lead < 0xF0:
            width = 3
        elif 0xF0 <= lead < 0xF8:
            width = 4
        else:
            width = 0
        if width:
            try:
                return self.src[offset : offset + width].decode("utf-8"), width, True
            except UnicodeDecodeError:
                pass
        return "\ufffd", 1, False

    def _skip_whitespace(self) -> None:
        src = self.src
        while self._offset < len(src):
            c = src[self._offset]
            if c in (0x20, 0x09, 0x0D) or (c == 0x0A and not self._insert_semi):
                self._offset += 1
            else:
                return

    def scan(self) -> tuple[int, Token, str]:
        """Return the next token as ``(position, token, literal text)``."""
        src = self.src
        while True:
            self._skip_whitespace()
            start = self._offset
            pos = self.file.pos(start)

            if start >= len(src):
                if self._insert_semi:
                    self._insert_semi = False
                    return pos, Token.SEMICOLON, "\n"
                return pos, Token.EOF, ""

            ch, width, valid = self._rune(start)

            if valid and _is_letter(ch):
                end = self._scan_identifier(start)
                lit = src[start:end].decode("utf-8")
                tok = _KEYWORDS.get(lit, Token.IDENT)
                return self._emit(end, tok, lit, pos)

            if ch in _DECIMAL or (
                ch == "." and start + 1 < len(src) and chr(src[start + 1]) in _DECIMAL
            ):
                tok, end = self._scan_number(start)
                return self._emit(end, tok, src[start:end].decode("utf-8"), pos)

            if ch == "\n":
                self._offset = start + 1
                self._insert_semi = False
                return pos, Token.SEMICOLON, "\n"

            if ch == '"':
                end = self._scan_string(start)
                return self._emit(end, Token.STRING, self._text(start, end), pos)
            if ch == "`":
                end = self._scan_raw_string(start)
                lit = self._text(start, end).replace("\r", "")
                return self._emit(end, Token.STRING, lit, pos)
            if ch == "'":
                end = self._scan_rune(start)
                return self._emit(end, Token.CHAR, self._text(start, end), pos)

            if src.startswith(b"//", start) or src.startswith(b"/*", start):
                if self._insert_semi and self._comment_ends_line(start + 1):
                    self._insert_semi = False
                    return pos, Token.SEMICOLON, "\n"
                self._offset = self._skip_comment(start)
                continue

            for text, tok in _OPERATORS:
                if src.startswith(text, start):
                    lit = ";" if tok is Token.SEMICOLON else ""
                    return self._emit(start + len(text), tok, lit, pos)

            self._offset = start + width
            if valid:
                self._error(start, f"illegal character {_format_rune(ch)}")
            else:
                self._error(start, "illegal UTF-8 encoding")
            return pos, Token.ILLEGAL, ch

    def _emit(self, end: int, tok: Token, lit: str, pos: int) -> tuple[int, Token, str]:
        self._offset = end
        self._insert_semi = tok in _SEMI_AFTER
        return pos, tok, lit

    def _text(self, start: int, end: int) -> str:
        return self.src[start:end].decode("utf-8", "surrogateescape")

    def _scan_identifier(self, start: int) -> int:
        i = start
        while i < len(self.src):
            ch, width, valid = self._rune(i)
            if not valid or not (_is_letter(ch) or ch.isdecimal()):
                break
            i += width
        return i

    def _skip_digits(self, i: int, digits: frozenset[str]) -> int:
        src = self.src
        while i < len(src) and (src[i] == 0x5F or chr(src[i]) in digits):
            i += 1
        return i

    def _scan_number(self, start: int) -> tuple[Token, int]:
        src = self.src
        n = len(src)
        i = start
        tok = Token.INT
        base = 10

        if src[i] == 0x30 and i + 1 < n and chr(src[i + 1]) in "xXbBoO":
            base = {"x": 16, "b": 2, "o": 8}[chr(src[i + 1]).lower()]
            i = self._skip_digits(i + 2, _HEX if base == 16 else _DECIMAL)
        elif src[i] != 0x2E:
            i = self._skip_digits(i, _DECIMAL)

        if base in (10, 16) and i < n and src[i] == 0x2E:
            tok = Token.FLOAT
            i = self._skip_digits(i + 1, _HEX if base == 16 else _DECIMAL)

        exponents = {10: "eE", 16: "pP"}.get(base, "")
        if i < n and exponents and chr(src[i]) in exponents:
            tok = Token.FLOAT
            i += 1
            if i < n and chr(src[i]) in "+-":
                i += 1
            j = self._skip_digits(i, _DECIMAL)
            if j == i:
                self._error(start, "exponent has no digits")
            i = j

        if i < n and src[i] == 0x69:  # 'i'
            tok = Token.IMAG
            i += 1
        return tok, i

    def _scan_escape(self, i: int, quote: str) -> tuple[int, bool]:
        """Scan an escape whose backslash precedes offset ``i``."""
        src = self.src
        escape_start = i - 1
        if i >= len(src):
            self._error(i, "escape sequence not terminated")
            return i, False
        c = chr(src[i])
        if c in _SIMPLE_ESCAPES or c == quote:
            return i + 1, True

        if c in _OCTAL:
            count, digits, base, limit = 3, _OCTAL, 8, 255
        elif c == "x":
            i += 1
            count, digits, base, limit = 2, _HEX, 16, 255
        elif c == "u":
            i += 1
            count, digits, base, limit = 4, _HEX, 16, 0x10FFFF
        elif c == "U":
            i += 1
            count, digits, base, limit = 8, _HEX, 16, 0x10FFFF
        else:
            self._error(i, "unknown escape sequence")
            return i, False

        value = 0
        for _ in range(count):
            if i >= len(src):
                self._error(i, "escape sequence not terminated")
                return i, False
            d = chr(src[i])
            if d not in digits:
                ch, _, _ = self._rune(i)
                self._error(i, f"illegal character {_format_rune(ch)} in escape sequence")
                return i, False
            value = value * base + int(d, base)
            i += 1

        if value > limit or 0xD800 <= value < 0xE000:
            self._error(escape_start, "escape sequence is invalid Unicode code point")
            return i, False
        return i, True

    def _scan_string(self, start: int) -> int:
        src = self.src
        i = start + 1
        while True:
            if i >= len(src) or src[i] == 0x0A:
                self._error(start, "string literal not terminated")
                return i
            c = src[i]
            i += 1
            if c == 0x22:
                return i
            if c == 0x5C:
                i, _ = self._scan_escape(i, '"')

    def _scan_raw_string(self, start: int) -> int:
        end = self.src.find(b"`", start + 1)
        if end < 0:
            self._error(start, "raw string literal not terminated")
            return len(self.src)
        return end + 1

    def _scan_rune(self, start: int) -> int:
        src = self.src
        i = start + 1
        count = 0
        valid = True
        while True:
            if i >= len(src) or src[i] == 0x0A:
                if valid:
                    self._error(start, "rune literal not terminated")
                    valid = False
                break
            c = src[i]
            if c == 0x27:
                i += 1
                break
            count += 1
            if c == 0x5C:
                i, ok = self._scan_escape(i + 1, "'")
                valid = valid and ok
            else:
                i += self._rune(i)[1]
        if valid and count != 1:
            self._error(start, "illegal rune literal")
        return i

    def _skip_comment(self, start: int) -> int:
        src = self.src
        if src.startswith(b"//", start):
            end = src.find(b"\n", start)
            return len(src) if end < 0 else end
        end = src.find(b"*/", start + 2)
        if end < 0:
            self._error(start, "comment not terminated")
            return len(src)
        return end + 2

    def _comment_ends_line(self, i: int) -> bool:
        """Whether the comments starting just before ``i`` run to a line end."""
        src = self.src
        n = len(src)
        while i < n and src[i] in b"/*":
            if src[i] == 0x2F:
                return True
            i += 1
            while i < n:
                if src[i] == 0x0A:
                    return True
                if src[i] == 0x2A and i + 1 < n and src[i + 1] == 0x2F:
                    i += 2
                    break
                i += 1
            while i < n and src[i] in b" \t\r":
                i += 1
            if i >= n or src[i] == 0x0A:
                return True
            if src[i] != 0x2F:
                return False
            i += 1
        return False