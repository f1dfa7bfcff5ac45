import pytest

from patchlang.positions import FileSet
from patchlang.scanner import Scanner, Token


def scan_all(src: bytes):
    fset = FileSet()
    file = fset.add_file("test.go", -1, len(src))
    errors = []
    scanner = Scanner(file, src, lambda pos, msg: errors.append((pos, msg)))
    return file, scanner, list(scanner), errors


def kinds(tokens):
    return [tok for _, tok, _ in tokens]


def test_semicolon_inserted_after_identifier_at_newline():
    _, _, tokens, errors = scan_all(b"foo\nbar")
    assert kinds(tokens) == [
        Token.IDENT, Token.SEMICOLON, Token.IDENT, Token.SEMICOLON, Token.EOF,
    ]
    assert [lit for _, _, lit in tokens] == ["foo", "\n", "bar", "\n", ""]
    assert errors == []


def test_no_semicolon_after_ellipsis():
    _, _, tokens, _ = scan_all(b"...\nfoo")
    assert kinds(tokens) == [Token.ELLIPSIS, Token.IDENT, Token.SEMICOLON, Token.EOF]


@pytest.mark.parametrize("word", ["package", "import", "func", "var", "type", "return"])
def test_keywords(word):
    _, _, tokens, _ = scan_all(word.encode())
    _, tok, lit = tokens[0]
    assert tok.value == word
    assert lit == word
    assert tok is not Token.IDENT


def test_positions_match_offsets():
    src = b"foo(bar)"
    file, _, tokens, _ = scan_all(src)
    expected = [file.pos(src.index(piece)) for piece in (b"foo", b"(", b"bar", b")")]
    assert [pos for pos, _, _ in tokens[:4]] == expected


def test_operators_use_longest_match():
    _, _, tokens, _ = scan_all(b"a <<= b &^ c ... d")
    ops = [tok for tok in kinds(tokens) if tok is not Token.IDENT][:3]
    assert ops == [Token.SHL_ASSIGN, Token.AND_NOT, Token.ELLIPSIS]
    assert [str(tok) for tok in ops] == ["<<=", "&^", "..."]


def test_illegal_character_is_reported():
    src = b"foo(#)"
    _, scanner, tokens, errors = scan_all(src)
    assert (Token.ILLEGAL, "#") in [(tok, lit) for _, tok, lit in tokens]
    assert len(errors) == 1
    position, msg = errors[0]
    assert msg == "illegal character U+0023 '#'"
    assert position.column == src.index(b"#") + 1
    assert scanner.error_count == 1


def test_line_comment_inserts_semicolon_at_comment():
    src = b"x // note\ny"
    file, _, tokens, _ = scan_all(src)
    assert kinds(tokens) == [
        Token.IDENT, Token.SEMICOLON, Token.IDENT, Token.SEMICOLON, Token.EOF,
    ]
    assert tokens[1][0] == file.pos(src.index(b"//"))


def test_block_comment_on_one_line_is_skipped():
    _, _, tokens, _ = scan_all(b"x /* c */ + y")
    assert kinds(tokens) == [Token.IDENT, Token.ADD, Token.IDENT, Token.SEMICOLON, Token.EOF]


@pytest.mark.parametrize(
    "src, want",
    [
        (b'"a\\"b"', Token.STRING),
        (b"`raw`", Token.STRING),
        (b"'x'", Token.CHAR),
        (b"'\\n'", Token.CHAR),
        (b"42", Token.INT),
        (b"3.14", Token.FLOAT),
        (b"1e9", Token.FLOAT),
        (b"0x1F", Token.INT),
        (b"2i", Token.IMAG),
        (b".5", Token.FLOAT),
    ],
)
def test_literals(src, want):
    _, _, tokens, errors = scan_all(src)
    assert tokens[0][1:] == (want, src.decode())
    assert tokens[1][1] is Token.SEMICOLON
    assert errors == []


def test_unterminated_string_reports_error_at_quote():
    _, scanner, tokens, errors = scan_all(b'"abc\n')
    assert tokens[0][1] is Token.STRING
    assert len(errors) == 1
    assert errors[0][0].column == 1
    assert scanner.error_count == 1


def test_lines_are_registered():
    file, _, tokens, _ = scan_all(b"a\nb\nc")
    lines = [file.line(pos) for pos, tok, _ in tokens if tok is Token.IDENT]
    assert lines == [1, 2, 3]


def test_eof_is_repeated():
    fset = FileSet()
    file = fset.add_file("test.go", -1, 1)
    scanner = Scanner(file, b"x")
    seen = [scanner.scan()[1] for _ in range(4)]
    assert seen == [Token.IDENT, Token.SEMICOLON, Token.EOF, Token.EOF]


def test_size_mismatch_is_rejected():
    fset = FileSet()
    file = fset.add_file("test.go", -1, 10)
    with pytest.raises(ValueError):
        Scanner(file, b"x")