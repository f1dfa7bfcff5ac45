import pytest

from patchlang.goast import Ident
from patchlang.meta import Meta, MetaError, VarDecl, parse_meta
from patchlang.positions import FileSet, offset_pos
from patchlang.section import split
from patchlang.text import unlines


def _ident(pos, name):
    return Ident(name=name, name_pos=pos)


def _parse(give, change_name="", change_index=0):
    fset = FileSet()
    src = f"@{change_name}@\n".encode() + give + b"@@\n"
    changes = split(fset, "test.patch", src)
    assert len(changes) == 1
    return fset, parse_meta(fset, change_index, changes[0])


@pytest.mark.parametrize(
    "give, change_name, want",
    [
        (unlines(), "", Meta()),
        (
            unlines("var foo identifier"),
            "",
            Meta(vars=[VarDecl(var_pos=1, names=[_ident(5, "foo")],
                               type=_ident(9, "identifier"))]),
        ),
        (
            unlines("var foo, bar, baz identifier"),
            "foo",
            Meta(vars=[VarDecl(
                var_pos=1,
                names=[_ident(5, "foo"), _ident(10, "bar"), _ident(15, "baz")],
                type=_ident(19, "identifier"),
            )]),
        ),
        (
            unlines(
                "var foo identifier",
                "var bar, baz identifier",
                "var qux, quux expression",
            ),
            "",
            Meta(vars=[
                VarDecl(var_pos=1, names=[_ident(5, "foo")],
                        type=_ident(9, "identifier")),
                VarDecl(var_pos=20, names=[_ident(24, "bar"), _ident(29, "baz")],
                        type=_ident(33, "identifier")),
                VarDecl(var_pos=44, names=[_ident(48, "qux"), _ident(53, "quux")],
                        type=_ident(58, "expression")),
            ]),
        ),
    ],
    ids=["empty", "single var", "multiple vars", "multiple decls"],
)
def test_parse_meta(give, change_name, want):
    fset, got = _parse(give, change_name)
    if got.vars:
        file = fset.file(got.vars[0].pos())
        offset_pos(want, file.base - 1)
    assert got == want


@pytest.mark.parametrize(
    "give, want_errs",
    [
        (unlines("xar identifier"),
         ['test.patch:2:1: unexpected "IDENT", expected "var"']),
        (unlines("var x identifier", "var x y z"),
         ['test.patch:3:9: unexpected "IDENT", expected ";" or a newline']),
        (unlines("var x identifier", "var var var", "var y expression"),
         ['test.patch:3:5: unexpected "var", expected an identifier']),
        (unlines("var x"),
         ['test.patch:2:6: unexpected ";", expected an identifier']),
        (unlines("var # foo"),
         ["test.patch:2:5: illegal character U+0023 '#'"]),
    ],
    ids=["variable without var", "too many idents", "too many vars",
         "missing type name", "unrecognized token"],
)
def test_parse_meta_errors(give, want_errs):
    with pytest.raises(MetaError) as info:
        _parse(give)
    for msg in want_errs:
        assert msg in str(info.value)
    assert info.value.errors


def test_meta_file_name_uses_change_name():
    fset, got = _parse(unlines("var x identifier"), change_name="cleanup")
    assert fset.file(got.vars[0].pos()).name == "test.patchcleanup.meta"


def test_meta_file_name_uses_index_when_unnamed():
    fset, got = _parse(unlines("var x identifier"), change_index=3)
    assert fset.file(got.vars[0].pos()).name == "test.patch3.meta"


def test_positions_map_back_to_patch_file():
    fset, got = _parse(unlines("var x identifier", "var y expression"))
    position = fset.position(got.vars[1].names[0].name_pos)
    assert (position.filename, position.line, position.column) == ("test.patch", 3, 5)


def test_var_decl_pos_and_end():
    decl = VarDecl(var_pos=10, names=[_ident(14, "x")], type=_ident(16, "identifier"))
    assert decl.pos() == 10
    assert decl.end() == 26


def test_var_decl_end_without_type():
    assert VarDecl(var_pos=10).end() == 0