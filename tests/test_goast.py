import pytest

from patchlang.goast import (
    BasicLit,
    GoFile,
    Ident,
    ImportSpec,
    find_import_spec,
    import_name,
    import_path,
)


def test_import_path_none():
    with pytest.raises(ValueError):
        import_path(None)


def test_import_path_missing_path():
    with pytest.raises(ValueError):
        import_path(ImportSpec())


def test_import_path_undecodable():
    with pytest.raises(ValueError, match="invalid import path"):
        import_path(ImportSpec(path=BasicLit(value="foo")))


def test_import_path_success():
    assert import_path(ImportSpec(path=BasicLit(value='"foo"'))) == "foo"


def test_import_path_raw_string():
    assert import_path(ImportSpec(path=BasicLit(value="`foo/bar`"))) == "foo/bar"


def test_import_path_escapes():
    spec = ImportSpec(path=BasicLit(value='"a\\tb\\x41\\u00e9\\101"'))
    assert import_path(spec) == "a\tbA\u00e9A"


@pytest.mark.parametrize("value", ['"foo', '"a\\qb"', '"a"b"', '"\\x4"', "''"])
def test_import_path_bad_syntax(value):
    with pytest.raises(ValueError):
        import_path(ImportSpec(path=BasicLit(value=value)))


def test_import_name_none():
    with pytest.raises(ValueError):
        import_name(None)


def test_import_name_unnamed():
    assert import_name(ImportSpec(path=BasicLit(value='"foo"'))) == ""


def test_import_name_named():
    spec = ImportSpec(name=Ident(name="bar"), path=BasicLit(value='"foo"'))
    assert import_name(spec) == "bar"


def test_find_import_spec_none():
    with pytest.raises(ValueError):
        find_import_spec(None, "foo")


@pytest.fixture
def imports():
    foo = ImportSpec(path=BasicLit(value='"foo"'))
    foo_bar = ImportSpec(path=BasicLit(value='"foo/bar"'))
    return foo, foo_bar, GoFile(imports=[foo, foo_bar])


def test_find_import_spec_no_match(imports):
    _, _, file = imports
    assert find_import_spec(file, "foo/bar/baz") is None


def test_find_import_spec_match_foo(imports):
    foo, _, file = imports
    assert find_import_spec(file, "foo") is foo


def test_find_import_spec_match_foo_bar(imports):
    _, foo_bar, file = imports
    assert find_import_spec(file, "foo/bar") is foo_bar