# patchlang

`patchlang` reads patch files that describe code transformations for Go
sources. A patch file holds one or more *changes*. Each change has a header,
a metavariables section and a unified-diff-style body:

```
# Lines whose first non-blank character is '#' are comments.
@ add_argument @
var x identifier
@@
-x()
+x(42)
```

The package splits such files into their changes, parses the metavariable
declarations, separates each body into its "before" and "after" versions,
and rewrites the extended syntax (a missing package clause, top-level
statements and expressions, `...` wildcards) into plain Go source while
recording what it changed, so that positions can be mapped back to the patch
file.

It also ships a small command, `extract-changelog`, that pulls the notes for
one release out of a Keep-a-Changelog style `CHANGELOG.md`.

## Installation

```
pip install .
```

Python 3.10 or later is required; there are no runtime dependencies.

## Positions

`patchlang.positions` works like Go's `go/token`: a `FileSet` hands out
ranges of integer positions to `TokenFile` objects (`FileSet.add_file`),
finds the file holding a position (`FileSet.file`) and decodes any position
into a `Position` with file name, offset, line and column
(`FileSet.position`). A `TokenFile` converts between offsets and positions
(`pos`, `offset`), builds its line table with `set_lines_for_content`, and
can map its lines onto lines of another file with `add_line_column_info`.
Position 0 means "no position".

`offset_pos(node, offset)` and `transform_pos(node, transform)` rewrite, in
place, every non-zero position inside a tree of dataclass nodes.

## Working with patch files

```python
from patchlang.positions import FileSet
from patchlang.section import split
from patchlang.meta import parse_meta
from patchlang.patch import split_patch

with open("add_argument.patch", "rb") as f:
    source = f.read()

fset = FileSet()
changes = split(fset, "add_argument.patch", source)

for index, change in enumerate(changes):
    meta = parse_meta(fset, index, change)
    for decl in meta.vars:
        print([name.name for name in decl.names], decl.type.name)

    before, after = split_patch(change.patch)
    print(before.contents.decode())
    print(after.contents.decode())
```

- `split` returns a list of `Change` objects (`name`, `meta` and `patch`
  sections made of `Line` objects, plus header positions). It raises
  `PatchSyntaxError` for an empty file, a header that is neither `@@` nor
  `@ name @`, a name that is not a valid Go identifier, or a metavariables
  section that never closes. The exception's `errors` attribute lists every
  message; each starts with `file:line:column`.
- `to_bytes(section)` joins a section's lines into bytes and returns a
  sorted list of `LinePos` entries mapping offsets in those bytes to
  positions in the patch file.
- `parse_meta` returns a `Meta` holding `VarDecl` entries (`names`, `type`,
  `var_pos`). It raises `MetaError` for anything that is not of the form
  `var a, b kind`, with positions pointing at the patch file's lines.
- `split_patch` returns two `PatchVersion` objects. Lines starting with `-`
  go only to the first, lines starting with `+` only to the second, other
  lines to both; the marker is dropped. Each version's `lines` maps offsets
  in its `contents` back to positions in the patch file.

### Rewriting extended syntax

`augment` takes the source of one side of a patch and returns valid Go
source, the augmentations it made (`FakePackage`, `FakeFunc`, `Dots`) and
the `PosAdjustment` entries needed to map positions back:

```python
from patchlang.augment import augment

src, augmentations, adjustments = augment(b"foo(bar, ..., baz)\n")
print(src.decode())
# package _
# func _() {
# foo(bar, dts, baz)
# }
```

A `...` that stands for named parameters or results becomes `_ d`; any
other becomes `dts`. Both have the length of `...`, so only the added
package clause and wrapper function need position adjustments. Scanning
errors are raised as `AugmentError`.

### Tokenizing Go

`patchlang.scanner.Scanner(file, src, error_handler=None)` splits Go source
into `(position, Token, text)` tuples with `scan()`, or by iterating over
it up to and including `Token.EOF`. It skips comments and inserts
semicolons at line ends the way Go does. Errors are passed to the handler
as `(Position, message)`.

### Go AST helpers

`patchlang.goast` provides the node types the toolkit works with (`Ident`,
`BasicLit`, `ImportSpec`, `CallExpr`, `ExprStmt`, `BlockStmt`, `GoFile`)
and import helpers: `import_path` (the unquoted path of an import),
`import_name` (its name, or an empty string) and `find_import_spec` (the
import of a `GoFile` with a given path, or `None`). They raise `ValueError`
on missing specs or undecodable paths.

## What it does not do

`patchlang` reads and prepares patch files; it does not apply them. There
is no parser that turns the rewritten source into a full Go syntax tree, no
matching of patches against Go files, and no command that rewrites Go
sources. The only command is `extract-changelog`.

## Extracting release notes

```
extract-changelog -i CHANGELOG.md v1.2.3
```

The leading `v` is optional and the input file defaults to `CHANGELOG.md`.
The notes for the requested version, header included, are printed to
standard output, ending with a single newline; they run until the next
`## ` header. Both header styles are recognised:

```
## 1.2.3 - 2021-08-18
## [1.2.3] - 2021-08-18
```

If no version is given, the file cannot be opened or the version is not
present, a message goes to standard error and the exit status is 1.

From Python, `patchlang.changelog.extract(lines, version)` takes an
iterable of lines (an open file will do) and returns the same text; it
raises `ChangelogError` when the version is not present.

## Running the tests

```
pip install ".[test]"
pytest
```