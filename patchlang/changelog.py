"""Extract the release notes of one version from a CHANGELOG.md file.

Version headers take one of the forms ``## 0.1.3 - 2021-08-18`` or
``## [0.1.3] - 2021-08-18``; a version's notes run until the next ``## ``
header.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Iterable

_DESCRIPTION = """\
Retrieves the release notes for VERSION from a CHANGELOG.md file and prints
them to stdout.
"""

_EPILOG = """\
examples:
  extract-changelog -i CHANGELOG.md v1.2.3
  extract-changelog 0.2.5
"""


class ChangelogError(Exception):
    """Raised when release notes cannot be extracted."""


def extract(reader: Iterable[str], version: str) -> str:
    """Return the notes for ``version``, ending with a single newline."""
    collected: list[str] = []
    found = False

    for raw in reader:
        text = raw[:-1] if raw.endswith("\n") else raw
        if text.endswith("\r"):
            text = text[:-1]

        if not found:
            if text.startswith(f"## {version} ") or text.startswith(f"## [{version}]"):
                collected.append(text)
                found = True
        elif text.startswith("## "):
            break
        else:
            collected.append(text)

    if not found:
        raise ChangelogError(f"changelog for {json.dumps(version)} not found")

    return "\n".join(collected).strip() + "\n"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extract-changelog",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-i", dest="input", default="CHANGELOG.md",
                        metavar="FILE", help="input file")
    parser.add_argument("version", nargs="?", default="", metavar="VERSION")
    return parser


def _run(argv: list[str] | None) -> str:
    args = _build_parser().parse_args(argv)
    version = args.version
    if version.startswith("v"):
        version = version[1:]
    if not version:
        raise ChangelogError("please provide a version")

    try:
        with open(args.input, encoding="utf-8") as changelog:
            return extract(changelog, version)
    except OSError as exc:
        raise ChangelogError(f"open changelog: {exc}") from exc


def main(argv: list[str] | None = None) -> int:
    """Print the notes for the requested version; return the exit status."""
    try:
        notes = _run(argv)
    except ChangelogError as exc:
        print(exc, file=sys.stderr)
        return 1
    sys.stdout.write(notes)
    return 0


if __name__ == "__main__":
    sys.exit(main())