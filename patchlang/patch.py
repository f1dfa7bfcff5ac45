"""Splitting the unified diff of a change into its before and after versions."""

from __future__ import annotations

from dataclasses import dataclass, field

from .section import Line, LinePos


@dataclass
class PatchVersion:
    """One side of a unified diff.

    ``lines`` maps the offset of each line in ``contents`` to the position
    in the patch file that the line was read from.
    """

    contents: bytes = b""
    lines: list[LinePos] = field(default_factory=list)


def split_patch(patch: list[Line]) -> tuple[PatchVersion, PatchVersion]:
    """Split a patch into the versions before and after the change.

    Lines starting with ``-`` go to the before version only, lines starting
    with ``+`` to the after version only, and all other lines to both. The
    marker character is dropped.
    """
    minus = bytearray()
    plus = bytearray()
    minus_lines: list[LinePos] = []
    plus_lines: list[LinePos] = []

    for line in patch:
        text, start = line.text, line.start_pos
        to_minus = to_plus = True
        if text.startswith(b"-"):
            to_plus = False
            text, start = text[1:], start + 1
        elif text.startswith(b"+"):
            to_minus = False
            text, start = text[1:], start + 1

        if to_minus:
            minus_lines.append(LinePos(offset=len(minus), pos=start))
            minus += text + b"\n"
        if to_plus:
            plus_lines.append(LinePos(offset=len(plus), pos=start))
            plus += text + b"\n"

    return (
        PatchVersion(contents=bytes(minus), lines=minus_lines),
        PatchVersion(contents=bytes(plus), lines=plus_lines),
    )