# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Line diffs between the broken text and a repair suggestion."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import Literal

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class DiffLine:
    """One row of a side-by-side diff.

    Attributes:
        kind: ``"equal"``, ``"removed"``, ``"added"`` or ``"changed"``.
        old: Line from the original text, if any.
        new: Line from the suggestion, if any.
    """

    kind: Literal["equal", "removed", "added", "changed"]
    old: str | None
    new: str | None


def diff_suggestion(original: str, suggestion: str) -> list[DiffLine]:
    """Return a side-by-side diff of *original* and *suggestion*."""
    old_lines = original.splitlines()
    new_lines = suggestion.splitlines()
    rows: list[DiffLine] = []
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            rows.extend(DiffLine("equal", old, new) for old, new in zip(old_lines[i1:i2], new_lines[j1:j2]))
        elif tag == "delete":
            rows.extend(DiffLine("removed", old, None) for old in old_lines[i1:i2])
        elif tag == "insert":
            rows.extend(DiffLine("added", None, new) for new in new_lines[j1:j2])
        else:
            old_chunk = old_lines[i1:i2]
            new_chunk = new_lines[j1:j2]
            for index in range(max(len(old_chunk), len(new_chunk))):
                old = old_chunk[index] if index < len(old_chunk) else None
                new = new_chunk[index] if index < len(new_chunk) else None
                if old is None:
                    rows.append(DiffLine("added", None, new))
                elif new is None:
                    rows.append(DiffLine("removed", old, None))
                else:
                    rows.append(DiffLine("changed", old, new))
    return rows


def unified_diff(original: str, suggestion: str, name: str = "diagram") -> str:
    """Return a unified diff from *original* to *suggestion*."""
    return "".join(
        difflib.unified_diff(
            _ensure_newline(original).splitlines(keepends=True),
            _ensure_newline(suggestion).splitlines(keepends=True),
            fromfile=f"{name} (current)",
            tofile=f"{name} (suggested)",
        )
    )


# ################
# Implementation
# ################


def _ensure_newline(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"
