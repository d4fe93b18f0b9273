"""Layer 5 -- Next.js App Router fixes.

A ``'use client'`` directive only takes effect as the first statement of a
module.  When it appears further down, every copy is removed and a single
directive is inserted in front of the first statement.  Leading comments
(license headers, eslint pragmas) stay above it.
"""

from __future__ import annotations

import re

from neurolint.domain.enums import LayerId, Severity
from neurolint.domain.values import TransformOptions, TransformOutput

from .base import Detector

LAYER_ID = LayerId.APP_ROUTER
NAME = "App Router"
DESCRIPTION = "Next.js App Router directive placement"

_DIRECTIVE = re.compile(r"""^\s*(?P<quote>['"])use client(?P=quote)\s*;?\s*$""")


def _is_comment_or_blank(line: str, in_block: bool) -> tuple[bool, bool]:
    """Return ``(skip_line, still_in_block_comment)``."""
    stripped = line.strip()
    if in_block:
        return True, "*/" not in stripped
    if not stripped or stripped.startswith("//"):
        return True, False
    if stripped.startswith("/*"):
        return True, "*/" not in stripped
    return False, False


def _first_statement_index(lines: list[str]) -> int | None:
    in_block = False
    for idx, line in enumerate(lines):
        skip, in_block = _is_comment_or_blank(line, in_block)
        if not skip:
            return idx
    return None


def _misplaced_directive(lines: list[str]) -> tuple[int | None, list[int]]:
    """Return ``(first_statement_index, directive_line_indices)`` when misplaced."""
    directive_lines = [i for i, line in enumerate(lines) if _DIRECTIVE.match(line)]
    if not directive_lines:
        return None, []
    first = _first_statement_index(lines)
    if first is not None and first == directive_lines[0] and len(directive_lines) == 1:
        return None, []
    return first, directive_lines


def has_misplaced_directive(code: str) -> bool:
    _, directive_lines = _misplaced_directive(code.split("\n"))
    return bool(directive_lines)


DETECTORS = (
    Detector(
        pattern="misplaced-use-client",
        severity=Severity.MEDIUM,
        description='Misplaced "use client" directive',
        layer_id=LAYER_ID,
        predicate=has_misplaced_directive,
    ),
)


def transform(code: str, options: TransformOptions) -> TransformOutput:
    lines = code.split("\n")
    _, directive_lines = _misplaced_directive(lines)
    if not directive_lines:
        return TransformOutput.unchanged(code)

    quote = _DIRECTIVE.match(lines[directive_lines[0]]).group("quote")
    drop = set(directive_lines)
    kept = [line for i, line in enumerate(lines) if i not in drop]
    insert_at = _first_statement_index(kept)
    if insert_at is None:
        insert_at = len(kept)
    kept.insert(insert_at, f"{quote}use client{quote};")

    new_code = "\n".join(kept)
    if new_code == code:
        return TransformOutput.unchanged(code)
    return TransformOutput(
        code=new_code,
        change_count=len(directive_lines),
        improvements=("Moved 'use client' directive to the top of the module",),
    )
