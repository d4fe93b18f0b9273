"""Layer 4 -- hydration and SSR safety.

Browser-only storage APIs blow up during server rendering.  Unguarded
``localStorage.`` / ``sessionStorage.`` accesses get a
``typeof window !== "undefined"`` check shaped by where the access sits:

* operand position (start of a statement, or right after ``=``, ``(``,
  ``[``, ``,``, ``?``, ``:``, ``=>``, ``&&``, ``||`` or ``return``): the
  access is prefixed with ``typeof window !== "undefined" && ``;
* a statement that assigns to storage (``localStorage.theme = "dark";``):
  the statement is prefixed with ``if (typeof window !== "undefined") ``;
* anything else (``!localStorage...``, operands of ``??`` or of operators
  binding tighter than ``&&``, assignments nested in expressions) is left
  alone.

A line that already mentions ``typeof window`` is considered guarded.
"""

from __future__ import annotations

import re

from neurolint.domain.enums import LayerId, Severity
from neurolint.domain.values import TransformOptions, TransformOutput

from .base import Detector, PatternRule, any_rule_matches, apply_rules

LAYER_ID = LayerId.HYDRATION
NAME = "Hydration"
DESCRIPTION = "SSR guards for browser-only APIs"

WINDOW_GUARD = 'typeof window !== "undefined" && '
STATEMENT_GUARD = 'if (typeof window !== "undefined") '

_STORAGE_ACCESS = re.compile(r"(?<![\w$.])(?P<api>localStorage|sessionStorage)\.")
_ALREADY_GUARDED = "typeof window"

_STATEMENT = "statement"
_OPERAND = "operand"

_STATEMENT_KEYWORDS = frozenset({"else", "do"})
_OPERAND_KEYWORDS = frozenset({"return"})
_OPERAND_TAILS = ("=>", "&&", "||")
_OPERAND_CHARS = frozenset("([,?:=")

_ASSIGNMENT = re.compile(
    r"\s*(?:\+\+|--|(?:\*\*|<<|>>>|>>|&&|\|\||\?\?|[-+*/%&|^])?=(?![=>]))"
)
_NULLISH = re.compile(r"\s*\?\?(?!=)")

_CLOSING = {"(": ")", "[": "]", "{": "}"}


def _skip_balanced(text: str, pos: int) -> int:
    """Index just past the bracket group opening at *pos*."""
    depth = 0
    i = pos
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "'\"`":
            i += 1
            while i < n and text[i] != ch:
                i += 2 if text[i] == "\\" else 1
        elif ch in _CLOSING:
            depth += 1
        elif ch in ")]}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return n


def _chain_end(text: str, pos: int) -> int:
    """Index just past the member/call chain continuing at *pos*."""
    i = pos
    n = len(text)
    while i < n:
        ch = text[i]
        if ch.isalnum() or ch in "_$.":
            i += 1
        elif ch == "?" and text.startswith("?.", i):
            i += 2
        elif ch in "([":
            i = _skip_balanced(text, i)
        else:
            break
    return i


def _context(text: str, start: int) -> str | None:
    """Classify what precedes the access at *start*."""
    j = start - 1
    while j >= 0 and text[j].isspace():
        j -= 1
    if j < 0 or text[j] in ";{}":
        return _STATEMENT

    k = j
    while k >= 0 and (text[k].isalnum() or text[k] in "_$"):
        k -= 1
    word = text[k + 1:j + 1]
    if word in _STATEMENT_KEYWORDS:
        return _STATEMENT
    if word in _OPERAND_KEYWORDS:
        return _OPERAND
    if word:
        return None

    tail = text[max(0, j - 1):j + 1]
    if tail in _OPERAND_TAILS:
        return _OPERAND
    if text[j] not in _OPERAND_CHARS:
        return None
    # ``??``, ``==``, ``!=``, ``<=``, ``>=`` and friends bind tighter than ``&&``
    if text[j] in "?=" and j > 0 and text[j - 1] in "?=!<>":
        return None
    return _OPERAND


def _line_of(text: str, pos: int) -> str:
    line_start = text.rfind("\n", 0, pos) + 1
    line_end = text.find("\n", pos)
    return text[line_start:] if line_end == -1 else text[line_start:line_end]


def _guard_storage(match: re.Match[str]) -> str:
    text = match.string
    if _ALREADY_GUARDED in _line_of(text, match.start()):
        return match.group(0)

    context = _context(text, match.start())
    if context is None:
        return match.group(0)

    end = _chain_end(text, match.end())
    if _NULLISH.match(text, end):
        return match.group(0)
    if _ASSIGNMENT.match(text, end):
        if context == _STATEMENT:
            return f"{STATEMENT_GUARD}{match.group(0)}"
        return match.group(0)
    return f"{WINDOW_GUARD}{match.group(0)}"


UNGUARDED_STORAGE = PatternRule(
    name="storage-guard",
    regex=_STORAGE_ACCESS,
    replacement=_guard_storage,
    improvement="Guarded {count} browser storage accesses for SSR",
)

RULES = (UNGUARDED_STORAGE,)

DETECTORS = (
    Detector(
        pattern="unguarded-browser-storage",
        severity=Severity.HIGH,
        description="Unguarded localStorage/sessionStorage usage breaks server rendering",
        layer_id=LAYER_ID,
        predicate=any_rule_matches(UNGUARDED_STORAGE),
    ),
)


def transform(code: str, options: TransformOptions) -> TransformOutput:
    return apply_rules(code, RULES)
