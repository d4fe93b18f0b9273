"""Layer 3 -- component fixes.

* List rendering: ``items.map(item => <li>...)`` gets an index parameter and
  a ``key={index}`` attribute on the rendered element.  An existing second
  parameter is reused as the key; an existing ``key`` is left alone.
* Images: ``<img>`` elements without an ``alt`` attribute get ``alt=""``.

The opening-tag scan treats ``=>`` as part of an attribute value, so arrow
functions inside attributes do not end the tag early.
"""

from __future__ import annotations

import re

from neurolint.domain.enums import LayerId, Severity
from neurolint.domain.values import TransformOptions, TransformOutput

from .base import Detector, PatternRule, any_rule_matches, apply_rules

LAYER_ID = LayerId.COMPONENTS
NAME = "Components"
DESCRIPTION = "React component best practices"

_MAP_TO_ELEMENT = re.compile(
    r"(?P<head>\.map\(\s*)"
    r"(?P<params>\([^()]*\)|[A-Za-z_$][\w$]*)"
    r"(?P<arrow>\s*=>\s*\(?\s*)"
    r"<(?P<tag>[A-Za-z][\w.]*)"
    r"(?P<attrs>(?:=>|[^>])*)>"
)

_KEY_ATTR = re.compile(r"(?<![\w-])key\s*=")
_ALT_ATTR = re.compile(r"(?<![\w-])alt\s*=")
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")


def _split_params(params: str) -> list[str]:
    """Split an arrow-function parameter list on top-level commas."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in params:
        if ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


def _add_list_key(match: re.Match[str]) -> str:
    if _KEY_ATTR.search(match.group("attrs")):
        return match.group(0)

    raw = match.group("params")
    inner = raw[1:-1] if raw.startswith("(") else raw
    params = _split_params(inner)
    if not params:
        return match.group(0)

    if len(params) >= 2:
        index_match = _IDENTIFIER.match(params[1])
        if index_match is None:
            return match.group(0)
        index_name = index_match.group(0)
        new_params = raw
    else:
        index_name = "idx" if params[0] == "index" else "index"
        new_params = f"({params[0]}, {index_name})"

    return (
        f"{match.group('head')}{new_params}{match.group('arrow')}"
        f"<{match.group('tag')} key={{{index_name}}}{match.group('attrs')}>"
    )


_IMG_TAG = re.compile(r"<img(?=[\s/>])(?P<attrs>(?:=>|[^>])*)>")


def _add_img_alt(match: re.Match[str]) -> str:
    if _ALT_ATTR.search(match.group("attrs")):
        return match.group(0)
    return f'<img alt=""{match.group("attrs")}>'


MISSING_LIST_KEY = PatternRule(
    name="list-key",
    regex=_MAP_TO_ELEMENT,
    replacement=_add_list_key,
    improvement="Added key props to {count} list items",
)

MISSING_IMG_ALT = PatternRule(
    name="img-alt",
    regex=_IMG_TAG,
    replacement=_add_img_alt,
    improvement="Added alt attributes to {count} images",
)

RULES = (MISSING_LIST_KEY, MISSING_IMG_ALT)

DETECTORS = (
    Detector(
        pattern="missing-list-keys",
        severity=Severity.HIGH,
        description="Missing key props in map operations",
        layer_id=LAYER_ID,
        predicate=any_rule_matches(MISSING_LIST_KEY),
    ),
    Detector(
        pattern="img-missing-alt",
        severity=Severity.MEDIUM,
        description="Images without alt text",
        layer_id=LAYER_ID,
        predicate=any_rule_matches(MISSING_IMG_ALT),
    ),
)


def transform(code: str, options: TransformOptions) -> TransformOutput:
    return apply_rules(code, RULES)
