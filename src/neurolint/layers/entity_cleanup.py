"""Layer 2 -- entity and pattern cleanup.

Decodes HTML entities that leaked into source (usually from copy/paste or a
bad serializer), swaps ``console.log`` for ``console.debug`` and replaces
``var`` declarations with ``let``.

``&amp;`` is decoded last so that ``&amp;quot;`` becomes ``&quot;`` rather
than being decoded twice.
"""

from __future__ import annotations

import re

from neurolint.domain.enums import LayerId, Severity
from neurolint.domain.values import TransformOptions, TransformOutput

from .base import Detector, PatternRule, any_rule_matches, apply_rules

LAYER_ID = LayerId.ENTITY_CLEANUP
NAME = "Entity Cleanup"
DESCRIPTION = "HTML entities, logging calls and legacy declarations"

QUOTE_ENTITY = PatternRule(
    name="quot",
    regex=re.compile(r"&quot;"),
    replacement='"',
    improvement="Decoded {count} &quot; entities",
)

APOSTROPHE_ENTITY = PatternRule(
    name="apos",
    regex=re.compile(r"&#x27;|&#39;|&apos;"),
    replacement="'",
    improvement="Decoded {count} apostrophe entities",
)

BRACKET_ENTITY = PatternRule(
    name="lt-gt",
    regex=re.compile(r"&(lt|gt);"),
    replacement=lambda m: "<" if m.group(1) == "lt" else ">",
    improvement="Decoded {count} &lt;/&gt; entities",
)

AMPERSAND_ENTITY = PatternRule(
    name="amp",
    regex=re.compile(r"&amp;"),
    replacement="&",
    improvement="Decoded {count} &amp; entities",
)

CONSOLE_LOG = PatternRule(
    name="console-log",
    regex=re.compile(r"(?<![\w$.])console\.log\("),
    replacement="console.debug(",
    improvement="Replaced {count} console.log calls with console.debug",
)

VAR_DECLARATION = PatternRule(
    name="var",
    regex=re.compile(r"(?<![\w$.])var\s+(?=[A-Za-z_$\[{])"),
    replacement="let ",
    improvement="Converted {count} var declarations to let",
)

ENTITY_RULES = (QUOTE_ENTITY, APOSTROPHE_ENTITY, BRACKET_ENTITY, AMPERSAND_ENTITY)
RULES = ENTITY_RULES + (CONSOLE_LOG, VAR_DECLARATION)

DETECTORS = (
    Detector(
        pattern="html-entities",
        severity=Severity.MEDIUM,
        description="HTML entities found in source",
        layer_id=LAYER_ID,
        predicate=any_rule_matches(*ENTITY_RULES),
    ),
    Detector(
        pattern="console-logging",
        severity=Severity.LOW,
        description="console.log calls left in code",
        layer_id=LAYER_ID,
        predicate=any_rule_matches(CONSOLE_LOG),
    ),
    Detector(
        pattern="var-declarations",
        severity=Severity.LOW,
        description="Legacy var declarations",
        layer_id=LAYER_ID,
        predicate=any_rule_matches(VAR_DECLARATION),
    ),
)


def transform(code: str, options: TransformOptions) -> TransformOutput:
    return apply_rules(code, RULES)
