"""Shared building blocks for layer transforms.

A layer is a pure ``(code, options) -> TransformOutput`` function.  Most
layers are a list of :class:`PatternRule` regex rewrites applied in order;
:func:`apply_rules` folds them over the code and counts substitutions.

Each layer also publishes :class:`Detector` instances.  A detector shares its
match predicate with the rule that fixes the problem, so the analyzer only
recommends a layer when that layer would actually change something.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from neurolint.domain.enums import LayerId, Severity
from neurolint.domain.values import TransformOutput

Replacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True)
class PatternRule:
    """One regex rewrite.

    Attributes
    ----------
    name:
        Short identifier, used in debug logging.
    regex:
        Compiled pattern.
    replacement:
        ``re.sub`` replacement string or callable.  A callable that returns
        the matched text unchanged does not count as a change.
    improvement:
        Label appended to ``TransformOutput.improvements`` when the rule
        changes at least one match.  ``{count}`` is substituted.
    """

    name: str
    regex: re.Pattern[str]
    replacement: Replacement
    improvement: str

    def apply(self, code: str) -> tuple[str, int]:
        """Return ``(new_code, number_of_changed_matches)``."""
        if isinstance(self.replacement, str):
            return self.regex.subn(self.replacement, code)

        changed = 0
        replace = self.replacement

        def _counting(match: re.Match[str]) -> str:
            nonlocal changed
            new = replace(match)
            if new != match.group(0):
                changed += 1
            return new

        return self.regex.sub(_counting, code), changed

    def matches(self, code: str) -> bool:
        """``True`` if applying the rule would change *code*."""
        if isinstance(self.replacement, str):
            return self.regex.search(code) is not None
        return self.apply(code)[1] > 0


def apply_rules(code: str, rules: Sequence[PatternRule]) -> TransformOutput:
    """Fold *rules* over *code* and build the layer's output."""
    total = 0
    improvements: list[str] = []
    for rule in rules:
        code, count = rule.apply(code)
        if count:
            total += count
            improvements.append(rule.improvement.format(count=count))
    return TransformOutput(code=code, change_count=total, improvements=tuple(improvements))


@dataclass(frozen=True)
class Detector:
    """A read-only check that maps a code smell to the layer fixing it."""

    pattern: str
    severity: Severity
    description: str
    layer_id: LayerId
    predicate: Callable[[str], bool] = field(compare=False, repr=False)

    def fires(self, code: str) -> bool:
        return bool(self.predicate(code))


def any_rule_matches(*rules: PatternRule) -> Callable[[str], bool]:
    """Build a detector predicate from the rules that fix the issue."""

    def _predicate(code: str) -> bool:
        return any(rule.matches(code) for rule in rules)

    return _predicate
