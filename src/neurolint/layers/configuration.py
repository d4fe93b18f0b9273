"""Layer 1 -- configuration normalization.

Fixes outdated settings in ``tsconfig.json`` / ``next.config.js`` style
sources: legacy compile targets, disabled strict mode, disabled React
strict mode.  Code without such settings passes through untouched.
"""

from __future__ import annotations

import re

from neurolint.domain.enums import LayerId, Severity
from neurolint.domain.values import TransformOptions, TransformOutput

from .base import Detector, PatternRule, any_rule_matches, apply_rules

LAYER_ID = LayerId.CONFIGURATION
NAME = "Configuration"
DESCRIPTION = "TypeScript, Next.js and package configuration fixes"

LEGACY_TARGET = PatternRule(
    name="legacy-target",
    regex=re.compile(r'("target"\s*:\s*)"es(?:3|5)"', re.IGNORECASE),
    replacement=r'\1"es2020"',
    improvement="Upgraded compile target to es2020 ({count})",
)

STRICT_MODE_OFF = PatternRule(
    name="strict-off",
    regex=re.compile(r'("strict"\s*:\s*)false\b'),
    replacement=r"\1true",
    improvement="Enabled TypeScript strict mode ({count})",
)

REACT_STRICT_MODE_OFF = PatternRule(
    name="react-strict-off",
    regex=re.compile(r"(\breactStrictMode\s*:\s*)false\b"),
    replacement=r"\1true",
    improvement="Enabled reactStrictMode ({count})",
)

RULES = (LEGACY_TARGET, STRICT_MODE_OFF, REACT_STRICT_MODE_OFF)

DETECTORS = (
    Detector(
        pattern="outdated-config",
        severity=Severity.HIGH,
        description="Outdated configuration detected",
        layer_id=LAYER_ID,
        predicate=any_rule_matches(*RULES),
    ),
)


def transform(code: str, options: TransformOptions) -> TransformOutput:
    return apply_rules(code, RULES)
