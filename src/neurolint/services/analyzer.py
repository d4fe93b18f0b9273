"""Static pre-flight analysis.

:class:`Analyzer` runs the fixed detector battery over the input text and
turns the findings into a layer recommendation.  It never mutates code and
never runs a layer, so :meth:`Analyzer.analyze` is a pure function of its
input and the analyzer configuration.

Scoring
-------
Each fired detector contributes its severity weight (low=1, medium=2,
high=3).  With *w* the summed weight::

    confidence = 1 - (1 - floor) * exp(-w / scale)

rounded to four decimals.  Nothing detected yields ``floor``; confidence
grows monotonically with the number and severity of findings and
approaches, but never exceeds, 1.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from neurolint.domain.enums import ImpactLevel, Severity
from neurolint.domain.values import AnalysisResult, DetectedIssue, ImpactEstimate
from neurolint.infrastructure.config import AnalyzerConfig
from neurolint.layers.base import Detector
from neurolint.layers.registry import DEFAULT_REGISTRY, DETECTORS, LayerRegistry

logger = logging.getLogger(__name__)

_IMPACT_BY_SEVERITY = {
    Severity.LOW: ImpactLevel.LOW,
    Severity.MEDIUM: ImpactLevel.MEDIUM,
    Severity.HIGH: ImpactLevel.HIGH,
}

# (max issue count, label); the last bucket is open-ended
_FIX_TIME_BUCKETS: tuple[tuple[int, str], ...] = (
    (0, "none"),
    (2, "under 30 seconds"),
    (5, "1-2 minutes"),
)
_FIX_TIME_OVERFLOW = "2-5 minutes"


def confidence_score(issues: Sequence[DetectedIssue], config: AnalyzerConfig | None = None) -> float:
    """Deterministic confidence in ``[floor, 1)`` for *issues*."""
    config = config or AnalyzerConfig()
    weight = sum(issue.severity.weight for issue in issues)
    value = 1.0 - (1.0 - config.confidence_floor) * math.exp(-weight / config.confidence_scale)
    return round(min(max(value, 0.0), 1.0), 4)


def estimate_fix_time(issue_count: int) -> str:
    for limit, label in _FIX_TIME_BUCKETS:
        if issue_count <= limit:
            return label
    return _FIX_TIME_OVERFLOW


def estimate_impact(issues: Sequence[DetectedIssue]) -> ImpactEstimate:
    """Impact level is the highest severity seen; ``low`` when clean."""
    if issues:
        worst = max((issue.severity for issue in issues), key=lambda s: s.weight)
        level = _IMPACT_BY_SEVERITY[worst]
    else:
        level = ImpactLevel.LOW
    return ImpactEstimate(level=level, estimated_fix_time=estimate_fix_time(len(issues)))


class Analyzer:
    """Read-only issue detector and layer recommender.

    Parameters
    ----------
    config:
        Confidence-formula constants.
    detectors:
        Detector battery, run in the given order.  Defaults to every built-in
        layer's detectors in layer order.
    registry:
        Used only to name layers in the reasoning strings.
    """

    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        detectors: Sequence[Detector] = DETECTORS,
        registry: LayerRegistry | None = None,
    ) -> None:
        self._config = config or AnalyzerConfig()
        self._config.validate()
        self._detectors = tuple(detectors)
        self._registry = registry or DEFAULT_REGISTRY

    @property
    def detectors(self) -> tuple[Detector, ...]:
        return self._detectors

    def detect(self, code: str) -> tuple[DetectedIssue, ...]:
        """Run every detector; one issue per detector that fires."""
        return tuple(
            DetectedIssue(
                pattern=detector.pattern,
                severity=detector.severity,
                description=detector.description,
                fixed_by_layer=int(detector.layer_id),
            )
            for detector in self._detectors
            if detector.fires(code)
        )

    def analyze(self, code: str) -> AnalysisResult:
        issues = self.detect(code)
        recommended = tuple(sorted({issue.fixed_by_layer for issue in issues}))

        reasoning = tuple(
            self._reason_for(layer_id, [i for i in issues if i.fixed_by_layer == layer_id])
            for layer_id in recommended
        )

        result = AnalysisResult(
            detected_issues=issues,
            recommended_layers=recommended,
            confidence=confidence_score(issues, self._config),
            reasoning=reasoning,
            estimated_impact=estimate_impact(issues),
        )
        logger.debug(
            "Analysis found %d issue(s); recommending layers %s (confidence=%.4f)",
            len(issues), list(recommended), result.confidence,
        )
        return result

    def _reason_for(self, layer_id: int, issues: Sequence[DetectedIssue]) -> str:
        name = self._registry.get(layer_id).name
        descriptions = "; ".join(issue.description for issue in issues)
        return f"Layer {layer_id} ({name}): {descriptions}"
