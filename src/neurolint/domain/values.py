"""Value objects for NeuroLint.

All types here are frozen dataclasses -- immutable, compared by value.
They describe layers, layer outputs, per-layer and per-pipeline results,
analysis findings, metrics snapshots and log records.  None of them carry
identity beyond their content.
"""

from __future__ import annotations

import difflib
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .enums import ErrorCategory, ImpactLevel, LayerId, LayerOutcome, LogLevel, Severity

# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransformOptions:
    """Caller-supplied switches for one ``transform()`` call.

    ``verbose`` only affects logging.  ``dry_run`` runs and reports every
    layer but hands the original code back to the caller.
    """

    verbose: bool = False
    dry_run: bool = False

    @classmethod
    def coerce(cls, options: TransformOptions | Mapping[str, Any] | None) -> TransformOptions:
        """Accept an options object, a plain mapping, or ``None``.

        Mapping keys may be given in either ``dry_run`` or ``dryRun`` form.
        """
        if options is None:
            return cls()
        if isinstance(options, TransformOptions):
            return options
        return cls(
            verbose=bool(options.get("verbose", False)),
            dry_run=bool(options.get("dry_run", options.get("dryRun", False))),
        )


# ---------------------------------------------------------------------------
# Layer contract
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransformOutput:
    """What a layer's pure transform function returns."""

    code: str
    change_count: int = 0
    improvements: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.improvements, tuple):
            object.__setattr__(self, "improvements", tuple(self.improvements))

    @classmethod
    def unchanged(cls, code: str) -> TransformOutput:
        """Output of a layer that found nothing to fix."""
        return cls(code=code)


LayerTransform = Callable[
    [str, TransformOptions],
    Union[TransformOutput, Awaitable[TransformOutput]],
]
"""Signature every layer satisfies.  May be a plain function or a coroutine."""


@dataclass(frozen=True)
class LayerDescriptor:
    """Registry entry for one layer.

    Attributes
    ----------
    id:
        The layer id; doubles as its execution position.
    name:
        Display name used by layer pickers.
    description:
        One-line summary of the fix intent.
    transform:
        Pure ``(code, options) -> TransformOutput`` function.
    """

    id: LayerId
    name: str
    description: str
    transform: LayerTransform = field(compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {"id": int(self.id), "name": self.name, "description": self.description}


# ---------------------------------------------------------------------------
# Execution results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerExecutionResult:
    """Outcome of one attempted layer, in execution order.

    ``success`` is ``True`` only for :attr:`LayerOutcome.ACCEPTED`.  A
    reverted result always has a ``revert_reason`` and a zero
    ``change_count``.
    """

    layer_id: int
    layer_name: str
    outcome: LayerOutcome
    execution_time: float  # milliseconds
    change_count: int = 0
    improvements: tuple[str, ...] = ()
    error: str | None = None
    revert_reason: str | None = None
    error_category: ErrorCategory | None = None
    suggestion: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.improvements, tuple):
            object.__setattr__(self, "improvements", tuple(self.improvements))
        if self.outcome is LayerOutcome.REVERTED:
            if not self.revert_reason:
                raise ValueError("reverted results must carry a revert_reason")
            if self.change_count != 0:
                raise ValueError("reverted results must report change_count=0")
        elif self.revert_reason is not None:
            raise ValueError(
                f"revert_reason is only valid for reverted results, got outcome={self.outcome.value}"
            )

    @property
    def success(self) -> bool:
        return self.outcome is LayerOutcome.ACCEPTED

    @property
    def reverted(self) -> bool:
        return self.outcome is LayerOutcome.REVERTED

    def to_dict(self) -> dict[str, Any]:
        return {
            "layer_id": self.layer_id,
            "layer_name": self.layer_name,
            "outcome": self.outcome.value,
            "success": self.success,
            "execution_time": self.execution_time,
            "change_count": self.change_count,
            "improvements": list(self.improvements),
            "error": self.error,
            "revert_reason": self.revert_reason,
            "error_category": self.error_category.value if self.error_category else None,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class OrchestrationResult:
    """Aggregated report for one ``transform()`` call.

    ``states`` holds the input code followed by every accepted intermediate
    state, so ``states[-1]`` is the fully transformed code even for a dry
    run.  ``final_code`` is what the caller should use: the transformed code,
    or the original input when ``dry_run`` is set.
    """

    results: tuple[LayerExecutionResult, ...]
    final_code: str
    original_code: str
    total_execution_time: float  # milliseconds
    states: tuple[str, ...] = ()
    dry_run: bool = False

    @property
    def successful_layers(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def reverted_layers(self) -> int:
        return sum(1 for r in self.results if r.reverted)

    @property
    def total_changes(self) -> int:
        return sum(r.change_count for r in self.results)

    @property
    def transformed_code(self) -> str:
        """Code after every accepted layer, regardless of ``dry_run``."""
        return self.states[-1] if self.states else self.final_code

    def diff(self, context: int = 3) -> str:
        """Unified diff between the input and the transformed code."""
        lines = difflib.unified_diff(
            self.original_code.splitlines(keepends=True),
            self.transformed_code.splitlines(keepends=True),
            fromfile="original",
            tofile="transformed",
            n=context,
        )
        return "".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "successful_layers": self.successful_layers,
            "total_execution_time": self.total_execution_time,
            "final_code": self.final_code,
            "original_code": self.original_code,
            "dry_run": self.dry_run,
        }


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DetectedIssue:
    """A static finding, mapped to the single layer able to fix it."""

    pattern: str
    severity: Severity
    description: str
    fixed_by_layer: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern": self.pattern,
            "severity": self.severity.value,
            "description": self.description,
            "fixed_by_layer": self.fixed_by_layer,
        }


@dataclass(frozen=True)
class ImpactEstimate:
    level: ImpactLevel
    estimated_fix_time: str

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level.value, "estimated_fix_time": self.estimated_fix_time}


@dataclass(frozen=True)
class AnalysisResult:
    """Read-only recommendation produced by the analyzer."""

    detected_issues: tuple[DetectedIssue, ...]
    recommended_layers: tuple[int, ...]
    confidence: float
    reasoning: tuple[str, ...]
    estimated_impact: ImpactEstimate

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")
        if list(self.recommended_layers) != sorted(set(self.recommended_layers)):
            raise ValueError("recommended_layers must be ascending and deduplicated")

    def to_dict(self) -> dict[str, Any]:
        return {
            "detected_issues": [i.to_dict() for i in self.detected_issues],
            "recommended_layers": list(self.recommended_layers),
            "confidence": self.confidence,
            "reasoning": list(self.reasoning),
            "estimated_impact": self.estimated_impact.to_dict(),
        }


# ---------------------------------------------------------------------------
# Metrics snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerMetrics:
    executions: int = 0
    successes: int = 0
    failures: int = 0
    average_time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "executions": self.executions,
            "successes": self.successes,
            "failures": self.failures,
            "average_time": self.average_time,
        }


@dataclass(frozen=True)
class PerformanceMetrics:
    """Point-in-time copy of the process-wide pipeline statistics."""

    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    average_execution_time: float = 0.0
    layer_metrics: Mapping[int, LayerMetrics] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_executions": self.total_executions,
            "successful_executions": self.successful_executions,
            "failed_executions": self.failed_executions,
            "average_execution_time": self.average_execution_time,
            "layer_metrics": {
                str(layer_id): m.to_dict() for layer_id, m in sorted(self.layer_metrics.items())
            },
        }


# ---------------------------------------------------------------------------
# Session log record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogEntry:
    """One structured record in the session log."""

    timestamp: str  # ISO-8601, UTC
    session_id: str
    level: LogLevel
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)
    error: str | None = None
    duration_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": self.timestamp,
            "session_id": self.session_id,
            "level": self.level.value,
            "message": self.message,
            "context": dict(self.context),
        }
        if self.error is not None:
            data["error"] = self.error
        if self.duration_ms is not None:
            data["duration_ms"] = self.duration_ms
        return data
