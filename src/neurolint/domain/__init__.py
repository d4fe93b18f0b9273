"""Domain layer: enums, value objects, events and exceptions."""

from neurolint.domain.enums import (
    ErrorCategory,
    ImpactLevel,
    LayerId,
    LayerOutcome,
    LogLevel,
    Severity,
)
from neurolint.domain.exceptions import (
    CodeTooLargeError,
    InputRejectedError,
    LayerTimeoutError,
    NeuroLintError,
)
from neurolint.domain.values import (
    AnalysisResult,
    DetectedIssue,
    ImpactEstimate,
    LayerDescriptor,
    LayerExecutionResult,
    LayerMetrics,
    LogEntry,
    OrchestrationResult,
    PerformanceMetrics,
    TransformOptions,
    TransformOutput,
)

__all__ = [
    # enums
    "ErrorCategory",
    "ImpactLevel",
    "LayerId",
    "LayerOutcome",
    "LogLevel",
    "Severity",
    # exceptions
    "CodeTooLargeError",
    "InputRejectedError",
    "LayerTimeoutError",
    "NeuroLintError",
    # values
    "AnalysisResult",
    "DetectedIssue",
    "ImpactEstimate",
    "LayerDescriptor",
    "LayerExecutionResult",
    "LayerMetrics",
    "LogEntry",
    "OrchestrationResult",
    "PerformanceMetrics",
    "TransformOptions",
    "TransformOutput",
]
