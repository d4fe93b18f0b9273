"""NeuroLint.

Multi-layer code transformation for React / Next.js sources: a fixed,
ordered set of pure text-to-text layers, each gated by a validation step
that reverts any output that would corrupt the code, plus a read-only
analysis pass that recommends which layers to run.

Usage::

    from neurolint import MetricsStore, Orchestrator

    orchestrator = Orchestrator(metrics=MetricsStore())
    result = orchestrator.transform_sync(code, [1, 2, 3, 4, 5], {"dry_run": True})
    print(result.diff())
"""

__version__ = "0.1.0"

from neurolint.domain import (
    AnalysisResult,
    InputRejectedError,
    LayerId,
    OrchestrationResult,
    TransformOptions,
)
from neurolint.infrastructure import EventBus, OrchestratorConfig, SessionLogger
from neurolint.layers import LAYER_EXECUTION_ORDER, resolve_order
from neurolint.measurement import MetricsStore
from neurolint.services import Analyzer, Orchestrator

__all__ = [
    "LAYER_EXECUTION_ORDER",
    "AnalysisResult",
    "Analyzer",
    "EventBus",
    "InputRejectedError",
    "LayerId",
    "MetricsStore",
    "OrchestrationResult",
    "Orchestrator",
    "OrchestratorConfig",
    "SessionLogger",
    "TransformOptions",
    "resolve_order",
]
