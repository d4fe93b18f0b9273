"""Domain events for NeuroLint.

Every event is a frozen dataclass inheriting from ``DomainEvent``.  The
orchestrator emits them while a pipeline runs so that surrounding tooling
(progress views, audit sinks) can follow along without polling.

All events carry a ``timestamp`` and a ``source_id`` identifying the
originating session.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from .values import AnalysisResult, LayerExecutionResult


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    timestamp: float = field(default_factory=time.time)
    source_id: str = ""


# ---------------------------------------------------------------------------
# Pipeline lifecycle
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineStarted(DomainEvent):
    """A ``transform()`` call resolved its layer order and is about to run."""

    layer_ids: tuple[int, ...] = ()
    code_length: int = 0
    dry_run: bool = False


@dataclass(frozen=True)
class LayerExecuted(DomainEvent):
    """One layer finished (accepted, unchanged, or reverted)."""

    position: int = 0  # 1-based index within the pipeline
    total: int = 0
    result: LayerExecutionResult | None = None


@dataclass(frozen=True)
class PipelineCompleted(DomainEvent):
    """The pipeline reached its terminal state."""

    successful_layers: int = 0
    reverted_layers: int = 0
    total_execution_time: float = 0.0
    dry_run: bool = False


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisCompleted(DomainEvent):
    """The analyzer produced a recommendation."""

    result: AnalysisResult | None = None
