"""Process-wide pipeline statistics.

:class:`MetricsStore` is constructed once by the application and handed to
every :class:`~neurolint.services.orchestrator.Orchestrator` that should
share it.  It is the only mutable state shared between concurrent
``transform()`` calls, so every update takes a lock.

Readers get a :class:`~neurolint.domain.values.PerformanceMetrics` snapshot;
mutating the snapshot never affects the store.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from neurolint.domain.values import LayerMetrics, PerformanceMetrics


@dataclass
class _RunningStats:
    count: int = 0
    successes: int = 0
    total_time: float = 0.0

    def add(self, duration_ms: float, success: bool) -> None:
        self.count += 1
        self.total_time += duration_ms
        if success:
            self.successes += 1

    @property
    def failures(self) -> int:
        return self.count - self.successes

    @property
    def average(self) -> float:
        return self.total_time / self.count if self.count else 0.0


class MetricsStore:
    """Update-only accumulator of pipeline and per-layer timings."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pipelines = _RunningStats()
        self._layers: dict[int, _RunningStats] = {}

    def record(self, layer_id: int, duration_ms: float, success: bool) -> None:
        """Record one attempted layer execution (accepted or not)."""
        with self._lock:
            stats = self._layers.setdefault(int(layer_id), _RunningStats())
            stats.add(duration_ms, success)

    def record_pipeline(self, duration_ms: float, success: bool) -> None:
        """Record one completed ``transform()`` call."""
        with self._lock:
            self._pipelines.add(duration_ms, success)

    def snapshot(self) -> PerformanceMetrics:
        """Return a detached copy of the current statistics."""
        with self._lock:
            layer_metrics = {
                layer_id: LayerMetrics(
                    executions=stats.count,
                    successes=stats.successes,
                    failures=stats.failures,
                    average_time=stats.average,
                )
                for layer_id, stats in sorted(self._layers.items())
            }
            return PerformanceMetrics(
                total_executions=self._pipelines.count,
                successful_executions=self._pipelines.successes,
                failed_executions=self._pipelines.failures,
                average_execution_time=self._pipelines.average,
                layer_metrics=layer_metrics,
            )

    get_performance_metrics = snapshot

    def __repr__(self) -> str:
        with self._lock:
            return (
                f"<MetricsStore pipelines={self._pipelines.count} "
                f"layers={sorted(self._layers)}>"
            )
