"""Measurement: process-wide metrics and the pipeline benchmark."""

from neurolint.measurement.benchmark import (
    DEFAULT_SAMPLES,
    BenchmarkReport,
    TimingStats,
    run_benchmark,
)
from neurolint.measurement.metrics_store import MetricsStore

__all__ = [
    "BenchmarkReport",
    "DEFAULT_SAMPLES",
    "MetricsStore",
    "TimingStats",
    "run_benchmark",
]
