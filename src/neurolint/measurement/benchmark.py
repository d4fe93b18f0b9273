"""Pipeline benchmark.

:func:`run_benchmark` pushes a set of sample sources through an
orchestrator several times and summarizes the wall-clock timings with
numpy.  Every run goes through the normal ``transform()`` path, so the
orchestrator's :class:`MetricsStore` sees the benchmark traffic as well.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from neurolint.domain.enums import LayerId

if TYPE_CHECKING:
    from neurolint.services.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

DEFAULT_SAMPLES: Mapping[str, str] = {
    "simple-function": (
        "function add(a, b) {\n"
        "  return a + b;\n"
        "}\n"
        "console.log(add(5, 3));\n"
    ),
    "array-map": (
        "var numbers = [1, 2, 3, 4, 5];\n"
        "var doubled = numbers.map(num => num * 2);\n"
        "console.log(doubled);\n"
    ),
    "class": (
        "class Greeter {\n"
        "  constructor(name) {\n"
        "    this.name = name;\n"
        "  }\n"
        "  greet() {\n"
        '    return "Hello, " + this.name;\n'
        "  }\n"
        "}\n"
        'const greeter = new Greeter("World");\n'
        "console.log(greeter.greet());\n"
    ),
    "component": (
        "'use client';\n"
        "import React, { useState, useEffect } from 'react';\n"
        "\n"
        "function ComplexComponent() {\n"
        "  const [data, setData] = useState([]);\n"
        "  useEffect(() => {\n"
        "    const cached = localStorage.getItem('data');\n"
        "    fetch('/api/data')\n"
        "      .then(response => response.json())\n"
        "      .then(data => setData(data));\n"
        "  }, []);\n"
        "  return (\n"
        "    <ul>\n"
        "      {data.map(item => <li>{item.name} &amp; more</li>)}\n"
        "      <img src=\"/logo.png\" />\n"
        "    </ul>\n"
        "  );\n"
        "}\n"
        "\n"
        "export default ComplexComponent;\n"
    ),
    "misplaced-directive": (
        "import { useState } from 'react';\n"
        "'use client';\n"
        "\n"
        "export function Counter() {\n"
        "  const [count, setCount] = useState(0);\n"
        "  return <button onClick={() => setCount(count + 1)}>{count}</button>;\n"
        "}\n"
    ),
}
"""Representative inputs.  Each one gives at least one layer work to do;
only ``misplaced-directive`` exercises the App Router layer."""


@dataclass(frozen=True)
class TimingStats:
    """Summary statistics over a set of millisecond timings."""

    count: int
    mean: float
    median: float
    p95: float
    std: float
    min: float
    max: float

    @classmethod
    def from_samples(cls, samples: Sequence[float]) -> TimingStats:
        if len(samples) == 0:
            return cls(count=0, mean=0.0, median=0.0, p95=0.0, std=0.0, min=0.0, max=0.0)
        arr = np.asarray(samples, dtype=np.float64)
        return cls(
            count=int(arr.size),
            mean=float(np.mean(arr)),
            median=float(np.median(arr)),
            p95=float(np.percentile(arr, 95)),
            std=float(np.std(arr)),
            min=float(np.min(arr)),
            max=float(np.max(arr)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "p95": self.p95,
            "std": self.std,
            "min": self.min,
            "max": self.max,
        }


@dataclass(frozen=True)
class BenchmarkReport:
    """Outcome of :func:`run_benchmark`.

    Attributes
    ----------
    iterations:
        Runs per sample.
    layer_ids:
        Layers requested for every run.
    overall:
        Statistics over every run of every sample.
    per_sample:
        Statistics keyed by sample name.
    runs_with_changes:
        Runs in which at least one layer was accepted.
    reverted_layers:
        Total reverted layer executions across all runs.
    """

    iterations: int
    layer_ids: tuple[int, ...]
    overall: TimingStats
    per_sample: Mapping[str, TimingStats] = field(default_factory=dict)
    runs_with_changes: int = 0
    reverted_layers: int = 0

    @property
    def total_runs(self) -> int:
        return self.overall.count

    def to_dict(self) -> dict[str, Any]:
        return {
            "iterations": self.iterations,
            "layer_ids": list(self.layer_ids),
            "total_runs": self.total_runs,
            "runs_with_changes": self.runs_with_changes,
            "reverted_layers": self.reverted_layers,
            "overall": self.overall.to_dict(),
            "per_sample": {name: s.to_dict() for name, s in self.per_sample.items()},
        }


async def run_benchmark(
    orchestrator: Orchestrator,
    samples: Mapping[str, str] | None = None,
    layer_ids: Iterable[int] | None = None,
    iterations: int = 10,
) -> BenchmarkReport:
    """Time ``orchestrator.transform`` over *samples*.

    Parameters
    ----------
    orchestrator:
        The orchestrator under test.
    samples:
        Mapping of sample name to source text.  Defaults to
        :data:`DEFAULT_SAMPLES`.
    layer_ids:
        Layers to request.  Defaults to every layer.
    iterations:
        Number of runs per sample.
    """
    if iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}")
    samples = DEFAULT_SAMPLES if samples is None else samples
    ids = tuple(int(i) for i in layer_ids) if layer_ids is not None else tuple(int(i) for i in LayerId)

    logger.info(
        "Benchmark: %d sample(s) x %d iteration(s), layers %s",
        len(samples), iterations, list(ids),
    )

    all_timings: list[float] = []
    per_sample: dict[str, TimingStats] = {}
    runs_with_changes = 0
    reverted = 0

    for name, code in samples.items():
        timings: list[float] = []
        for _ in range(iterations):
            t0 = time.perf_counter()
            result = await orchestrator.transform(code, ids)
            timings.append((time.perf_counter() - t0) * 1000.0)
            if result.successful_layers > 0:
                runs_with_changes += 1
            reverted += result.reverted_layers
        per_sample[name] = TimingStats.from_samples(timings)
        all_timings.extend(timings)
        logger.debug("Benchmark sample %r: mean %.3fms", name, per_sample[name].mean)

    report = BenchmarkReport(
        iterations=iterations,
        layer_ids=ids,
        overall=TimingStats.from_samples(all_timings),
        per_sample=per_sample,
        runs_with_changes=runs_with_changes,
        reverted_layers=reverted,
    )
    logger.info(
        "Benchmark finished: %d run(s), mean %.3fms, p95 %.3fms",
        report.total_runs, report.overall.mean, report.overall.p95,
    )
    return report
