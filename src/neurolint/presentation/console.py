"""Rich-based console rendering for layers, analyses, results and metrics.

:class:`ConsoleReporter` writes to a :class:`rich.console.Console`; tests
pass one backed by ``io.StringIO`` and inspect the text.
"""

from __future__ import annotations

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from neurolint.domain.enums import ImpactLevel, LayerOutcome, Severity
from neurolint.domain.events import DomainEvent, LayerExecuted
from neurolint.domain.values import (
    AnalysisResult,
    LayerDescriptor,
    OrchestrationResult,
    PerformanceMetrics,
)
from neurolint.measurement.benchmark import BenchmarkReport

_SEVERITY_STYLE = {
    Severity.LOW: "cyan",
    Severity.MEDIUM: "yellow",
    Severity.HIGH: "red",
}

_IMPACT_STYLE = {
    ImpactLevel.LOW: "green",
    ImpactLevel.MEDIUM: "yellow",
    ImpactLevel.HIGH: "red",
}

_OUTCOME_STYLE = {
    LayerOutcome.ACCEPTED: "green",
    LayerOutcome.UNCHANGED: "dim",
    LayerOutcome.REVERTED: "red",
}


class ConsoleReporter:
    """Console presentation of NeuroLint results.

    Parameters
    ----------
    console:
        Target console.  Defaults to a new stdout console.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    @property
    def console(self) -> Console:
        return self._console

    # -- layers -------------------------------------------------------------

    def render_layers(self, layers: tuple[LayerDescriptor, ...]) -> None:
        table = Table(title="Layers (execution order)", show_header=True, header_style="bold cyan")
        table.add_column("ID", justify="right", style="bold")
        table.add_column("Name")
        table.add_column("Description")
        for layer in layers:
            table.add_row(str(int(layer.id)), layer.name, layer.description)
        self._console.print(table)

    # -- analysis -----------------------------------------------------------

    def render_analysis(self, analysis: AnalysisResult) -> None:
        if not analysis.detected_issues:
            self._console.print("[green]No issues detected.[/green]")
        else:
            table = Table(title="Detected issues", show_header=True, header_style="bold cyan")
            table.add_column("Pattern", style="bold")
            table.add_column("Severity", justify="center")
            table.add_column("Layer", justify="right")
            table.add_column("Description")
            for issue in analysis.detected_issues:
                colour = _SEVERITY_STYLE[issue.severity]
                table.add_row(
                    issue.pattern,
                    f"[{colour}]{issue.severity.value}[/{colour}]",
                    str(issue.fixed_by_layer),
                    issue.description,
                )
            self._console.print(table)

        impact = analysis.estimated_impact
        colour = _IMPACT_STYLE[impact.level]
        layers = ", ".join(str(i) for i in analysis.recommended_layers) or "none"
        self._console.print(f"Recommended layers: [bold]{layers}[/bold]")
        self._console.print(f"Confidence: {analysis.confidence:.2%}")
        self._console.print(
            f"Impact: [{colour}]{impact.level.value}[/{colour}] "
            f"(estimated fix time: {impact.estimated_fix_time})"
        )
        for line in analysis.reasoning:
            self._console.print(f"  [dim]-[/dim] {line}")

    # -- transform ----------------------------------------------------------

    def render_progress(self, event: DomainEvent) -> None:
        """Print one line per finished layer; other events are ignored."""
        if not isinstance(event, LayerExecuted) or event.result is None:
            return
        r = event.result
        colour = _OUTCOME_STYLE[r.outcome]
        self._console.print(
            f"[dim][{event.position}/{event.total}][/dim] {r.layer_id} {r.layer_name}: "
            f"[{colour}]{r.outcome.value}[/{colour}] ({r.execution_time:.2f}ms)"
        )

    def render_result(self, result: OrchestrationResult, show_diff: bool = False) -> None:
        table = Table(title="Layer results", show_header=True, header_style="bold cyan")
        table.add_column("Layer", style="bold")
        table.add_column("Outcome", justify="center")
        table.add_column("Changes", justify="right")
        table.add_column("Time (ms)", justify="right")
        table.add_column("Details")
        for r in result.results:
            colour = _OUTCOME_STYLE[r.outcome]
            if r.reverted:
                details = f"{r.revert_reason}"
                if r.error and r.error != r.revert_reason:
                    details += f": {r.error}"
            else:
                details = "; ".join(r.improvements)
            table.add_row(
                f"{r.layer_id} {r.layer_name}",
                f"[{colour}]{r.outcome.value}[/{colour}]",
                str(r.change_count),
                f"{r.execution_time:.2f}",
                details,
            )
        self._console.print(table)

        summary = (
            f"{result.successful_layers}/{len(result.results)} layer(s) applied, "
            f"{result.total_changes} change(s), "
            f"{result.total_execution_time:.2f}ms"
        )
        if result.dry_run:
            summary += " [yellow](dry run, code not modified)[/yellow]"
        self._console.print(summary)

        if show_diff:
            diff = result.diff()
            if diff:
                self._console.print(Syntax(diff, "diff", theme="ansi_dark"))
            else:
                self._console.print("[dim]No changes.[/dim]")

    # -- metrics ------------------------------------------------------------

    def render_metrics(self, metrics: PerformanceMetrics) -> None:
        self._console.print(
            f"Pipelines: {metrics.total_executions} "
            f"([green]{metrics.successful_executions} ok[/green], "
            f"[red]{metrics.failed_executions} with reverts[/red]), "
            f"average {metrics.average_execution_time:.2f}ms"
        )
        if not metrics.layer_metrics:
            return
        table = Table(title="Per-layer metrics", show_header=True, header_style="bold cyan")
        table.add_column("Layer", justify="right", style="bold")
        table.add_column("Executions", justify="right")
        table.add_column("Successes", justify="right")
        table.add_column("Failures", justify="right")
        table.add_column("Avg (ms)", justify="right")
        for layer_id, m in sorted(metrics.layer_metrics.items()):
            table.add_row(
                str(layer_id),
                str(m.executions),
                str(m.successes),
                str(m.failures),
                f"{m.average_time:.3f}",
            )
        self._console.print(table)

    def render_benchmark(self, report: BenchmarkReport) -> None:
        table = Table(title="Benchmark", show_header=True, header_style="bold cyan")
        table.add_column("Sample", style="bold")
        table.add_column("Runs", justify="right")
        for column in ("Mean", "Median", "P95", "Std", "Min", "Max"):
            table.add_column(f"{column} (ms)", justify="right")

        rows = list(report.per_sample.items()) + [("overall", report.overall)]
        for name, stats in rows:
            table.add_row(
                name,
                str(stats.count),
                f"{stats.mean:.3f}",
                f"{stats.median:.3f}",
                f"{stats.p95:.3f}",
                f"{stats.std:.3f}",
                f"{stats.min:.3f}",
                f"{stats.max:.3f}",
            )
        self._console.print(table)
        self._console.print(
            f"Layers {list(report.layer_ids)}; {report.runs_with_changes}/{report.total_runs} "
            f"run(s) changed code; {report.reverted_layers} reverted layer execution(s)"
        )
