"""Orchestrator -- the two public entry points.

``transform()`` resolves the requested layers into canonical order and folds
the :class:`~neurolint.services.executor.LayerExecutor` over them, threading
the current code forward.  ``analyze()`` runs the read-only analyzer.

Each layer ends accepted, unchanged or reverted, and a run always reaches
the last layer: failures are recorded as reverted results and the pipeline
moves on.  The only exceptions that escape are
:class:`~neurolint.domain.exceptions.InputRejectedError` and its subclasses,
raised before any layer runs.  Progress events go to the event bus; see
:meth:`Orchestrator.subscribe`.

Shared state lives in the injected :class:`MetricsStore`; everything else is
per call, so concurrent ``transform()`` calls on one orchestrator are safe.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from neurolint.domain.enums import LayerOutcome
from neurolint.domain.events import (
    AnalysisCompleted,
    DomainEvent,
    LayerExecuted,
    PipelineCompleted,
    PipelineStarted,
)
from neurolint.domain.exceptions import CodeTooLargeError, InputRejectedError
from neurolint.domain.values import (
    AnalysisResult,
    LayerDescriptor,
    LayerExecutionResult,
    OrchestrationResult,
    PerformanceMetrics,
    TransformOptions,
)
from neurolint.infrastructure.config import OrchestratorConfig
from neurolint.infrastructure.event_bus import EventBus
from neurolint.infrastructure.session_logger import SessionLogger
from neurolint.layers.registry import DEFAULT_REGISTRY, LayerRegistry
from neurolint.measurement.metrics_store import MetricsStore
from neurolint.services.analyzer import Analyzer
from neurolint.services.executor import LayerExecutor
from neurolint.services.validation import StructuralValidator

logger = logging.getLogger(__name__)


class Orchestrator:
    """Facade driving the layer pipeline and the analysis pass.

    Parameters
    ----------
    config:
        Size ceiling, layer timeout and log retention.
    metrics:
        Process-wide store shared by every orchestrator that should report
        into the same statistics.  A private store is created when omitted.
    session_logger:
        Structured log for this orchestrator's session.
    event_bus:
        Bus receiving pipeline progress events.  Created on the first
        :meth:`subscribe` when omitted.
    registry:
        Layer table.  Tests substitute layers via
        :meth:`LayerRegistry.with_layer`.
    analyzer / validator:
        Override the default analysis and validation components.
    """

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        metrics: MetricsStore | None = None,
        session_logger: SessionLogger | None = None,
        event_bus: EventBus | None = None,
        registry: LayerRegistry | None = None,
        analyzer: Analyzer | None = None,
        validator: StructuralValidator | None = None,
    ) -> None:
        self._config = config or OrchestratorConfig()
        self._config.validate()
        self._metrics = metrics if metrics is not None else MetricsStore()
        self._session = session_logger or SessionLogger(
            max_entries=self._config.max_log_entries
        )
        self._event_bus = event_bus
        self._registry = registry or DEFAULT_REGISTRY
        self._analyzer = analyzer or Analyzer(registry=self._registry)
        self._executor = LayerExecutor(
            validator=validator
            or StructuralValidator(strict_change_count=self._config.strict_change_count),
            metrics=self._metrics,
            timeout_seconds=self._config.layer_timeout_seconds,
        )

    # -- properties ---------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def session_logger(self) -> SessionLogger:
        return self._session

    @property
    def metrics(self) -> MetricsStore:
        return self._metrics

    @property
    def config(self) -> OrchestratorConfig:
        return self._config

    @property
    def layers(self) -> tuple[LayerDescriptor, ...]:
        """Every registered layer in execution order."""
        return self._registry.execution_order

    # -- transform ----------------------------------------------------------

    async def transform(
        self,
        code: str,
        layer_ids: Iterable[int],
        options: TransformOptions | Mapping[str, Any] | None = None,
    ) -> OrchestrationResult:
        """Run the requested layers over *code*.

        Parameters
        ----------
        code:
            Source text.  Empty strings are allowed.
        layer_ids:
            Any ids in any order; duplicates collapse and unknown ids are
            ignored.
        options:
            :class:`TransformOptions` or a mapping with ``verbose`` and
            ``dry_run`` / ``dryRun`` keys.

        Raises
        ------
        InputRejectedError
            *code* is not a string or *layer_ids* is not a collection of
            integers.
        CodeTooLargeError
            *code* exceeds ``config.max_code_length``.
        """
        opts = TransformOptions.coerce(options)
        self._check_code(code)
        requested = self._check_layer_ids(layer_ids)

        layers = self._registry.resolve_order(requested)
        total = len(layers)
        start = time.perf_counter()

        self._log(
            "info",
            "Starting transformation",
            context={
                "layers": [int(layer.id) for layer in layers],
                "code_length": len(code),
                "dry_run": opts.dry_run,
            },
        )
        self._publish(PipelineStarted(
            source_id=self.session_id,
            layer_ids=tuple(int(layer.id) for layer in layers),
            code_length=len(code),
            dry_run=opts.dry_run,
        ))

        current = code
        states = [code]
        results: list[LayerExecutionResult] = []

        for position, layer in enumerate(layers, start=1):
            if opts.verbose:
                self._log(
                    "debug",
                    f"Executing layer {int(layer.id)} ({layer.name})",
                    context={"position": position, "total": total},
                )

            current, result = await self._executor.execute(layer, current, opts)
            results.append(result)
            if result.outcome is LayerOutcome.ACCEPTED:
                states.append(current)
            elif result.reverted:
                self._log(
                    "error",
                    f"Layer {result.layer_id} ({result.layer_name}) reverted: {result.revert_reason}",
                    cause=result.error or result.revert_reason,
                    context={"layer_id": result.layer_id, "category": _category(result)},
                )

            if opts.verbose:
                self._log(
                    "debug",
                    f"Layer {result.layer_id} {result.outcome.value}",
                    context={
                        "change_count": result.change_count,
                        "execution_time": result.execution_time,
                        "improvements": list(result.improvements),
                    },
                )
            self._publish(LayerExecuted(
                source_id=self.session_id, position=position, total=total, result=result
            ))

        total_ms = (time.perf_counter() - start) * 1000.0
        report = OrchestrationResult(
            results=tuple(results),
            final_code=code if opts.dry_run else current,
            original_code=code,
            total_execution_time=total_ms,
            states=tuple(states),
            dry_run=opts.dry_run,
        )

        self._metrics.record_pipeline(total_ms, report.reverted_layers == 0)
        self._log(
            "performance",
            "Transformation completed",
            duration_ms=total_ms,
            context={
                "successful_layers": report.successful_layers,
                "reverted_layers": report.reverted_layers,
                "total_changes": report.total_changes,
            },
        )
        self._publish(PipelineCompleted(
            source_id=self.session_id,
            successful_layers=report.successful_layers,
            reverted_layers=report.reverted_layers,
            total_execution_time=total_ms,
            dry_run=opts.dry_run,
        ))
        return report

    def transform_sync(
        self,
        code: str,
        layer_ids: Iterable[int],
        options: TransformOptions | Mapping[str, Any] | None = None,
    ) -> OrchestrationResult:
        """Blocking wrapper around :meth:`transform` for non-async callers."""
        return asyncio.run(self.transform(code, layer_ids, options))

    # -- analysis -----------------------------------------------------------

    def analyze(self, code: str) -> AnalysisResult:
        """Static analysis only; never runs a layer or touches metrics."""
        self._check_code(code)
        result = self._analyzer.analyze(code)
        self._log(
            "info",
            "Analysis completed",
            context={
                "issues": len(result.detected_issues),
                "recommended_layers": list(result.recommended_layers),
                "confidence": result.confidence,
            },
        )
        self._publish(AnalysisCompleted(source_id=self.session_id, result=result))
        return result

    def recommend(self, code: str) -> tuple[tuple[int, ...], tuple[str, ...]]:
        """Return ``(recommended_layers, reasoning)`` for *code*."""
        result = self.analyze(code)
        return result.recommended_layers, result.reasoning

    # -- observability ------------------------------------------------------

    def subscribe(
        self,
        handler: Callable[[DomainEvent], None],
        event_type: type[DomainEvent] = DomainEvent,
    ) -> Callable[[], bool]:
        """Receive progress events, e.g. ``subscribe(show, LayerExecuted)``.

        Returns a callable that removes the subscription.
        """
        if self._event_bus is None:
            self._event_bus = EventBus()
        return self._event_bus.subscribe(handler, event_type)

    def get_performance_metrics(self) -> PerformanceMetrics:
        return self._metrics.snapshot()

    def export_logs(self) -> str:
        """Session log as a JSON array."""
        return self._session.export_logs()

    # -- internals ----------------------------------------------------------

    def _check_code(self, code: object) -> None:
        if code is None:
            raise InputRejectedError("code is required", parameter="code")
        if not isinstance(code, str):
            raise InputRejectedError(
                f"code must be a string, got {type(code).__name__}", parameter="code"
            )
        if len(code) > self._config.max_code_length:
            raise CodeTooLargeError(len(code), self._config.max_code_length)

    @staticmethod
    def _check_layer_ids(layer_ids: object) -> list[int]:
        if layer_ids is None:
            raise InputRejectedError("layer_ids is required", parameter="layer_ids")
        if isinstance(layer_ids, (str, bytes)) or not isinstance(layer_ids, Iterable):
            raise InputRejectedError(
                f"layer_ids must be a collection of integers, got {type(layer_ids).__name__}",
                parameter="layer_ids",
            )
        requested = list(layer_ids)
        bad = [i for i in requested if isinstance(i, bool) or not isinstance(i, int)]
        if bad:
            raise InputRejectedError(
                f"layer ids must be integers, got {bad!r}",
                parameter="layer_ids",
                details={"invalid": bad},
            )
        return requested

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        try:
            getattr(self._session, level)(message, **kwargs)
        except Exception:
            logger.exception("Session logging failed")

    def _publish(self, event: DomainEvent) -> None:
        if self._event_bus is None:
            return
        try:
            self._event_bus.publish(event)
        except Exception:
            logger.exception("Failed to publish %s", type(event).__name__)

    def __repr__(self) -> str:
        return f"<Orchestrator session={self.session_id!r} layers={len(self.layers)}>"


def _category(result: LayerExecutionResult) -> str | None:
    return result.error_category.value if result.error_category else None
