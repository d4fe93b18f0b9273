"""Layer executor: run one layer, validate its output, accept or revert.

:meth:`LayerExecutor.execute` is the failure boundary around a layer's
transform.  Whatever the layer does (raise, hang, return garbage) the
executor hands back the code to feed the next layer together with a
:class:`~neurolint.domain.values.LayerExecutionResult`.  On revert the code
handed back is the exact object it received.

Coroutine transforms are awaited directly; plain functions run on a shared
module-level thread pool so that the timeout race applies to both.  A
synchronous layer that overruns keeps its worker thread busy until it returns,
but its result is discarded and closing the event loop does not wait for it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from concurrent.futures import ThreadPoolExecutor

from neurolint.domain.enums import ErrorCategory, LayerId, LayerOutcome
from neurolint.domain.exceptions import LayerTimeoutError
from neurolint.domain.values import (
    LayerDescriptor,
    LayerExecutionResult,
    LayerTransform,
    TransformOptions,
    TransformOutput,
)
from neurolint.measurement.metrics_store import MetricsStore
from neurolint.services.validation import INVALID_OUTPUT, StructuralValidator

logger = logging.getLogger(__name__)

TIMEOUT = "timeout"

_LAYER_POOL = ThreadPoolExecutor(thread_name_prefix="neurolint-layer")

_GENERIC_SUGGESTION = "Please report this issue with your code sample"

_SUGGESTIONS = {
    ErrorCategory.TIMEOUT: "Run the layer on its own or raise layer_timeout_seconds",
    ErrorCategory.SYNTAX: "Fix syntax errors before running NeuroLint",
    ErrorCategory.INVALID_OUTPUT: "Review the layer output; the previous code was kept",
}

_LAYER_SUGGESTIONS = {
    LayerId.CONFIGURATION: "Validate JSON syntax in config files",
    LayerId.ENTITY_CLEANUP: "Some patterns may conflict with your code structure",
    LayerId.COMPONENTS: "Complex JSX structures may need manual fixing",
    LayerId.HYDRATION: "Manual SSR guards may be needed for complex cases",
    LayerId.APP_ROUTER: "Move the 'use client' directive to the top of the file by hand",
}


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """Map an exception raised by a layer to an :class:`ErrorCategory`."""
    if isinstance(exc, (LayerTimeoutError, asyncio.TimeoutError)):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, SyntaxError) or "Unexpected token" in str(exc):
        return ErrorCategory.SYNTAX
    return ErrorCategory.UNKNOWN


def suggest(category: ErrorCategory, layer_id: int) -> str:
    """Return a recovery hint for a reverted layer."""
    if category is ErrorCategory.UNKNOWN:
        try:
            return _LAYER_SUGGESTIONS[LayerId(layer_id)]
        except (ValueError, KeyError):
            return _GENERIC_SUGGESTION
    return _SUGGESTIONS.get(category, _GENERIC_SUGGESTION)


async def _invoke(transform: LayerTransform, code: str, options: TransformOptions) -> object:
    if inspect.iscoroutinefunction(transform):
        return await transform(code, options)
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(_LAYER_POOL, transform, code, options)
    if inspect.isawaitable(result):
        result = await result
    return result


class LayerExecutor:
    """Runs a single layer inside the accept/revert gate.

    Parameters
    ----------
    validator:
        Gate applied to every layer output.  Defaults to a strict
        :class:`StructuralValidator`.
    metrics:
        Store receiving one sample per attempted layer.  ``None`` disables
        recording.
    timeout_seconds:
        Per-layer time budget; ``None`` waits indefinitely.
    """

    def __init__(
        self,
        validator: StructuralValidator | None = None,
        metrics: MetricsStore | None = None,
        timeout_seconds: float | None = 5.0,
    ) -> None:
        self._validator = validator or StructuralValidator()
        self._metrics = metrics
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> float | None:
        return self._timeout_seconds

    async def execute(
        self,
        layer: LayerDescriptor,
        code: str,
        options: TransformOptions | None = None,
    ) -> tuple[str, LayerExecutionResult]:
        """Run *layer* against *code*.

        Returns
        -------
        tuple[str, LayerExecutionResult]
            The code for the next layer and this layer's result.  When the
            result is reverted the returned code is *code* itself.
        """
        options = options or TransformOptions()
        layer_id = int(layer.id)
        result: LayerExecutionResult | None = None
        next_code = code
        start = time.perf_counter()

        try:
            try:
                output = await asyncio.wait_for(
                    _invoke(layer.transform, code, options),
                    timeout=self._timeout_seconds,
                )
            except asyncio.TimeoutError:
                elapsed = _elapsed_ms(start)
                error = LayerTimeoutError(layer_id, self._timeout_seconds or 0.0)
                logger.warning("Layer %d (%s) timed out: %s", layer_id, layer.name, error)
                result = self._reverted(
                    layer, elapsed, TIMEOUT, str(error), ErrorCategory.TIMEOUT
                )
                return next_code, result
            except Exception as exc:
                elapsed = _elapsed_ms(start)
                logger.exception("Layer %d (%s) raised", layer_id, layer.name)
                message = str(exc) or type(exc).__name__
                result = self._reverted(
                    layer, elapsed, message, message, categorize_exception(exc)
                )
                return next_code, result

            if not isinstance(output, TransformOutput):
                elapsed = _elapsed_ms(start)
                detail = f"layer returned {type(output).__name__} instead of TransformOutput"
                logger.warning("Layer %d (%s) reverted: %s", layer_id, layer.name, detail)
                result = self._reverted(
                    layer, elapsed, INVALID_OUTPUT, detail, ErrorCategory.INVALID_OUTPUT
                )
                return next_code, result

            verdict = self._validator.validate(code, output.code, output.change_count)
            elapsed = _elapsed_ms(start)
            if not verdict.valid:
                logger.warning(
                    "Layer %d (%s) reverted: %s", layer_id, layer.name, verdict.detail
                )
                result = self._reverted(
                    layer,
                    elapsed,
                    verdict.reason or INVALID_OUTPUT,
                    verdict.detail,
                    verdict.category or ErrorCategory.INVALID_OUTPUT,
                )
                return next_code, result

            if output.change_count == 0:
                result = LayerExecutionResult(
                    layer_id=layer_id,
                    layer_name=layer.name,
                    outcome=LayerOutcome.UNCHANGED,
                    execution_time=elapsed,
                )
                return next_code, result

            next_code = output.code
            result = LayerExecutionResult(
                layer_id=layer_id,
                layer_name=layer.name,
                outcome=LayerOutcome.ACCEPTED,
                execution_time=elapsed,
                change_count=output.change_count,
                improvements=output.improvements,
            )
            logger.debug(
                "Layer %d (%s) accepted: %d change(s) in %.2fms",
                layer_id, layer.name, output.change_count, elapsed,
            )
            return next_code, result
        finally:
            if self._metrics is not None:
                self._metrics.record(
                    layer_id,
                    result.execution_time if result is not None else _elapsed_ms(start),
                    result is not None and not result.reverted,
                )

    @staticmethod
    def _reverted(
        layer: LayerDescriptor,
        elapsed: float,
        reason: str,
        error: str | None,
        category: ErrorCategory,
    ) -> LayerExecutionResult:
        return LayerExecutionResult(
            layer_id=int(layer.id),
            layer_name=layer.name,
            outcome=LayerOutcome.REVERTED,
            execution_time=elapsed,
            error=error,
            revert_reason=reason,
            error_category=category,
            suggestion=suggest(category, int(layer.id)),
        )


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0
