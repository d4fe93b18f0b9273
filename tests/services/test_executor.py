"""Tests for LayerExecutor accept / revert semantics."""

from __future__ import annotations

import pytest

from neurolint.domain.enums import ErrorCategory, LayerId, LayerOutcome
from neurolint.domain.exceptions import LayerTimeoutError
from neurolint.domain.values import LayerDescriptor, TransformOutput
from neurolint.layers import DEFAULT_REGISTRY
from neurolint.measurement.metrics_store import MetricsStore
from neurolint.services.executor import LayerExecutor, categorize_exception, suggest


class TestAcceptAndUnchanged:
    @pytest.mark.asyncio
    async def test_accepts_valid_output(self, unkeyed_list: str, metrics: MetricsStore) -> None:
        executor = LayerExecutor(metrics=metrics)
        next_code, result = await executor.execute(DEFAULT_REGISTRY.get(3), unkeyed_list)

        assert result.outcome is LayerOutcome.ACCEPTED
        assert result.success is True
        assert result.change_count >= 1
        assert "key={index}" in next_code
        assert result.improvements
        assert result.execution_time >= 0.0
        assert result.layer_name == "Components"

    @pytest.mark.asyncio
    async def test_unchanged_when_nothing_to_fix(self, clean_code: str) -> None:
        executor = LayerExecutor()
        next_code, result = await executor.execute(DEFAULT_REGISTRY.get(1), clean_code)

        assert result.outcome is LayerOutcome.UNCHANGED
        assert result.success is False
        assert result.revert_reason is None
        assert next_code is clean_code

    @pytest.mark.asyncio
    async def test_async_layer_is_awaited(self, async_layer: LayerDescriptor) -> None:
        next_code, result = await LayerExecutor().execute(async_layer, "const a = 1;\n")
        assert result.success
        assert next_code == "const a = 1;\n// async\n"


class TestRevert:
    @pytest.mark.asyncio
    async def test_throwing_layer(self, exploding_layer: LayerDescriptor) -> None:
        code = "const a = 1;"
        next_code, result = await LayerExecutor().execute(exploding_layer, code)

        assert result.outcome is LayerOutcome.REVERTED
        assert result.success is False
        assert result.revert_reason == "layer exploded"
        assert result.error == "layer exploded"
        assert result.change_count == 0
        assert result.error_category is ErrorCategory.UNKNOWN
        assert result.suggestion
        assert next_code is code

    @pytest.mark.asyncio
    async def test_corrupting_layer(self, corrupting_layer: LayerDescriptor) -> None:
        code = "const a = 1;"
        next_code, result = await LayerExecutor().execute(corrupting_layer, code)

        assert result.reverted
        assert result.revert_reason == "invalid-output"
        assert result.error_category is ErrorCategory.SYNTAX
        assert "structural error" in result.error
        assert result.improvements == ()
        assert next_code is code

    @pytest.mark.asyncio
    async def test_inconsistent_change_count(self, lying_layer: LayerDescriptor) -> None:
        code = "const a = 1;"
        next_code, result = await LayerExecutor().execute(lying_layer, code)

        assert result.revert_reason == "invalid-output"
        assert result.error_category is ErrorCategory.INVALID_OUTPUT
        assert next_code == code

    @pytest.mark.asyncio
    async def test_wrong_return_type(self, wrong_type_layer: LayerDescriptor) -> None:
        _, result = await LayerExecutor().execute(wrong_type_layer, "x")
        assert result.revert_reason == "invalid-output"
        assert "instead of TransformOutput" in result.error

    @pytest.mark.asyncio
    async def test_timeout(self, hanging_layer: LayerDescriptor) -> None:
        code = "const a = 1;"
        executor = LayerExecutor(timeout_seconds=0.05)
        next_code, result = await executor.execute(hanging_layer, code)

        assert result.revert_reason == "timeout"
        assert result.error_category is ErrorCategory.TIMEOUT
        assert "did not finish" in result.error
        assert next_code is code

    @pytest.mark.asyncio
    async def test_exception_without_message_uses_type_name(self) -> None:
        def raise_bare(code, options):
            raise KeyError()

        layer = LayerDescriptor(id=LayerId.HYDRATION, name="Bare", description="", transform=raise_bare)
        _, result = await LayerExecutor().execute(layer, "x")
        assert result.revert_reason
        assert result.reverted


class TestMetricsRecording:
    @pytest.mark.asyncio
    async def test_records_every_attempt(
        self,
        metrics: MetricsStore,
        exploding_layer: LayerDescriptor,
        clean_code: str,
    ) -> None:
        executor = LayerExecutor(metrics=metrics)
        await executor.execute(DEFAULT_REGISTRY.get(1), clean_code)
        await executor.execute(exploding_layer, clean_code)
        await executor.execute(DEFAULT_REGISTRY.get(2), "var a = 1;")

        snapshot = metrics.snapshot()
        assert snapshot.layer_metrics[1].executions == 1
        assert snapshot.layer_metrics[1].failures == 0
        assert snapshot.layer_metrics[2].executions == 2
        assert snapshot.layer_metrics[2].successes == 1
        assert snapshot.layer_metrics[2].failures == 1
        # pipeline counters are the orchestrator's concern
        assert snapshot.total_executions == 0


class TestErrorCategories:
    def test_categorize(self) -> None:
        assert categorize_exception(LayerTimeoutError(1, 1.0)) is ErrorCategory.TIMEOUT
        assert categorize_exception(SyntaxError("bad")) is ErrorCategory.SYNTAX
        assert categorize_exception(ValueError("Unexpected token <")) is ErrorCategory.SYNTAX
        assert categorize_exception(RuntimeError("x")) is ErrorCategory.UNKNOWN

    def test_suggestions(self) -> None:
        assert "SSR" in suggest(ErrorCategory.UNKNOWN, 4)
        assert "syntax" in suggest(ErrorCategory.SYNTAX, 4)
        assert suggest(ErrorCategory.UNKNOWN, 42) == "Please report this issue with your code sample"
