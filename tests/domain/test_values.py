"""Tests for domain value objects and exceptions."""

from __future__ import annotations

import pytest

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


def _result(outcome: LayerOutcome, **kwargs) -> LayerExecutionResult:
    defaults = dict(layer_id=1, layer_name="Configuration", outcome=outcome, execution_time=1.0)
    defaults.update(kwargs)
    return LayerExecutionResult(**defaults)


class TestEnums:
    def test_layer_ids_are_execution_positions(self) -> None:
        assert [int(i) for i in LayerId] == [1, 2, 3, 4, 5]
        assert sorted(LayerId) == list(LayerId)

    def test_severity_weights_increase(self) -> None:
        assert Severity.LOW.weight < Severity.MEDIUM.weight < Severity.HIGH.weight

    def test_error_category_values(self) -> None:
        assert ErrorCategory.TIMEOUT.value == "timeout"
        assert ErrorCategory.INVALID_OUTPUT.value == "invalid-output"


class TestTransformOptions:
    def test_coerce_none(self) -> None:
        assert TransformOptions.coerce(None) == TransformOptions()

    def test_coerce_passthrough(self) -> None:
        opts = TransformOptions(verbose=True)
        assert TransformOptions.coerce(opts) is opts

    def test_coerce_mapping_accepts_both_spellings(self) -> None:
        assert TransformOptions.coerce({"dryRun": True}).dry_run is True
        assert TransformOptions.coerce({"dry_run": True, "verbose": True}) == TransformOptions(
            verbose=True, dry_run=True
        )

    def test_frozen(self) -> None:
        opts = TransformOptions()
        with pytest.raises(AttributeError):
            opts.dry_run = True  # type: ignore[misc]


class TestTransformOutput:
    def test_unchanged(self) -> None:
        out = TransformOutput.unchanged("abc")
        assert out.code == "abc"
        assert out.change_count == 0
        assert out.improvements == ()

    def test_improvements_become_tuple(self) -> None:
        out = TransformOutput(code="x", change_count=1, improvements=["a", "b"])  # type: ignore[arg-type]
        assert out.improvements == ("a", "b")


class TestLayerDescriptor:
    def test_to_dict_omits_transform(self) -> None:
        desc = LayerDescriptor(
            id=LayerId.HYDRATION,
            name="Hydration",
            description="SSR guards",
            transform=lambda code, options: TransformOutput.unchanged(code),
        )
        assert desc.to_dict() == {"id": 4, "name": "Hydration", "description": "SSR guards"}


class TestLayerExecutionResult:
    def test_accepted_is_success(self) -> None:
        r = _result(LayerOutcome.ACCEPTED, change_count=2, improvements=["x"])
        assert r.success is True
        assert r.reverted is False
        assert r.improvements == ("x",)

    def test_unchanged_is_not_success(self) -> None:
        r = _result(LayerOutcome.UNCHANGED)
        assert r.success is False
        assert r.reverted is False
        assert r.revert_reason is None

    def test_reverted_requires_reason(self) -> None:
        with pytest.raises(ValueError, match="revert_reason"):
            _result(LayerOutcome.REVERTED)

    def test_reverted_requires_zero_changes(self) -> None:
        with pytest.raises(ValueError, match="change_count=0"):
            _result(LayerOutcome.REVERTED, revert_reason="boom", change_count=3)

    def test_reason_only_on_reverted(self) -> None:
        with pytest.raises(ValueError):
            _result(LayerOutcome.ACCEPTED, revert_reason="boom", change_count=1)

    def test_to_dict(self) -> None:
        r = _result(
            LayerOutcome.REVERTED,
            revert_reason="timeout",
            error_category=ErrorCategory.TIMEOUT,
        )
        data = r.to_dict()
        assert data["success"] is False
        assert data["outcome"] == "reverted"
        assert data["revert_reason"] == "timeout"
        assert data["error_category"] == "timeout"


class TestOrchestrationResult:
    def _make(self, dry_run: bool = False) -> OrchestrationResult:
        results = (
            _result(LayerOutcome.ACCEPTED, change_count=2),
            _result(LayerOutcome.UNCHANGED, layer_id=2, layer_name="Entity Cleanup"),
            _result(LayerOutcome.REVERTED, layer_id=3, layer_name="Components", revert_reason="x"),
        )
        return OrchestrationResult(
            results=results,
            final_code="a\n" if dry_run else "b\n",
            original_code="a\n",
            total_execution_time=3.0,
            states=("a\n", "b\n"),
            dry_run=dry_run,
        )

    def test_counts(self) -> None:
        result = self._make()
        assert result.successful_layers == 1
        assert result.reverted_layers == 1
        assert result.total_changes == 2

    def test_transformed_code_ignores_dry_run(self) -> None:
        result = self._make(dry_run=True)
        assert result.final_code == "a\n"
        assert result.transformed_code == "b\n"

    def test_diff(self) -> None:
        diff = self._make().diff()
        assert "--- original" in diff
        assert "+++ transformed" in diff
        assert "-a" in diff
        assert "+b" in diff

    def test_diff_empty_when_nothing_changed(self) -> None:
        result = OrchestrationResult(
            results=(), final_code="a", original_code="a", total_execution_time=0.0, states=("a",)
        )
        assert result.diff() == ""

    def test_to_dict(self) -> None:
        data = self._make().to_dict()
        assert data["successful_layers"] == 1
        assert len(data["results"]) == 3
        assert data["final_code"] == "b\n"


class TestAnalysisResult:
    def _issue(self, layer: int = 4) -> DetectedIssue:
        return DetectedIssue(
            pattern="unguarded-browser-storage",
            severity=Severity.HIGH,
            description="desc",
            fixed_by_layer=layer,
        )

    def test_valid(self) -> None:
        result = AnalysisResult(
            detected_issues=(self._issue(),),
            recommended_layers=(4,),
            confidence=0.5,
            reasoning=("Layer 4 (Hydration): desc",),
            estimated_impact=ImpactEstimate(ImpactLevel.HIGH, "under 30 seconds"),
        )
        data = result.to_dict()
        assert data["recommended_layers"] == [4]
        assert data["detected_issues"][0]["severity"] == "high"
        assert data["estimated_impact"] == {"level": "high", "estimated_fix_time": "under 30 seconds"}

    @pytest.mark.parametrize("confidence", [-0.1, 1.5])
    def test_confidence_bounds(self, confidence: float) -> None:
        with pytest.raises(ValueError, match="confidence"):
            AnalysisResult(
                detected_issues=(),
                recommended_layers=(),
                confidence=confidence,
                reasoning=(),
                estimated_impact=ImpactEstimate(ImpactLevel.LOW, "none"),
            )

    @pytest.mark.parametrize("layers", [(4, 2), (2, 2)])
    def test_recommended_layers_must_be_sorted_unique(self, layers: tuple[int, ...]) -> None:
        with pytest.raises(ValueError, match="ascending"):
            AnalysisResult(
                detected_issues=(),
                recommended_layers=layers,
                confidence=0.3,
                reasoning=(),
                estimated_impact=ImpactEstimate(ImpactLevel.LOW, "none"),
            )


class TestMetricsAndLogValues:
    def test_performance_metrics_to_dict(self) -> None:
        metrics = PerformanceMetrics(
            total_executions=2,
            successful_executions=1,
            failed_executions=1,
            average_execution_time=1.5,
            layer_metrics={3: LayerMetrics(1, 1, 0, 0.5), 1: LayerMetrics(2, 1, 1, 1.0)},
        )
        data = metrics.to_dict()
        assert list(data["layer_metrics"]) == ["1", "3"]
        assert data["layer_metrics"]["1"]["failures"] == 1

    def test_log_entry_to_dict_omits_empty_optional_fields(self) -> None:
        entry = LogEntry(timestamp="t", session_id="s", level=LogLevel.INFO, message="m")
        assert entry.to_dict() == {
            "timestamp": "t",
            "session_id": "s",
            "level": "info",
            "message": "m",
            "context": {},
        }


class TestExceptions:
    def test_hierarchy(self) -> None:
        assert issubclass(InputRejectedError, NeuroLintError)
        assert issubclass(CodeTooLargeError, InputRejectedError)
        assert issubclass(LayerTimeoutError, NeuroLintError)
        assert not issubclass(LayerTimeoutError, InputRejectedError)

    def test_code_too_large_message(self) -> None:
        exc = CodeTooLargeError(12, 10)
        assert exc.length == 12
        assert exc.limit == 10
        assert exc.parameter == "code"
        assert "12" in str(exc) and "10" in str(exc)

    def test_layer_timeout_message(self) -> None:
        exc = LayerTimeoutError(4, 0.5)
        assert exc.layer_id == 4
        assert "0.5s" in str(exc)
