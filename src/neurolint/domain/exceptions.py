"""Domain exceptions for NeuroLint.

All domain-specific exceptions inherit from ``NeuroLintError`` so callers can
catch the full family with a single ``except`` clause when needed.

Only :class:`InputRejectedError` (and its subclasses) ever reaches callers of
``transform()`` / ``analyze()``.  Layer failures are recovered inside the
executor and reported on the per-layer result instead.
"""

from __future__ import annotations

from typing import Any


class NeuroLintError(Exception):
    """Base exception for all NeuroLint errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class InputRejectedError(NeuroLintError):
    """Raised at the orchestrator boundary before any layer runs.

    Examples: code that is not a string, layer ids that are not integers.
    Callers can rely on "nothing ran" when they see this error.
    """

    def __init__(
        self,
        message: str = "Input rejected",
        parameter: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.parameter = parameter


class CodeTooLargeError(InputRejectedError):
    """Raised when input code exceeds the configured size ceiling.

    The input is never truncated; the whole call is refused.
    """

    def __init__(
        self,
        length: int,
        limit: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Code length {length} exceeds the maximum of {limit} characters",
            parameter="code",
            details=details,
        )
        self.length = length
        self.limit = limit


class LayerTimeoutError(NeuroLintError):
    """Raised inside the executor when a layer exceeds its time budget."""

    def __init__(
        self,
        layer_id: int,
        timeout_seconds: float,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Layer {layer_id} did not finish within {timeout_seconds:g}s",
            details,
        )
        self.layer_id = layer_id
        self.timeout_seconds = timeout_seconds
