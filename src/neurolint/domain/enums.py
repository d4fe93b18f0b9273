"""Domain enumerations for NeuroLint.

These enums capture the fixed vocabularies used across the domain layer:
the closed set of transformation layers, issue severities, impact levels,
per-layer outcomes, pipeline states and log levels.
"""

from enum import Enum, IntEnum


class LayerId(IntEnum):
    """The closed set of transformation layers.

    The integer value is both the public layer id and the execution
    position: layers always run in ascending value order.
    """

    CONFIGURATION = 1
    ENTITY_CLEANUP = 2
    COMPONENTS = 3
    HYDRATION = 4
    APP_ROUTER = 5


class Severity(Enum):
    """Severity of a detected issue."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        """Numeric weight used by confidence scoring and max-severity lookups."""
        return _SEVERITY_WEIGHTS[self]


_SEVERITY_WEIGHTS = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
}


class ImpactLevel(Enum):
    """Coarse estimate of how much a transformation run will change."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class LayerOutcome(Enum):
    """Result of attempting one layer against the current code."""

    ACCEPTED = "accepted"  # validated and applied
    UNCHANGED = "unchanged"  # layer had nothing to fix
    REVERTED = "reverted"  # output discarded, previous code kept


class ErrorCategory(Enum):
    """Categories attached to reverted layer results."""

    TIMEOUT = "timeout"
    INVALID_OUTPUT = "invalid-output"
    SYNTAX = "syntax"
    UNKNOWN = "unknown"


class LogLevel(Enum):
    """Levels understood by the session logger."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"
