"""Services: validation gate, layer executor, analyzer and orchestrator."""

from neurolint.services.analyzer import (
    Analyzer,
    confidence_score,
    estimate_fix_time,
    estimate_impact,
)
from neurolint.services.executor import LayerExecutor, categorize_exception
from neurolint.services.orchestrator import Orchestrator
from neurolint.services.validation import (
    StructuralIssue,
    StructuralValidator,
    ValidationResult,
    scan_structure,
)

__all__ = [
    "Analyzer",
    "LayerExecutor",
    "Orchestrator",
    "StructuralIssue",
    "StructuralValidator",
    "ValidationResult",
    "categorize_exception",
    "confidence_score",
    "estimate_fix_time",
    "estimate_impact",
    "scan_structure",
]
