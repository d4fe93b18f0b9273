"""Presentation layer: rich console rendering and file export.

Public API
----------
- :class:`ConsoleReporter` -- rich tables for layers, analyses, results,
  metrics and benchmarks
- :func:`export_json`, :func:`export_logs`, :func:`export_results_csv` --
  serialisation utilities
"""

from neurolint.presentation.console import ConsoleReporter
from neurolint.presentation.export import export_json, export_logs, export_results_csv

__all__ = [
    "ConsoleReporter",
    "export_json",
    "export_logs",
    "export_results_csv",
]
