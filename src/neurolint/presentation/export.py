"""Export utilities for results, metrics and session logs.

Supports JSON (anything with a ``to_dict()``) and a flat CSV of per-layer
results.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Protocol

from neurolint.domain.values import OrchestrationResult
from neurolint.infrastructure.session_logger import SessionLogger

logger = logging.getLogger(__name__)


class _Serializable(Protocol):
    def to_dict(self) -> dict[str, Any]: ...


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def export_json(obj: _Serializable, path: str | Path) -> Path:
    """Write ``obj.to_dict()`` to *path* as indented JSON.

    Parameters
    ----------
    obj:
        Any result object exposing ``to_dict()``.
    path:
        File path for the JSON output.  Parent directories are created.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as fh:
        json.dump(obj.to_dict(), fh, indent=2, default=str)
    return out


def export_logs(session_logger: SessionLogger, path: str | Path) -> Path:
    """Write the session log to *path*.

    The log is serialized by :meth:`SessionLogger.export_logs`, which never
    raises.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(session_logger.export_logs(), encoding="utf-8")
    logger.debug("Exported %d log entries to %s", len(session_logger), out)
    return out


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

_CSV_COLUMNS = (
    "layer_id",
    "layer_name",
    "outcome",
    "success",
    "change_count",
    "execution_time",
    "revert_reason",
    "error",
    "improvements",
)


def export_results_csv(result: OrchestrationResult, path: str | Path) -> Path:
    """One row per attempted layer; improvements are ``|``-joined."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(_CSV_COLUMNS)
        for r in result.results:
            writer.writerow([
                r.layer_id,
                r.layer_name,
                r.outcome.value,
                r.success,
                r.change_count,
                f"{r.execution_time:.3f}",
                r.revert_reason or "",
                r.error or "",
                "|".join(r.improvements),
            ])
    return out
