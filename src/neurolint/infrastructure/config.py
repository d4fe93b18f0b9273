"""Configuration dataclasses for NeuroLint.

Each config is a plain ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid values.  Configs are **frozen** so one instance can
be shared by every orchestrator call without risking silent mutation.

Configs can be loaded from a JSON string or from a ``.json`` / ``.yaml``
file whose top-level keys are section names (``orchestrator``,
``analyzer``).
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

DEFAULT_MAX_CODE_LENGTH = 1_000_000


# ===================================================================== #
#  Orchestrator Configuration                                            #
# ===================================================================== #

@dataclass(frozen=True)
class OrchestratorConfig:
    """Parameters governing ``transform()`` / ``analyze()`` calls.

    Attributes
    ----------
    max_code_length:
        Inputs longer than this many characters are rejected outright.
    layer_timeout_seconds:
        Per-layer time budget.  A layer that overruns is reverted with
        ``revert_reason="timeout"``.  ``None`` disables the timeout.
    max_log_entries:
        Cap on retained session-log entries.  ``0`` means unlimited.
    strict_change_count:
        If ``True``, a layer claiming changes while returning identical code
        is reverted as ``invalid-output`` (the reverse case, zero changes
        with different code, is always reverted).
    """

    max_code_length: int = DEFAULT_MAX_CODE_LENGTH
    layer_timeout_seconds: float | None = 5.0
    max_log_entries: int = 0
    strict_change_count: bool = True

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        if self.max_code_length < 1:
            raise ValueError(
                f"max_code_length must be >= 1, got {self.max_code_length}"
            )
        if self.layer_timeout_seconds is not None and self.layer_timeout_seconds <= 0:
            raise ValueError(
                f"layer_timeout_seconds must be > 0 or None, got {self.layer_timeout_seconds}"
            )
        if self.max_log_entries < 0:
            raise ValueError(
                f"max_log_entries must be >= 0, got {self.max_log_entries}"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrchestratorConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Analyzer Configuration                                                #
# ===================================================================== #

@dataclass(frozen=True)
class AnalyzerConfig:
    """Constants of the confidence formula.

    ``confidence = 1 - (1 - confidence_floor) * exp(-weight / confidence_scale)``
    where *weight* is the summed severity weight of all fired detectors.

    Attributes
    ----------
    confidence_floor:
        Confidence reported when nothing fires.
    confidence_scale:
        How quickly confidence saturates as severity weight accumulates.
    """

    confidence_floor: float = 0.3
    confidence_scale: float = 4.0

    def validate(self) -> None:
        if not (0.0 <= self.confidence_floor <= 1.0):
            raise ValueError(
                f"confidence_floor must be in [0, 1], got {self.confidence_floor}"
            )
        if self.confidence_scale <= 0:
            raise ValueError(
                f"confidence_scale must be > 0, got {self.confidence_scale}"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalyzerConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Unified config loaders                                                #
# ===================================================================== #

_CONFIG_MAP: dict[str, type] = {
    "orchestrator": OrchestratorConfig,
    "analyzer": AnalyzerConfig,
}


def _sections_from_mapping(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError("Top-level config must be a mapping")
    result: dict[str, Any] = {}
    for section, data in raw.items():
        cls = _CONFIG_MAP.get(section)
        if cls is not None and isinstance(data, dict):
            result[section] = cls.from_dict(data)
        else:
            result[section] = data
    return result


def load_config_from_json(json_str: str) -> dict[str, Any]:
    """Parse a JSON string into a dict of typed config objects.

    Unknown sections are preserved as raw values.
    """
    return _sections_from_mapping(json.loads(json_str))


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load config sections from a ``.json``, ``.yaml`` or ``.yml`` file."""
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in (".yaml", ".yml"):
        return _sections_from_mapping(yaml.safe_load(text) or {})
    if p.suffix.lower() == ".json":
        return load_config_from_json(text)
    raise ValueError(f"Unsupported config format: {p.suffix or '<none>'}")
