"""Infrastructure: configuration, event bus and session logging."""

from neurolint.infrastructure.config import (
    AnalyzerConfig,
    OrchestratorConfig,
    load_config_file,
    load_config_from_json,
)
from neurolint.infrastructure.event_bus import EventBus
from neurolint.infrastructure.session_logger import SessionLogger, generate_session_id

__all__ = [
    "AnalyzerConfig",
    "EventBus",
    "OrchestratorConfig",
    "SessionLogger",
    "generate_session_id",
    "load_config_file",
    "load_config_from_json",
]
