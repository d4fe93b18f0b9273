"""Session logger -- structured, exportable event log.

Every orchestrator owns one :class:`SessionLogger`.  It mints a session id
once, stamps it on every entry, keeps entries in memory (append-only) and
exports them as a JSON array for "export logs" actions.  Each entry is also
mirrored to the stdlib ``logging`` tree so normal log handlers see it.

Telemetry is best-effort: failures while mirroring or exporting are logged
and swallowed.
"""

from __future__ import annotations

import datetime
import json
import logging
import threading
import time
import uuid
from collections.abc import Mapping
from typing import Any

from neurolint.domain.enums import LogLevel
from neurolint.domain.values import LogEntry

logger = logging.getLogger(__name__)

_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}


def generate_session_id() -> str:
    """Return a new opaque session id, e.g. ``session_1718000000000_3f9a1c2b7``."""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _describe_cause(cause: BaseException | str | None) -> str | None:
    if cause is None:
        return None
    if isinstance(cause, BaseException):
        text = str(cause)
        return f"{type(cause).__name__}: {text}" if text else type(cause).__name__
    return str(cause)


class SessionLogger:
    """Append-only structured log keyed by a session id.

    Parameters
    ----------
    session_id:
        Fixed id to use; a fresh one is generated when omitted.
    max_entries:
        Keep only the newest *max_entries* entries.  ``0`` means unlimited.
    mirror:
        Stdlib logger that receives a copy of every entry.  Defaults to this
        module's logger.
    """

    def __init__(
        self,
        session_id: str | None = None,
        max_entries: int = 0,
        mirror: logging.Logger | None = None,
    ) -> None:
        self._session_id = session_id or generate_session_id()
        self._max_entries = max_entries
        self._mirror = mirror or logger
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    @property
    def session_id(self) -> str:
        return self._session_id

    # -- recording ----------------------------------------------------------

    def log(
        self,
        level: LogLevel,
        message: str,
        context: Mapping[str, Any] | None = None,
        cause: BaseException | str | None = None,
        duration_ms: float | None = None,
    ) -> LogEntry:
        """Append one entry and mirror it to the stdlib logger."""
        entry = LogEntry(
            timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            session_id=self._session_id,
            level=level,
            message=message,
            context=dict(context or {}),
            error=_describe_cause(cause),
            duration_ms=duration_ms,
        )
        with self._lock:
            self._entries.append(entry)
            if self._max_entries > 0 and len(self._entries) > self._max_entries:
                self._entries = self._entries[-self._max_entries:]

        try:
            self._mirror.log(
                _STDLIB_LEVELS[level],
                "[%s] %s%s",
                self._session_id,
                message,
                f" ({entry.error})" if entry.error else "",
            )
        except Exception:
            logger.exception("Failed to mirror session log entry")
        return entry

    def debug(self, message: str, context: Mapping[str, Any] | None = None) -> LogEntry:
        return self.log(LogLevel.DEBUG, message, context)

    def info(self, message: str, context: Mapping[str, Any] | None = None) -> LogEntry:
        return self.log(LogLevel.INFO, message, context)

    def warn(self, message: str, context: Mapping[str, Any] | None = None) -> LogEntry:
        return self.log(LogLevel.WARN, message, context)

    def error(
        self,
        message: str,
        cause: BaseException | str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> LogEntry:
        """Record a failure together with what caused it."""
        return self.log(LogLevel.ERROR, message, context, cause=cause)

    def fatal(
        self,
        message: str,
        cause: BaseException | str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> LogEntry:
        return self.log(LogLevel.FATAL, message, context, cause=cause)

    def performance(
        self,
        message: str,
        duration_ms: float,
        context: Mapping[str, Any] | None = None,
    ) -> LogEntry:
        """Record a timing at INFO level."""
        return self.log(LogLevel.INFO, message, context, duration_ms=duration_ms)

    # -- querying / export --------------------------------------------------

    def entries(self, level: LogLevel | None = None) -> list[LogEntry]:
        """Return a copy of the entries, optionally filtered by *level*."""
        with self._lock:
            snapshot = list(self._entries)
        if level is not None:
            snapshot = [e for e in snapshot if e.level is level]
        return snapshot

    def export_records(self) -> list[dict[str, Any]]:
        """Entries as plain dicts (timestamp, session_id, level, message, ...)."""
        return [e.to_dict() for e in self.entries()]

    def export_logs(self) -> str:
        """Serialize every entry as a JSON array.

        Returns ``"[]"`` if serialization fails; the failure is logged.
        """
        try:
            return json.dumps(self.export_records(), indent=2, default=str)
        except Exception:
            logger.exception("Failed to export session logs")
            return "[]"

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop all retained entries (the session id is kept)."""
        with self._lock:
            self._entries.clear()
