"""Pipeline progress events for NeuroLint.

The orchestrator publishes ``PipelineStarted``, one ``LayerExecuted`` per
layer, ``PipelineCompleted`` and ``AnalysisCompleted``.  Subscribers pick
events by class; subscribing to :class:`DomainEvent` itself receives all of
them.  Handlers run synchronously on the publishing thread in subscription
order, and a handler that raises is logged and skipped so a broken
subscriber never fails a pipeline.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from neurolint.domain.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class EventBus:
    """Thread-safe synchronous dispatcher for domain events.

    Usage::

        bus = EventBus()
        stop = bus.subscribe(on_layer, LayerExecuted)
        orchestrator = Orchestrator(event_bus=bus)
        ...
        stop()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscriptions: list[tuple[type[DomainEvent], Handler]] = []

    def subscribe(
        self, handler: Handler, event_type: type[DomainEvent] = DomainEvent
    ) -> Callable[[], bool]:
        """Call *handler* for every published instance of *event_type*.

        Returns a zero-argument callable that removes the subscription.
        """
        with self._lock:
            self._subscriptions.append((event_type, handler))
        return lambda: self.unsubscribe(handler, event_type)

    def unsubscribe(self, handler: Handler, event_type: type[DomainEvent] = DomainEvent) -> bool:
        """Remove one matching subscription.  Returns ``True`` if found."""
        with self._lock:
            try:
                self._subscriptions.remove((event_type, handler))
            except ValueError:
                return False
            return True

    def publish(self, event: DomainEvent) -> int:
        """Deliver *event*; returns how many handlers ran without raising."""
        with self._lock:
            snapshot = [h for t, h in self._subscriptions if isinstance(event, t)]

        delivered = 0
        for handler in snapshot:
            try:
                handler(event)
            except Exception:
                logger.exception("Error in handler %r for %s", handler, type(event).__name__)
            else:
                delivered += 1
        return delivered

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)
