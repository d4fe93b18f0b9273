"""Tests for the synchronous EventBus."""

from __future__ import annotations

import threading

from neurolint.domain.events import (
    AnalysisCompleted,
    DomainEvent,
    LayerExecuted,
    PipelineCompleted,
    PipelineStarted,
)
from neurolint.infrastructure.event_bus import EventBus


class TestEventBus:
    """Subscribe, publish, unsubscribe."""

    def test_subscribe_and_publish(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []
        bus.subscribe(received.append, PipelineStarted)

        event = PipelineStarted(source_id="test", layer_ids=(1, 2), code_length=10)
        assert bus.publish(event) == 1
        assert received == [event]
        assert received[0] is event

    def test_typed_subscription_filters_events(self) -> None:
        bus = EventBus()
        started: list[DomainEvent] = []
        bus.subscribe(started.append, PipelineStarted)

        bus.publish(PipelineStarted(source_id="test"))
        assert bus.publish(PipelineCompleted(source_id="test", successful_layers=1)) == 0

        assert len(started) == 1

    def test_base_class_receives_everything_in_order(self) -> None:
        bus = EventBus()
        order: list[str] = []
        bus.subscribe(lambda e: order.append("all"))
        bus.subscribe(lambda e: order.append("layer"), LayerExecuted)
        bus.subscribe(lambda e: order.append("all-again"), DomainEvent)

        bus.publish(LayerExecuted(position=1, total=1))
        bus.publish(AnalysisCompleted())
        assert order == ["all", "layer", "all-again", "all", "all-again"]

    def test_returned_callable_unsubscribes(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []
        stop = bus.subscribe(received.append, AnalysisCompleted)
        assert len(bus) == 1

        assert stop() is True
        assert stop() is False
        assert len(bus) == 0

        bus.publish(AnalysisCompleted())
        assert received == []

    def test_unsubscribe_matches_event_type(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []
        bus.subscribe(received.append, AnalysisCompleted)
        bus.subscribe(received.append)

        assert bus.unsubscribe(received.append, PipelineStarted) is False
        assert bus.unsubscribe(received.append, AnalysisCompleted) is True

        bus.publish(AnalysisCompleted())
        assert len(received) == 1

    def test_failing_handler_is_skipped(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []

        def broken(event: DomainEvent) -> None:
            raise RuntimeError("boom")

        bus.subscribe(broken)
        bus.subscribe(broken, PipelineStarted)
        bus.subscribe(received.append, PipelineStarted)

        assert bus.publish(PipelineStarted()) == 1
        assert len(received) == 1

    def test_handler_may_unsubscribe_while_publishing(self) -> None:
        bus = EventBus()
        calls: list[int] = []

        def once(event: DomainEvent) -> None:
            calls.append(1)
            stop()

        stop = bus.subscribe(once)
        bus.publish(PipelineStarted())
        bus.publish(PipelineStarted())
        assert calls == [1]

    def test_concurrent_publish(self) -> None:
        bus = EventBus()
        received: list[DomainEvent] = []
        lock = threading.Lock()

        def collect(event: DomainEvent) -> None:
            with lock:
                received.append(event)

        bus.subscribe(collect)
        threads = [
            threading.Thread(target=lambda: [bus.publish(PipelineStarted()) for _ in range(50)])
            for _ in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(received) == 200
