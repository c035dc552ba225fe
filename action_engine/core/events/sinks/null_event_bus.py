from __future__ import annotations

from typing import Any

from action_engine.core.events.event_bus import EventBus


class NullEventBus(EventBus):
    """EventBus without sinks; events are dropped (used for tests)."""

    def __init__(self) -> None:
        super().__init__(sinks=())

    def emit(self, event: Any) -> None:
        return


class RecordingEventBus(EventBus):
    """EventBus keeping every emitted event in memory (used for tests)."""

    def __init__(self) -> None:
        super().__init__(sinks=())
        self.events: list[Any] = []

    def emit(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]
