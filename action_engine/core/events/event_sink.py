"""
Event sink interface.

Sinks consume the domain events emitted while a batch runs.
"""
from __future__ import annotations

from typing import Any, Protocol


class EventSink(Protocol):
    def on_event(self, event: Any) -> None:
        """Consume a domain event. Must not block the polling loop."""
