"""
Semantic test: event delivery.

Invariant:
Events reach every sink in registration order, recorders write one JSON
line per event, and a closed bus drops events.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from action_engine.core.events.event_bus import EventBus
from action_engine.core.events.events import GroupStatusChangedEvent
from action_engine.core.events.sinks.file_recorder import FileRecorderSink
from action_engine.core.events.sinks.sink_logging import LoggingEventSink
from action_engine.runtime.prometheus_metrics import BatchMetricsClient


class _ListSink:
    def __init__(self, name: str, seen: list[tuple[str, object]]) -> None:
        self._name = name
        self._seen = seen

    def on_event(self, event: object) -> None:
        self._seen.append((self._name, event))


def _event() -> GroupStatusChangedEvent:
    return GroupStatusChangedEvent(batch_id="b1", tick=2, prev_status="Running", next_status="Completed")


def test_bus_fans_out_in_order() -> None:
    seen: list[tuple[str, object]] = []
    bus = EventBus([_ListSink("first", seen)])
    bus.register(_ListSink("second", seen))

    bus.emit(_event())

    assert [name for name, _ in seen] == ["first", "second"]


def test_closed_bus_drops_events(tmp_path: Path) -> None:
    recorder = FileRecorderSink(tmp_path / "events.jsonl")
    bus = EventBus([recorder])

    bus.emit(_event())
    bus.close()
    bus.emit(_event())

    assert bus.closed
    lines = (tmp_path / "events.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    with pytest.raises(RuntimeError):
        bus.register(recorder)


def test_file_recorder_writes_typed_json_lines(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "events.jsonl"
    recorder = FileRecorderSink(path)

    recorder.on_event(_event())
    recorder.close()

    record = json.loads(path.read_text(encoding="utf-8"))
    assert record == {
        "type": "GroupStatusChangedEvent",
        "batch_id": "b1",
        "tick": 2,
        "prev_status": "Running",
        "next_status": "Completed",
    }


def test_logging_sink_attaches_event_payload(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("action_engine.test.bus")
    sink = LoggingEventSink(logger)

    with caplog.at_level(logging.INFO, logger="action_engine.test.bus"):
        sink.on_event(_event())

    assert caplog.records[0].getMessage() == "GroupStatusChangedEvent"
    assert caplog.records[0].event["next_status"] == "Completed"


def test_metrics_disabled_without_pushgateway(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROMETHEUS_PUSHGATEWAY_URL", raising=False)
    client = BatchMetricsClient()

    assert not client.is_enabled()
    client.push_batch(
        batch_id="b1",
        group_status="Completed",
        ticks=1,
        duration_seconds=0.1,
        action_statuses=["Stored"],
    )


def test_metrics_registry_counts_statuses() -> None:
    registry = BatchMetricsClient.build_registry(
        batch_id="b1",
        group_status="Aborted",
        ticks=3,
        duration_seconds=30.0,
        action_statuses=["Stored", "Failed", "Stored"],
    )

    stored = registry.get_sample_value(
        "action_batch_actions", {"batch_id": "b1", "action_status": "Stored"}
    )
    ticks = registry.get_sample_value(
        "action_batch_ticks", {"batch_id": "b1", "group_status": "Aborted"}
    )
    assert stored == 2.0
    assert ticks == 3.0


def test_metrics_grouping_key_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROMETHEUS_PUSHGATEWAY_GROUPING_KEY_JSON", '{"instance": "executor-0", "n": 1}')

    assert BatchMetricsClient._load_grouping_key() == {"instance": "executor-0"}
