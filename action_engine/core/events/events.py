"""
Domain event models.

These events represent immutable facts observed while a batch runs.
They are consumed by loggers, recorders, and monitoring pipelines.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DependencyResolvedEvent:
    batch_id: str
    symbol: str

    # native | resolved | unsupported
    kind: str
    lookups: int


@dataclass(frozen=True, slots=True)
class ActionStatusTransitionEvent:
    batch_id: str
    tick: int
    action_id: str
    action_type: str

    prev_status: str
    next_status: str

    # False when the transition is not in the passive transition table.
    expected: bool


@dataclass(frozen=True, slots=True)
class ActionTimedOutEvent:
    batch_id: str
    tick: int
    action_id: str
    timeout_seconds: float


@dataclass(frozen=True, slots=True)
class TickCompletedEvent:
    batch_id: str
    tick: int

    dispatched: int
    timed_out: int

    status_counts: dict[str, int]


@dataclass(frozen=True, slots=True)
class GroupStatusChangedEvent:
    batch_id: str
    tick: int

    prev_status: str
    next_status: str
