from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from action_engine.core.domain.dependencies import DependencyCache
from action_engine.core.domain.types import ScenarioSnapshot


def _new_batch_id(scenario_id: str) -> str:
    return f"{scenario_id}-{uuid.uuid4().hex[:12]}"


@dataclass(slots=True)
class BatchContext:
    """
    Runtime context of one batch run.

    One BatchContext == one execute_actions() call. The dependency cache is
    created with the context and dies with it, so concurrent or successive
    batches never share resolved out points.

    Only the batch state machine writes the snapshot's statuses and advances
    ``tick``.
    """

    snapshot: ScenarioSnapshot
    batch_id: str = ""
    dependencies: DependencyCache = field(default_factory=DependencyCache)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tick: int = 0

    def __post_init__(self) -> None:
        if not self.batch_id:
            self.batch_id = _new_batch_id(self.snapshot.scenario_id)

    def status_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for action in self.snapshot.actions:
            counts[action.action_status] = counts.get(action.action_status, 0) + 1
        return counts
