"""Shared fakes for the engine's ports."""

# pylint: disable=missing-function-docstring,redefined-outer-name
from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Any, Callable

import pytest

from action_engine.core.config.execute_config import ExecuteConfig
from action_engine.core.domain.pool_model import PoolModel, SwapQuote
from action_engine.core.domain.types import (
    AssetInfo,
    Cell,
    CellSearchKey,
    OutPoint,
    PoolInfo,
    ScenarioSnapshot,
    Script,
)
from action_engine.core.events.sinks.null_event_bus import RecordingEventBus
from action_engine.engine.batch_runner import ActionExecutionEngine

RUSD_SCRIPT = Script(code_hash="0x" + "11" * 32, hash_type="type", args="0x01")
RUSD_DEP_SCRIPT = Script(code_hash="0x" + "22" * 32, hash_type="type", args="0x")
DEP_TX_HASH = "0x" + "33" * 32


class StopPolling(Exception):
    """Raised by RecordingSleep to end an otherwise endless polling loop."""


class RecordingSleep:
    """Injected sleep: records durations, yields once, optionally stops the loop."""

    def __init__(self, max_calls: int | None = None) -> None:
        self.calls: list[float] = []
        self._max_calls = max_calls

    async def __call__(self, seconds: float) -> None:
        if self._max_calls is not None and len(self.calls) >= self._max_calls:
            raise StopPolling(f"stopped after {self._max_calls} sleeps")
        self.calls.append(seconds)
        await asyncio.sleep(0)


class FakeLedger:
    """find_cells yields one cell per call, following a scripted sequence.

    A None entry in the script means the cell is not live yet.
    """

    def __init__(self, script: dict[str, list[Cell | None]] | None = None) -> None:
        self._script = script or {}
        self.calls: list[CellSearchKey] = []

    async def find_cells(self, search_key: CellSearchKey):
        self.calls.append(search_key)
        key = search_key.script.code_hash
        results = self._script.get(key, [])
        index = sum(1 for c in self.calls if c.script.code_hash == key) - 1
        cell = results[min(index, len(results) - 1)] if results else None
        if cell is not None:
            yield cell


class ScriptedExecutor:
    """Transfer + swap executor returning scripted statuses per action id.

    Once a script is exhausted its last status is repeated.
    """

    def __init__(self, statuses: dict[str, list[str]] | None = None, default: str = "Stored") -> None:
        self._statuses = statuses or {}
        self._default = default
        self._served: dict[str, int] = defaultdict(int)
        self.calls: list[str] = []
        self.swap_calls: list[tuple[str, PoolModel, str]] = []
        self.contexts: list[Any] = []

    def _next(self, action_id: str) -> str:
        script = self._statuses.get(action_id)
        if not script:
            return self._default
        index = min(self._served[action_id], len(script) - 1)
        self._served[action_id] += 1
        return script[index]

    async def execute_transfer(self, context, action) -> str:
        self.calls.append(action.action_id)
        self.contexts.append(context)
        return self._next(action.action_id)

    async def execute_swap(self, context, action, pool, slippage) -> str:
        self.calls.append(action.action_id)
        self.contexts.append(context)
        self.swap_calls.append((action.action_id, pool, slippage))
        return self._next(action.action_id)


class FakePricer:
    def __init__(self, output: str = "42.5", impact: str = "0.01") -> None:
        self.output = output
        self.impact = impact
        self.inputs: list[str] = []

    def quote_exact_input(self, pool: PoolModel, input_amount: str) -> SwapQuote:
        self.inputs.append(input_amount)
        return SwapQuote(output_amount=self.output, price_impact=self.impact)


def make_cell(index: int = 0) -> Cell:
    return Cell(out_point=OutPoint(tx_hash=DEP_TX_HASH, index=index))


def make_pool(x: str = "X", y: str = "Y", *, x_script: Script | None = None, **kwargs: Any) -> PoolInfo:
    return PoolInfo(
        asset_x=AssetInfo(symbol=x, type_script=x_script, reserve=kwargs.pop("x_reserve", None)),
        asset_y=AssetInfo(symbol=y, reserve=kwargs.pop("y_reserve", None)),
        **kwargs,
    )


def make_snapshot(actions: list[dict[str, Any]], pools: list[PoolInfo] | None = None) -> ScenarioSnapshot:
    raw_actions = []
    for index, action in enumerate(actions):
        raw = {
            "action_id": f"a{index}",
            "actor_address": "ckt1qactor",
            **action,
        }
        raw.setdefault(
            "targets",
            [{"asset_x_symbol": "CKB", "asset_y_symbol": "CKB", "amount": "100000000"}],
        )
        raw_actions.append(raw)
    return ScenarioSnapshot.model_validate(
        {
            "scenario_id": "scenario-1",
            "actions": raw_actions,
            "pool_infos": [p.model_dump() for p in (pools or [])],
        }
    )


@pytest.fixture
def config() -> ExecuteConfig:
    return ExecuteConfig(
        slippage="0.005",
        fee_rate=1000,
        dependency_retry={"max_attempts": 5, "interval_seconds": 0.5},
        extra_cell_deps={"RUSD": CellSearchKey(script=RUSD_DEP_SCRIPT)},
    )


@pytest.fixture
def bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def engine_factory(config: ExecuteConfig, bus: RecordingEventBus) -> Callable[..., ActionExecutionEngine]:
    def build(
        *,
        executor: ScriptedExecutor | None = None,
        ledger: FakeLedger | None = None,
        pricer: FakePricer | None = None,
        sleep: RecordingSleep | None = None,
        cfg: ExecuteConfig | None = None,
        **kwargs: Any,
    ) -> ActionExecutionEngine:
        executor = executor or ScriptedExecutor()
        return ActionExecutionEngine(
            config=cfg or config,
            ledger=ledger or FakeLedger(),
            pricer=pricer or FakePricer(),
            transfer_executor=executor,
            swap_executor=executor,
            event_bus=bus,
            sleep=sleep or RecordingSleep(),
            **kwargs,
        )

    return build
