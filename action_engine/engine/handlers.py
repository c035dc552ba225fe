"""Per-variant action handlers.

Every ActionType has exactly one handler. Transfer and Swap delegate to the
injected executors; the liquidity and exact-output variants are stubs that
only log and report Confirmed until real implementations are plugged in.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from action_engine.core.domain.types import (
        Action,
        ActionStatus,
        ScenarioSnapshot,
        SwapAction,
        TransferAction,
    )
    from action_engine.core.ports.executors import (
        ExecutionContext,
        SwapExecutor,
        TransferExecutor,
    )
    from action_engine.engine.swap_quote import SwapQuoteBuilder

LOGGER = logging.getLogger(__name__)


class ActionHandler(Protocol):
    async def handle(
        self,
        context: ExecutionContext,
        action: Action,
        snapshot: ScenarioSnapshot,
    ) -> ActionStatus:
        """Advance the action by one tick and return its next status."""


class TransferHandler:
    def __init__(self, executor: TransferExecutor) -> None:
        self._executor = executor

    async def handle(
        self,
        context: ExecutionContext,
        action: TransferAction,
        snapshot: ScenarioSnapshot,
    ) -> ActionStatus:
        return await self._executor.execute_transfer(context, action)


class SwapHandler:
    """Quotes the swap on its matching pool, then hands it to the executor."""

    def __init__(self, executor: SwapExecutor, quote_builder: SwapQuoteBuilder) -> None:
        self._executor = executor
        self._quote_builder = quote_builder

    async def handle(
        self,
        context: ExecutionContext,
        action: SwapAction,
        snapshot: ScenarioSnapshot,
    ) -> ActionStatus:
        # Raises PoolNotFoundError before anything is executed.
        result = self._quote_builder.build_quote(snapshot, action)
        return await self._executor.execute_swap(
            context,
            action,
            result.pool,
            context.config.slippage,
        )


class StubActionHandler:
    """Placeholder handler: logs the action and reports Confirmed.

    Confirmed is not terminal, so actions handled here keep the batch
    polling until a real handler replaces the stub.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    async def execute(self, action: Action) -> ActionStatus:
        LOGGER.info(
            "%s not implemented, reporting Confirmed",
            self.name,
            extra={"action": action.model_dump(mode="json")},
        )
        return "Confirmed"

    async def handle(
        self,
        context: ExecutionContext,
        action: Action,
        snapshot: ScenarioSnapshot,
    ) -> ActionStatus:
        return await self.execute(action)


STUB_ACTION_TYPES: tuple[str, ...] = (
    "AddLiquidity",
    "RemoveLiquidity",
    "SwapExactInputForOutput",
    "SwapInputForExactOutput",
    "ClaimProtocolLiquidity",
)


def stub_handlers() -> dict[str, StubActionHandler]:
    return {name: StubActionHandler(name) for name in STUB_ACTION_TYPES}
