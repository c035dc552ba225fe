"""Executor protocols for transfers and swaps.

Signing, transaction building and broadcast live behind these protocols.
The engine only relies on the status contract: an executor is invoked once
per tick while its action is non-terminal and returns the action's next
status. Recoverable failures are reported as "Failed" or "Aborted", never
raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from action_engine.core.config.execute_config import ExecuteConfig
    from action_engine.core.domain.dependencies import DependencyCache
    from action_engine.core.domain.pool_model import PoolModel
    from action_engine.core.domain.types import ActionStatus, SwapAction, TransferAction
    from action_engine.core.ports.ledger_client import LedgerClient


@dataclass(frozen=True, slots=True)
class ExecutionContext:
    """Read-only context handed to executors.

    Exposes the shared ledger client, the execution config and the batch's
    resolved dependencies (type scripts / cell deps per token symbol).
    """

    batch_id: str
    ledger: LedgerClient
    config: ExecuteConfig
    dependencies: DependencyCache


class TransferExecutor(Protocol):
    async def execute_transfer(
        self,
        context: ExecutionContext,
        action: TransferAction,
    ) -> ActionStatus:
        """Advance a transfer by one step and return its next status."""


class SwapExecutor(Protocol):
    async def execute_swap(
        self,
        context: ExecutionContext,
        action: SwapAction,
        pool: PoolModel,
        slippage: str,
    ) -> ActionStatus:
        """Advance a swap on the quoted pool and return its next status."""
