"""Token dependency resolution.

One-shot pre-pass run before the polling loop: every input asset named by a
target is mapped once to its type script and, when the asset's script needs
one, to the extra cell dep found on the ledger.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from action_engine.core.domain.dependencies import (
    DependencyCache,
    DependencyEntry,
    NativeAsset,
    ResolvedDependency,
    UnsupportedAsset,
)
from action_engine.core.domain.errors import AssetNotFoundError, DependencyNotFoundError
from action_engine.core.domain.types import CellDep, PoolInfo, ScenarioSnapshot
from action_engine.core.events.events import DependencyResolvedEvent
from action_engine.core.ports.ledger_client import find_matching_cell

if TYPE_CHECKING:
    from action_engine.core.config.execute_config import ExecuteConfig
    from action_engine.core.events.event_bus import EventBus
    from action_engine.core.ports.ledger_client import LedgerClient
    from action_engine.engine.retry import RetryPolicy

LOGGER = logging.getLogger(__name__)


class DependencyResolver:
    """Populates a batch's DependencyCache from the ledger and pool infos."""

    def __init__(
        self,
        *,
        ledger: LedgerClient,
        config: ExecuteConfig,
        retry: RetryPolicy,
        event_bus: EventBus,
        batch_id: str = "",
    ) -> None:
        self._ledger = ledger
        self._config = config
        self._retry = retry
        self._event_bus = event_bus
        self._batch_id = batch_id

    async def resolve(self, snapshot: ScenarioSnapshot, cache: DependencyCache) -> None:
        """Resolve every not-yet-cached input symbol of the snapshot.

        Raises:
            AssetNotFoundError: a non-native symbol has no pool info.
            DependencyNotFoundError: the extra cell dep could not be found
                within the retry policy.
        """
        for action in snapshot.actions:
            for target in action.targets:
                symbol = target.asset_x_symbol
                if symbol in cache:
                    continue
                entry = await self._resolve_symbol(symbol, snapshot.pool_infos, cache)
                cache.put(symbol, entry)
                self._event_bus.emit(
                    DependencyResolvedEvent(
                        batch_id=self._batch_id,
                        symbol=symbol,
                        kind=_entry_kind(entry),
                        lookups=cache.lookups[symbol],
                    )
                )

    async def _resolve_symbol(
        self,
        symbol: str,
        pool_infos: list[PoolInfo],
        cache: DependencyCache,
    ) -> DependencyEntry:
        if symbol == self._config.native_symbol:
            return NativeAsset()

        pool_info = next((p for p in pool_infos if p.asset_x.symbol == symbol), None)
        if pool_info is None:
            raise AssetNotFoundError(symbol)

        search_key = self._config.extra_cell_deps.get(symbol)
        if search_key is None:
            LOGGER.error("Unsupported token", extra={"symbol": symbol})
            return UnsupportedAsset(reason=f"no dependency strategy for {symbol}")

        async def fetch():
            cache.lookups[symbol] += 1
            return await find_matching_cell(self._ledger, search_key)

        outcome = await self._retry.poll(fetch)
        if outcome.value is None:
            raise DependencyNotFoundError(symbol, outcome.attempts)

        cell = outcome.value
        LOGGER.debug(
            "Resolved dependency cell",
            extra={
                "symbol": symbol,
                "tx_hash": cell.out_point.tx_hash,
                "index": cell.out_point.index,
                "attempts": outcome.attempts,
            },
        )
        return ResolvedDependency(
            type_script=pool_info.asset_x.type_script,
            cell_dep=CellDep(out_point=cell.out_point, dep_type="code"),
        )


def _entry_kind(entry: DependencyEntry) -> str:
    if isinstance(entry, NativeAsset):
        return "native"
    if isinstance(entry, ResolvedDependency):
        return "resolved"
    return "unsupported"
