"""Batch state machine: the polling loop driving a scenario to completion."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Mapping

from action_engine.core.domain.action_state_machine import (
    derive_group_status,
    is_terminal_group_status,
    is_valid_transition,
    pending_actions,
)
from action_engine.core.domain.errors import BatchTimeoutError
from action_engine.core.events.event_bus import EventBus
from action_engine.core.events.events import (
    ActionStatusTransitionEvent,
    ActionTimedOutEvent,
    GroupStatusChangedEvent,
    TickCompletedEvent,
)
from action_engine.core.events.sinks.file_recorder import FileRecorderSink
from action_engine.core.events.sinks.sink_logging import LoggingEventSink
from action_engine.core.ports.executors import ExecutionContext
from action_engine.engine.dependency_resolver import DependencyResolver
from action_engine.engine.dispatcher import ActionDispatcher
from action_engine.engine.handlers import SwapHandler, TransferHandler, stub_handlers
from action_engine.engine.retry import Clock, RetryPolicy, Sleep
from action_engine.engine.swap_quote import SwapQuoteBuilder
from action_engine.runtime.context import BatchContext
from action_engine.runtime.prometheus_metrics import BatchMetricsClient

if TYPE_CHECKING:
    from action_engine.core.config.execute_config import ExecuteConfig
    from action_engine.core.domain.types import (
        Action,
        ActionGroupStatus,
        ActionStatus,
        ScenarioSnapshot,
    )
    from action_engine.core.events.event_sink import EventSink
    from action_engine.core.ports.executors import SwapExecutor, TransferExecutor
    from action_engine.core.ports.ledger_client import LedgerClient
    from action_engine.core.ports.swap_pricer import SwapPricer
    from action_engine.engine.handlers import ActionHandler

LOGGER = logging.getLogger(__name__)


class ActionExecutionEngine:
    """Drives every action of a scenario snapshot until the group is terminal.

    Invariants:
    - Dependencies are resolved once per batch, before the first tick.
    - One tick dispatches every non-terminal action, in snapshot order.
    - Terminal actions (Stored, Failed, Aborted) are never dispatched again.
    - Only this class writes action_status and action_group_status.

    The ledger client, pricer and executors are shared by all batches run
    through this engine; everything else is per batch.
    """
    # pylint: disable=too-many-instance-attributes,too-many-arguments

    def __init__(
        self,
        *,
        config: ExecuteConfig,
        ledger: LedgerClient,
        pricer: SwapPricer,
        transfer_executor: TransferExecutor,
        swap_executor: SwapExecutor,
        handlers: Mapping[str, ActionHandler] | None = None,
        event_bus: EventBus | None = None,
        metrics: BatchMetricsClient | None = None,
        sleep: Sleep | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._event_bus = event_bus if event_bus is not None else self._build_event_bus(config)
        self._metrics = metrics if metrics is not None else BatchMetricsClient()
        self._sleep: Sleep = sleep or asyncio.sleep
        self._clock: Clock = clock or time.monotonic

        quote_builder = SwapQuoteBuilder(pricer=pricer, config=config)
        self._handlers: dict[str, ActionHandler] = {
            "Transfer": TransferHandler(transfer_executor),
            "Swap": SwapHandler(swap_executor, quote_builder),
            **stub_handlers(),
        }
        if handlers:
            self._handlers.update(handlers)

    @staticmethod
    def _build_event_bus(config: ExecuteConfig) -> EventBus:
        sinks: list[EventSink] = [LoggingEventSink(logging.getLogger("action_engine.events"))]
        if config.event_log_path is not None:
            sinks.append(FileRecorderSink(config.event_log_path))
        return EventBus(sinks=sinks)

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    def close(self) -> None:
        self._event_bus.close()

    async def execute_actions(self, snapshot: ScenarioSnapshot) -> None:
        """Run the batch until its group status is Completed or Aborted.

        Mutates the snapshot in place. Blocks the calling task for the
        whole batch; cancel the task to stop it.

        Raises:
            ActionEngineError subclasses for fatal errors (missing asset,
            missing dependency cell, unmatched pool, unsupported action
            type) and BatchTimeoutError when batch_timeout_seconds elapses.
        """
        ctx = BatchContext(snapshot=snapshot)
        started = self._clock()

        LOGGER.debug("Actions in scenario snapshot %s:", snapshot.scenario_id)
        for index, action in enumerate(snapshot.actions):
            LOGGER.debug(
                "Action #%d | %s | %s",
                index,
                action.action_type,
                action.action_status,
            )

        timeout = self._config.batch_timeout_seconds
        try:
            if timeout is None:
                await self._run(ctx)
            else:
                # Only our own deadline converts; a TimeoutError from a port propagates.
                try:
                    async with asyncio.timeout(timeout) as deadline:
                        await self._run(ctx)
                except TimeoutError as exc:
                    if not deadline.expired():
                        raise
                    raise BatchTimeoutError(
                        f"batch {ctx.batch_id} not terminal after {timeout}s"
                    ) from exc
        finally:
            self._metrics.push_batch(
                batch_id=ctx.batch_id,
                group_status=snapshot.action_group_status,
                ticks=ctx.tick,
                duration_seconds=self._clock() - started,
                action_statuses=[a.action_status for a in snapshot.actions],
            )

        LOGGER.info(
            "Batch finished",
            extra={
                "batch_id": ctx.batch_id,
                "group_status": snapshot.action_group_status,
                "ticks": ctx.tick,
            },
        )

    def _build_dispatcher(self, ctx: BatchContext) -> ActionDispatcher:
        context = ExecutionContext(
            batch_id=ctx.batch_id,
            ledger=self._ledger,
            config=self._config,
            dependencies=ctx.dependencies,
        )
        return ActionDispatcher(context=context, handlers=self._handlers)

    async def _run(self, ctx: BatchContext) -> None:
        snapshot = ctx.snapshot

        resolver = DependencyResolver(
            ledger=self._ledger,
            config=self._config,
            retry=RetryPolicy.from_config(
                self._config.dependency_retry,
                sleep=self._sleep,
                clock=self._clock,
            ),
            event_bus=self._event_bus,
            batch_id=ctx.batch_id,
        )
        await resolver.resolve(snapshot, ctx.dependencies)

        dispatcher = self._build_dispatcher(ctx)

        if not is_terminal_group_status(snapshot.action_group_status):
            self._set_group_status(ctx, "Running")

        while not is_terminal_group_status(snapshot.action_group_status):
            await self._sleep(self._config.tick_interval_seconds)
            ctx.tick += 1

            selected = pending_actions(snapshot.actions)
            if self._config.concurrent_dispatch:
                timed_out = await self._dispatch_concurrently(ctx, dispatcher, selected)
            else:
                timed_out = await self._dispatch_sequentially(ctx, dispatcher, selected)

            self._event_bus.emit(
                TickCompletedEvent(
                    batch_id=ctx.batch_id,
                    tick=ctx.tick,
                    dispatched=len(selected),
                    timed_out=timed_out,
                    status_counts=ctx.status_counts(),
                )
            )

            self._set_group_status(
                ctx,
                derive_group_status(
                    (a.action_status for a in snapshot.actions),
                    snapshot.action_group_status,
                ),
            )

    async def _dispatch_sequentially(
        self,
        ctx: BatchContext,
        dispatcher: ActionDispatcher,
        selected: list[Action],
    ) -> int:
        timed_out = 0
        for action in selected:
            status = await self._dispatch_one(ctx, dispatcher, action)
            if status is None:
                timed_out += 1
                continue
            self._apply_status(ctx, action, status)
        return timed_out

    async def _dispatch_concurrently(
        self,
        ctx: BatchContext,
        dispatcher: ActionDispatcher,
        selected: list[Action],
    ) -> int:
        # Tasks are created in snapshot order, so handlers are entered in that order.
        outcomes = await asyncio.gather(
            *(self._dispatch_one(ctx, dispatcher, action) for action in selected),
            return_exceptions=True,
        )

        timed_out = 0
        fatal: BaseException | None = None
        for action, outcome in zip(selected, outcomes):
            if isinstance(outcome, BaseException):
                if fatal is None:
                    fatal = outcome
                continue
            if outcome is None:
                timed_out += 1
                continue
            self._apply_status(ctx, action, outcome)

        if fatal is not None:
            raise fatal
        return timed_out

    async def _dispatch_one(
        self,
        ctx: BatchContext,
        dispatcher: ActionDispatcher,
        action: Action,
    ) -> ActionStatus | None:
        """Dispatch one action. Returns None if the action timed out."""
        timeout = self._config.action_timeout_seconds
        if timeout is None:
            return await dispatcher.dispatch(action, ctx.snapshot)

        try:
            async with asyncio.timeout(timeout) as deadline:
                return await dispatcher.dispatch(action, ctx.snapshot)
        except TimeoutError:
            if not deadline.expired():
                raise
            LOGGER.warning(
                "Action dispatch timed out, retrying next tick",
                extra={"action_id": action.action_id, "timeout_seconds": timeout},
            )
            self._event_bus.emit(
                ActionTimedOutEvent(
                    batch_id=ctx.batch_id,
                    tick=ctx.tick,
                    action_id=action.action_id,
                    timeout_seconds=timeout,
                )
            )
            return None

    def _apply_status(self, ctx: BatchContext, action: Action, status: ActionStatus) -> None:
        prev = action.action_status
        if prev == status:
            return

        expected = is_valid_transition(prev, status)
        if not expected:
            LOGGER.warning(
                "Unexpected action status transition",
                extra={"action_id": action.action_id, "prev": prev, "next": status},
            )

        action.action_status = status
        self._event_bus.emit(
            ActionStatusTransitionEvent(
                batch_id=ctx.batch_id,
                tick=ctx.tick,
                action_id=action.action_id,
                action_type=action.action_type,
                prev_status=prev,
                next_status=status,
                expected=expected,
            )
        )

    def _set_group_status(self, ctx: BatchContext, status: ActionGroupStatus) -> None:
        prev = ctx.snapshot.action_group_status
        if prev == status:
            return

        ctx.snapshot.action_group_status = status
        LOGGER.info(
            "Group status changed",
            extra={"batch_id": ctx.batch_id, "prev": prev, "next": status, "tick": ctx.tick},
        )
        self._event_bus.emit(
            GroupStatusChangedEvent(
                batch_id=ctx.batch_id,
                tick=ctx.tick,
                prev_status=prev,
                next_status=status,
            )
        )
