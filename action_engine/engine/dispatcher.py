"""Action dispatch by action type."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from action_engine.core.domain.errors import UnsupportedActionTypeError
from action_engine.core.domain.types import ACTION_TYPES

if TYPE_CHECKING:
    from action_engine.core.domain.types import Action, ActionStatus, ScenarioSnapshot
    from action_engine.core.ports.executors import ExecutionContext
    from action_engine.engine.handlers import ActionHandler

LOGGER = logging.getLogger(__name__)


class ActionDispatcher:
    """Routes an action to the handler registered for its type.

    The dispatcher never writes statuses: the batch state machine assigns
    the returned status onto the action.
    """

    def __init__(
        self,
        *,
        context: ExecutionContext,
        handlers: Mapping[str, ActionHandler],
    ) -> None:
        missing = [t for t in ACTION_TYPES if t not in handlers]
        if missing:
            raise ValueError(f"No handler registered for action types: {missing}")
        self._context = context
        self._handlers = dict(handlers)

    @property
    def context(self) -> ExecutionContext:
        return self._context

    async def dispatch(self, action: Action, snapshot: ScenarioSnapshot) -> ActionStatus:
        """Advance one action by one tick.

        An input token cached as unsupported fails the action before any
        handler runs, stub handlers included: an AddLiquidity on such a token
        returns Failed, not Confirmed.

        Raises:
            UnsupportedActionTypeError: no handler for action.action_type.
            PoolNotFoundError: a swap has no matching pool.
        """
        handler = self._handlers.get(action.action_type)
        if handler is None:
            raise UnsupportedActionTypeError(action.action_type)

        symbol = action.driving_target.asset_x_symbol
        if self._context.dependencies.is_unsupported(symbol):
            LOGGER.warning(
                "Action depends on an unresolved token, marking Failed",
                extra={"action_id": action.action_id, "symbol": symbol},
            )
            return "Failed"

        return await handler.handle(self._context, action, snapshot)
