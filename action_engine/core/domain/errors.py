"""Fatal engine errors.

Errors defined here abort the whole batch run and propagate out of
``ActionExecutionEngine.execute_actions``. Recoverable per-action failures
are never raised: handlers report them as Failed / Aborted statuses.
"""

from __future__ import annotations


class ActionEngineError(RuntimeError):
    """Base class for fatal engine errors."""


class AssetNotFoundError(ActionEngineError):
    """Raised when no pool info describes a non-native input asset."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Pool info not found for token {symbol}")
        self.symbol = symbol


class DependencyNotFoundError(ActionEngineError):
    """Raised when the dependency cell of an asset could not be found in time."""

    def __init__(self, symbol: str, attempts: int) -> None:
        super().__init__(
            f"Dependency cell not found for token {symbol} after {attempts} attempts"
        )
        self.symbol = symbol
        self.attempts = attempts


class PoolNotFoundError(ActionEngineError):
    """Raised when no pool matches the (input, output) pair of a swap."""

    def __init__(self, asset_x_symbol: str, asset_y_symbol: str) -> None:
        super().__init__(
            f"No matching pool found for {asset_x_symbol} -> {asset_y_symbol}"
        )
        self.asset_x_symbol = asset_x_symbol
        self.asset_y_symbol = asset_y_symbol


class UnsupportedActionTypeError(ActionEngineError):
    """Raised when an action type has no registered handler."""

    def __init__(self, action_type: object) -> None:
        super().__init__(f"Unsupported action type: {action_type}")
        self.action_type = action_type


class BatchTimeoutError(ActionEngineError):
    """Raised when a batch does not reach a terminal group status in time."""
