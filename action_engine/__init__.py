"""Public API for the action_engine package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Engine API
# ----------------------------------------------------------------------
from action_engine.engine.batch_runner import ActionExecutionEngine
from action_engine.engine.handlers import ActionHandler, StubActionHandler
from action_engine.engine.swap_quote import ConstantProductPricer

# ----------------------------------------------------------------------
# Config API
# ----------------------------------------------------------------------
from action_engine.core.config.execute_config import ExecuteConfig, RetryConfig

# ----------------------------------------------------------------------
# Domain Types
# ----------------------------------------------------------------------
from action_engine.core.domain.dependencies import (
    DependencyCache,
    NativeAsset,
    ResolvedDependency,
    UnsupportedAsset,
)
from action_engine.core.domain.errors import (
    ActionEngineError,
    AssetNotFoundError,
    BatchTimeoutError,
    DependencyNotFoundError,
    PoolNotFoundError,
    UnsupportedActionTypeError,
)
from action_engine.core.domain.pool_model import PoolModel, SwapQuote, TokenLeg
from action_engine.core.domain.types import (
    Action,
    ActionGroupStatus,
    ActionStatus,
    ActionType,
    AssetInfo,
    Cell,
    CellDep,
    CellSearchKey,
    OutPoint,
    PoolInfo,
    ScenarioSnapshot,
    Script,
    Target,
)

# ----------------------------------------------------------------------
# Ports (implemented by integrators)
# ----------------------------------------------------------------------
from action_engine.core.ports.executors import (
    ExecutionContext,
    SwapExecutor,
    TransferExecutor,
)
from action_engine.core.ports.ledger_client import LedgerClient
from action_engine.core.ports.swap_pricer import SwapPricer

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Engine
    "ActionExecutionEngine",
    "ActionHandler",
    "StubActionHandler",
    "ConstantProductPricer",

    # Config
    "ExecuteConfig",
    "RetryConfig",

    # Domain
    "Action",
    "ActionType",
    "ActionStatus",
    "ActionGroupStatus",
    "AssetInfo",
    "Cell",
    "CellDep",
    "CellSearchKey",
    "OutPoint",
    "PoolInfo",
    "ScenarioSnapshot",
    "Script",
    "Target",
    "PoolModel",
    "TokenLeg",
    "SwapQuote",
    "DependencyCache",
    "NativeAsset",
    "ResolvedDependency",
    "UnsupportedAsset",

    # Errors
    "ActionEngineError",
    "AssetNotFoundError",
    "DependencyNotFoundError",
    "PoolNotFoundError",
    "UnsupportedActionTypeError",
    "BatchTimeoutError",

    # Ports
    "ExecutionContext",
    "LedgerClient",
    "SwapPricer",
    "TransferExecutor",
    "SwapExecutor",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("action-engine")
except PackageNotFoundError:
    __version__ = "0.0.0"
