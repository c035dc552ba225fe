"""Core shared data models and schemas.

This module defines the canonical Pydantic models used across the engine for
ledger references, pool descriptions, actions, and scenario snapshots. The
models mirror the JSON Schemas under ``action_engine/core/schemas`` which are
treated as the source of truth for the wire shape.
"""

# pylint: disable=line-too-long,missing-class-docstring,missing-function-docstring
from __future__ import annotations

from typing import Annotated, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Status / type vocabularies
# ---------------------------------------------------------------------------


ActionType = Literal[
    "Transfer",
    "Swap",
    "AddLiquidity",
    "RemoveLiquidity",
    "SwapExactInputForOutput",
    "SwapInputForExactOutput",
    "ClaimProtocolLiquidity",
]

ActionStatus = Literal[
    "Pending",
    "Submitted",
    "Confirmed",
    "Stored",
    "Failed",
    "Aborted",
]

ActionGroupStatus = Literal[
    "Pending",
    "Running",
    "Completed",
    "Aborted",
]

ACTION_TYPES: tuple[str, ...] = get_args(ActionType)
ACTION_STATUSES: tuple[str, ...] = get_args(ActionStatus)
ACTION_GROUP_STATUSES: tuple[str, ...] = get_args(ActionGroupStatus)

HashType = Literal["type", "data", "data1", "data2"]
DepType = Literal["code", "dep_group"]


# ---------------------------------------------------------------------------
# Ledger models
# ---------------------------------------------------------------------------


class Script(BaseModel):
    """On-chain type descriptor of an asset."""

    code_hash: str = Field(..., pattern=r"^0x[0-9a-fA-F]{64}$")
    hash_type: HashType
    args: str = Field(..., pattern=r"^0x([0-9a-fA-F]{2})*$")

    model_config = ConfigDict(extra="forbid", frozen=True)


class OutPoint(BaseModel):
    tx_hash: str = Field(..., pattern=r"^0x[0-9a-fA-F]{64}$")
    index: int = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)


class CellDep(BaseModel):
    out_point: OutPoint
    dep_type: DepType = "code"

    model_config = ConfigDict(extra="forbid", frozen=True)


class Cell(BaseModel):
    """A live cell returned by the ledger indexer."""

    out_point: OutPoint
    capacity: int | None = Field(default=None, ge=0)
    type_script: Script | None = None
    data: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class CellSearchKey(BaseModel):
    """Indexer search key used to locate auxiliary dependency cells."""

    script: Script
    script_type: Literal["lock", "type"] = "type"
    script_search_mode: Literal["prefix", "exact"] = "exact"

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Pool models
# ---------------------------------------------------------------------------


class AssetInfo(BaseModel):
    symbol: str = Field(..., min_length=1)
    decimals: int = Field(default=8, ge=0, le=38)
    type_script: Script | None = None
    # Pool reserve in base units; only needed by reference pricers.
    reserve: str | None = Field(default=None, pattern=r"^[0-9]+$")

    model_config = ConfigDict(extra="forbid", frozen=True)


class PoolInfo(BaseModel):
    """Read-only description of a liquidity pool pairing asset_x and asset_y."""

    asset_x: AssetInfo
    asset_y: AssetInfo
    type_hash: str | None = Field(default=None, pattern=r"^0x[0-9a-fA-F]{64}$")
    fee_bps: int = Field(default=30, ge=0, le=10_000)

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Action models (discriminated union)
# ---------------------------------------------------------------------------


class Target(BaseModel):
    """
    One leg of an action.

    Notes:
    - asset_x_symbol is the input asset, asset_y_symbol the output asset.
    - amount is expressed in base units of the input asset.
    """

    asset_x_symbol: str = Field(..., min_length=1)
    asset_y_symbol: str = Field(..., min_length=1)
    amount: str = Field(..., pattern=r"^[0-9]+$")

    model_config = ConfigDict(extra="forbid", frozen=True)


class ActionBase(BaseModel):
    """
    Base fields shared by all actions.

    Notes:
    - action_status is mutated by the engine only, from handler return values.
    - only targets[0] drives execution; multi-leg actions are not executed.
    """

    action_id: str = Field(..., min_length=1)
    action_status: ActionStatus = "Pending"
    actor_address: str = Field(..., min_length=1)
    targets: list[Target] = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    @property
    def driving_target(self) -> Target:
        return self.targets[0]


class TransferAction(ActionBase):
    action_type: Literal["Transfer"] = "Transfer"


class SwapAction(ActionBase):
    action_type: Literal["Swap"] = "Swap"


class AddLiquidityAction(ActionBase):
    action_type: Literal["AddLiquidity"] = "AddLiquidity"


class RemoveLiquidityAction(ActionBase):
    action_type: Literal["RemoveLiquidity"] = "RemoveLiquidity"


class SwapExactInputForOutputAction(ActionBase):
    action_type: Literal["SwapExactInputForOutput"] = "SwapExactInputForOutput"


class SwapInputForExactOutputAction(ActionBase):
    action_type: Literal["SwapInputForExactOutput"] = "SwapInputForExactOutput"


class ClaimProtocolLiquidityAction(ActionBase):
    action_type: Literal["ClaimProtocolLiquidity"] = "ClaimProtocolLiquidity"


# Discriminated union: Pydantic selects the concrete action model from action_type.
Action = Annotated[
    TransferAction
    | SwapAction
    | AddLiquidityAction
    | RemoveLiquidityAction
    | SwapExactInputForOutputAction
    | SwapInputForExactOutputAction
    | ClaimProtocolLiquidityAction,
    Field(discriminator="action_type"),
]


# ---------------------------------------------------------------------------
# Scenario snapshot
# ---------------------------------------------------------------------------


class ScenarioSnapshot(BaseModel):
    """Working set of one batch run. Mutated in place as actions progress."""

    scenario_id: str = Field(..., min_length=1)
    actions: list[Action]
    pool_infos: list[PoolInfo] = Field(default_factory=list)
    action_group_status: ActionGroupStatus = "Pending"

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    @classmethod
    def from_json_obj(cls, obj: dict) -> ScenarioSnapshot:
        """Create a snapshot from a JSON-compatible object."""
        return cls.model_validate(obj)
