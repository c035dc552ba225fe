"""Runtime pool model handed to the swap executor.

These models are intentionally NOT part of the JSON-schema "source of truth".
They hold the per-swap view of a pool, scoped to the acting address, that the
quote builder fills in before execution.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from action_engine.core.domain.types import AssetInfo, PoolInfo


@dataclass(slots=True)
class TokenLeg:
    """One side of a swap: the asset and the decimal amount moved."""

    asset: AssetInfo
    amount: str = "0"

    @property
    def symbol(self) -> str:
        return self.asset.symbol


@dataclass(slots=True)
class PoolModel:
    """Pool pairing tokens[0] (input) with tokens[1] (output) for one actor."""

    pool_info: PoolInfo
    actor_address: str
    tokens: list[TokenLeg] = field(default_factory=list)

    @classmethod
    def for_actor(cls, pool_info: PoolInfo, actor_address: str) -> PoolModel:
        return cls(
            pool_info=pool_info,
            actor_address=actor_address,
            tokens=[TokenLeg(pool_info.asset_x), TokenLeg(pool_info.asset_y)],
        )

    @property
    def input_leg(self) -> TokenLeg:
        return self.tokens[0]

    @property
    def output_leg(self) -> TokenLeg:
        return self.tokens[1]


@dataclass(frozen=True, slots=True)
class SwapQuote:
    """Quote for an exact-input swap, amounts in decimal units."""

    output_amount: str
    price_impact: str
