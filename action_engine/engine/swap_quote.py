"""Swap quote building and a reference constant-product pricer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, getcontext, localcontext
from typing import TYPE_CHECKING

from action_engine.core.domain.errors import PoolNotFoundError
from action_engine.core.domain.pool_model import PoolModel, SwapQuote

if TYPE_CHECKING:
    from action_engine.core.config.execute_config import ExecuteConfig
    from action_engine.core.domain.types import PoolInfo, ScenarioSnapshot, SwapAction
    from action_engine.core.ports.swap_pricer import SwapPricer

LOGGER = logging.getLogger(__name__)

_BPS = Decimal(10_000)


def _precision_for(*numbers: str) -> int:
    """Context precision that keeps the given digit strings exact."""
    return getcontext().prec + max(len(n) for n in numbers)


def to_decimal_units(amount: str, scale: Decimal) -> str:
    """Convert a base-unit integer string into a normalized decimal string.

    Example: ("100000000", 10**8) -> "1", ("150000000", 10**8) -> "1.5".
    Exact for any number of digits; scale must be a power of ten.
    """
    with localcontext(prec=_precision_for(amount)):
        value = (Decimal(amount) / scale).normalize()
    return format(value, "f")


def find_pool(pool_infos: list[PoolInfo], asset_x_symbol: str, asset_y_symbol: str) -> PoolInfo:
    """Return the pool whose (asset_x, asset_y) symbols match exactly.

    A pool listed in the reverse direction is not matched.
    """
    for pool_info in pool_infos:
        if (
            pool_info.asset_x.symbol == asset_x_symbol
            and pool_info.asset_y.symbol == asset_y_symbol
        ):
            return pool_info
    raise PoolNotFoundError(asset_x_symbol, asset_y_symbol)


@dataclass(slots=True)
class SwapQuoteResult:
    pool: PoolModel
    quote: SwapQuote


class SwapQuoteBuilder:
    """Prepares the pool model handed to the swap executor."""

    def __init__(self, *, pricer: SwapPricer, config: ExecuteConfig) -> None:
        self._pricer = pricer
        self._config = config

    def build_quote(self, snapshot: ScenarioSnapshot, action: SwapAction) -> SwapQuoteResult:
        target = action.driving_target
        pool_info = find_pool(snapshot.pool_infos, target.asset_x_symbol, target.asset_y_symbol)

        pool = PoolModel.for_actor(pool_info, action.actor_address)
        input_value = to_decimal_units(target.amount, self._config.base_unit_scale)
        quote = self._pricer.quote_exact_input(pool, input_value)

        pool.input_leg.amount = input_value
        pool.output_leg.amount = quote.output_amount

        LOGGER.info(
            "Swap quote",
            extra={
                "action_id": action.action_id,
                "pair": f"{target.asset_x_symbol}/{target.asset_y_symbol}",
                "input": input_value,
                "output": quote.output_amount,
                "price_impact": quote.price_impact,
            },
        )
        return SwapQuoteResult(pool=pool, quote=quote)


class ConstantProductPricer:
    """Reference x*y=k pricer for pools whose reserves are known.

    Reserves are read from the pool's asset infos in base units. The fee
    (pool_info.fee_bps) is taken from the input before the curve is applied.
    Price impact is the relative drop of the execution price against the
    spot price, as a fraction.
    """

    def quote_exact_input(self, pool: PoolModel, input_amount: str) -> SwapQuote:
        asset_in = pool.input_leg.asset
        asset_out = pool.output_leg.asset
        if asset_in.reserve is None or asset_out.reserve is None:
            raise ValueError(f"pool {asset_in.symbol}/{asset_out.symbol} has no reserves")

        # u128 reserves exceed the default 28 significant digits.
        with localcontext(prec=_precision_for(asset_in.reserve, asset_out.reserve, input_amount)):
            reserve_in = Decimal(asset_in.reserve).scaleb(-asset_in.decimals)
            reserve_out = Decimal(asset_out.reserve).scaleb(-asset_out.decimals)
            amount_in = Decimal(input_amount)
            if amount_in <= 0:
                raise ValueError(f"input amount must be positive: {input_amount}")
            if reserve_in <= 0 or reserve_out <= 0:
                raise ValueError("reserves must be positive")

            net_in = amount_in * (_BPS - pool.pool_info.fee_bps) / _BPS
            amount_out = reserve_out * net_in / (reserve_in + net_in)
            amount_out = amount_out.quantize(
                Decimal(1).scaleb(-asset_out.decimals), rounding=ROUND_DOWN
            )

            spot_price = reserve_out / reserve_in
            exec_price = amount_out / amount_in
            impact = max(Decimal(0), (spot_price - exec_price) / spot_price)

            return SwapQuote(
                output_amount=format(amount_out.normalize(), "f"),
                price_impact=format(impact.quantize(Decimal("0.0001")), "f"),
            )
