"""Swap pricing protocol.

The pricing SDK owns the pool math. The engine only asks it for an
exact-input quote on an already matched pool.
"""

from __future__ import annotations

from typing import Protocol

from action_engine.core.domain.pool_model import PoolModel, SwapQuote


class SwapPricer(Protocol):
    """Pricing boundary. Implementations must be safe for concurrent use."""

    def quote_exact_input(self, pool: PoolModel, input_amount: str) -> SwapQuote:
        """Return the output amount and price impact for input_amount (decimal units)."""
