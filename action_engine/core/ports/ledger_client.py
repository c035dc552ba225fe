"""Ledger client protocol.

This module defines the ledger-facing query boundary used by the dependency
resolver. Concrete implementations adapt a specific RPC / indexer client to
this protocol and must be safe for concurrent use by several batches.
"""

from __future__ import annotations

from typing import AsyncIterator, Protocol

from action_engine.core.domain.types import Cell, CellSearchKey


class LedgerClient(Protocol):
    """Ledger query boundary.

    The engine must not depend on RPC-specific APIs.
    """

    def find_cells(self, search_key: CellSearchKey) -> AsyncIterator[Cell]:
        """Yield live cells matching the search key, in indexer order."""


async def find_matching_cell(
    ledger: LedgerClient,
    search_key: CellSearchKey,
) -> Cell | None:
    """Return the first live cell matching the search key, or None."""
    cells = ledger.find_cells(search_key)
    try:
        async for cell in cells:
            return cell
        return None
    finally:
        aclose = getattr(cells, "aclose", None)
        if callable(aclose):
            await aclose()
