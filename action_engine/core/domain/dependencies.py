"""Per-batch dependency cache.

Maps a token symbol to the on-chain descriptor its transactions need. A cache
instance lives exactly as long as one batch run and is never shared between
batches, so stale out points from an earlier run cannot leak into a new one.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator, Union

from action_engine.core.domain.types import CellDep, Script


@dataclass(frozen=True, slots=True)
class NativeAsset:
    """The chain's native asset: no type script or cell dep needed."""


@dataclass(frozen=True, slots=True)
class ResolvedDependency:
    """Type script of the asset plus the extra cell dep its script requires."""

    type_script: Script | None
    cell_dep: CellDep


@dataclass(frozen=True, slots=True)
class UnsupportedAsset:
    """Recognized asset with no known dependency strategy."""

    reason: str


DependencyEntry = Union[NativeAsset, ResolvedDependency, UnsupportedAsset]


@dataclass(slots=True)
class DependencyCache:
    """symbol -> DependencyEntry. Absent means not resolved yet."""

    _entries: dict[str, DependencyEntry] = field(default_factory=dict)
    # Number of ledger lookups performed per symbol.
    lookups: Counter[str] = field(default_factory=Counter)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, symbol: str) -> DependencyEntry | None:
        return self._entries.get(symbol)

    def put(self, symbol: str, entry: DependencyEntry) -> None:
        if symbol in self._entries:
            raise KeyError(f"dependency for {symbol} already resolved")
        self._entries[symbol] = entry

    def is_unsupported(self, symbol: str) -> bool:
        return isinstance(self._entries.get(symbol), UnsupportedAsset)

    def cell_deps(self) -> list[CellDep]:
        """Return every resolved cell dep, in resolution order."""
        return [
            entry.cell_dep
            for entry in self._entries.values()
            if isinstance(entry, ResolvedDependency)
        ]
