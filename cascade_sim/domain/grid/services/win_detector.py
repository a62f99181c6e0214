# cascade_sim/domain/grid/services/win_detector.py
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Any, Tuple

from ..entities.cell import Cell
from ..entities.grid import Grid
from ...symbols.entities.symbol import Symbol, SymbolCatalog


@dataclass(frozen=True)
class WinInfo:
    """One winning cluster. ``payout`` is filled in once the bet is known."""
    symbol: Symbol
    cells: Tuple[Cell, ...]
    count: int
    payout: float = 0.0

    def with_payout(self, payout: float) -> "WinInfo":
        return replace(self, payout=payout)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol.to_dict(),
            "cells": [cell.to_dict() for cell in self.cells],
            "count": self.count,
            "payout": self.payout,
        }


class WinDetector:
    """
    Cluster-pay win detection: any ``min_win_size`` or more cells carrying
    the same symbol anywhere on the grid form a win. Adjacency and paylines
    play no part. Scatters never win.
    """
    def __init__(self, catalog: SymbolCatalog, min_win_size: int = 8):
        if min_win_size < 1:
            raise ValueError(f"Minimum win size must be positive, got {min_win_size}")

        self.logger = logging.getLogger("domain.grid.win_detector")
        self.catalog = catalog
        self.min_win_size = min_win_size

    def detect(self, grid: Grid) -> List[WinInfo]:
        """
        Scan the grid and group cells by symbol id.

        Returns:
            Wins in the order their symbol was first seen (row-major scan)
        """
        groups: Dict[str, List[Cell]] = {}

        for cell in grid.iter_cells():
            if cell.symbol.is_scatter or not cell.symbol.id:
                continue
            # Copies keep the win independent of later grid transformations
            groups.setdefault(cell.symbol.id, []).append(cell.copy())

        wins = []
        for symbol_id, cells in groups.items():
            if len(cells) < self.min_win_size:
                continue

            symbol = self.catalog.get(symbol_id)
            if symbol is None:
                self.logger.warning(f"Win detection: unknown symbol id '{symbol_id}', skipping cluster")
                continue

            wins.append(WinInfo(symbol=symbol.copy(), cells=tuple(cells), count=len(cells)))

        if wins:
            self.logger.debug(
                "Detected wins: " + ", ".join(f"{w.symbol.id}x{w.count}" for w in wins)
            )
        return wins
