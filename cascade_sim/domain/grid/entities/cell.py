# cascade_sim/domain/grid/entities/cell.py
import itertools
from dataclasses import dataclass, replace
from typing import Dict, Any

from ...symbols.entities.symbol import Symbol


_cell_ids = itertools.count(1)


def next_cell_id(row: int, col: int) -> str:
    """Unique id for a newly created cell. Moved cells keep their id."""
    return f"cell-{row}-{col}-{next(_cell_ids)}"


@dataclass(frozen=True)
class Cell:
    """A settled grid position holding its own copy of a symbol."""
    symbol: Symbol
    row: int
    col: int
    id: str

    @classmethod
    def create(cls, symbol: Symbol, row: int, col: int) -> "Cell":
        return cls(symbol=symbol, row=row, col=col, id=next_cell_id(row, col))

    def moved_to(self, row: int, col: int) -> "Cell":
        return replace(self, row=row, col=col)

    def copy(self) -> "Cell":
        return replace(self, symbol=self.symbol.copy())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol.to_dict(),
            "row": self.row,
            "col": self.col,
            "id": self.id,
        }
