# cascade_sim/domain/grid/entities/grid.py
from typing import Dict, List, Any, Optional, Iterable, Iterator, Sequence, Tuple

from .cell import Cell
from ...symbols.entities.symbol import Symbol


Row = Tuple[Optional[Cell], ...]


class Grid:
    """
    Fixed-size ``rows x cols`` matrix of cells. A position is ``None`` while
    it is empty between removal and refill.

    Grids are values: every operation returns a new Grid and leaves the
    receiver untouched, so a grid captured for a cascade snapshot can never
    change afterwards.
    """
    def __init__(self, rows: int, cols: int, cells: Sequence[Sequence[Optional[Cell]]]):
        if rows < 1 or cols < 1:
            raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}")
        if len(cells) != rows or any(len(row) != cols for row in cells):
            raise ValueError(f"Cell matrix does not match {rows}x{cols}")

        self.rows = rows
        self.cols = cols
        self._cells: Tuple[Row, ...] = tuple(tuple(row) for row in cells)

    # --- construction -----------------------------------------------------

    @classmethod
    def generate(cls, rows: int, cols: int, sampler, include_scatter: bool = False) -> "Grid":
        """
        Fill every position from the sampler.

        Args:
            rows: Number of rows
            cols: Number of columns
            sampler: Weighted symbol sampler
            include_scatter: Allow scatter symbols (only for the first grid
                of a spin)
        """
        cells = [
            [Cell.create(sampler.sample(exclude_scatter=not include_scatter), row, col)
             for col in range(cols)]
            for row in range(rows)
        ]
        return cls(rows, cols, cells)

    @classmethod
    def from_symbols(cls, layout: Sequence[Sequence[Optional[Symbol]]]) -> "Grid":
        """Build a grid from a row-major layout of symbols (``None`` = empty)."""
        rows = len(layout)
        cols = len(layout[0]) if rows else 0
        cells = [
            [Cell.create(symbol.copy(), row, col) if symbol is not None else None
             for col, symbol in enumerate(row_symbols)]
            for row, row_symbols in enumerate(layout)
        ]
        return cls(rows, cols, cells)

    # --- access -----------------------------------------------------------

    def cell_at(self, row: int, col: int) -> Optional[Cell]:
        return self._cells[row][col]

    def __getitem__(self, row: int) -> Row:
        return self._cells[row]

    def iter_cells(self) -> Iterator[Cell]:
        """Non-empty cells in row-major order."""
        for row in self._cells:
            for cell in row:
                if cell is not None:
                    yield cell

    def column(self, col: int) -> List[Optional[Cell]]:
        return [self._cells[row][col] for row in range(self.rows)]

    def empty_positions(self) -> List[Tuple[int, int]]:
        return [
            (row, col)
            for row in range(self.rows)
            for col in range(self.cols)
            if self._cells[row][col] is None
        ]

    @property
    def is_settled(self) -> bool:
        """True when no position is empty."""
        return all(cell is not None for row in self._cells for cell in row)

    def scatter_count(self) -> int:
        return sum(1 for cell in self.iter_cells() if cell.symbol.is_scatter)

    # --- transformations --------------------------------------------------

    def without_cells(self, cells: Iterable[Cell]) -> "Grid":
        """Return a grid with the given cells' positions emptied."""
        positions = {(cell.row, cell.col) for cell in cells}
        matrix = [list(row) for row in self._cells]
        for row, col in positions:
            if 0 <= row < self.rows and 0 <= col < self.cols:
                matrix[row][col] = None
        return Grid(self.rows, self.cols, matrix)

    def compacted(self) -> "Grid":
        """
        Apply gravity column by column. Survivors keep their relative order
        and identity and settle at the bottom; empty slots collect at the top.
        """
        matrix: List[List[Optional[Cell]]] = [[None] * self.cols for _ in range(self.rows)]

        for col in range(self.cols):
            survivors = [
                self._cells[row][col]
                for row in range(self.rows - 1, -1, -1)
                if self._cells[row][col] is not None
            ]
            write_row = self.rows - 1
            for cell in survivors:
                matrix[write_row][col] = cell.moved_to(write_row, col)
                write_row -= 1

        return Grid(self.rows, self.cols, matrix)

    def refilled(self, sampler) -> "Grid":
        """Fill every empty position with a fresh non-scatter symbol."""
        matrix = [list(row) for row in self._cells]
        for row in range(self.rows):
            for col in range(self.cols):
                if matrix[row][col] is None:
                    matrix[row][col] = Cell.create(sampler.sample(exclude_scatter=True), row, col)
        return Grid(self.rows, self.cols, matrix)

    def clone(self) -> "Grid":
        """Deep copy with new symbol objects in every cell."""
        return Grid(
            self.rows,
            self.cols,
            [[cell.copy() if cell is not None else None for cell in row] for row in self._cells],
        )

    # --- export -----------------------------------------------------------

    def to_symbol_ids(self) -> List[List[Optional[str]]]:
        return [
            [cell.symbol.id if cell is not None else None for cell in row]
            for row in self._cells
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "cells": [
                [cell.to_dict() if cell is not None else None for cell in row]
                for row in self._cells
            ],
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.rows == other.rows and self.cols == other.cols and self._cells == other._cells

    def __hash__(self):
        return hash((self.rows, self.cols, self._cells))

    def __repr__(self) -> str:
        return f"Grid(rows={self.rows}, cols={self.cols}, empty={len(self.empty_positions())})"
