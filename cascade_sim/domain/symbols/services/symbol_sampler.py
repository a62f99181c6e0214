# cascade_sim/domain/symbols/services/symbol_sampler.py
import logging
from typing import Tuple

from ..entities.symbol import Symbol, SymbolCatalog


class WeightedSymbolSampler:
    """
    Draws symbols from the catalog with probability proportional to weight.

    Candidate sets and their total weights are computed once, since the
    catalog never changes.
    """
    def __init__(self, catalog: SymbolCatalog, rng):
        """
        Args:
            catalog: Symbol catalog to draw from
            rng: RNG strategy providing ``get_random_fraction``
        """
        self.logger = logging.getLogger("domain.symbols.sampler")
        self.catalog = catalog
        self.rng = rng

        self._all_symbols = tuple(catalog)
        self._all_weight = sum(s.weight for s in self._all_symbols)
        self._food_symbols = catalog.food_symbols
        self._food_weight = sum(s.weight for s in self._food_symbols)

    def sample(self, exclude_scatter: bool = True) -> Symbol:
        """
        Draw one symbol.

        Args:
            exclude_scatter: Restrict the draw to non-scatter symbols

        Returns:
            A fresh copy of the chosen catalog symbol
        """
        if exclude_scatter:
            return self._draw(self._food_symbols, self._food_weight)
        return self._draw(self._all_symbols, self._all_weight)

    def _draw(self, candidates: Tuple[Symbol, ...], total_weight: float) -> Symbol:
        roll = self.rng.get_random_fraction() * total_weight
        accumulated = 0.0

        for symbol in candidates:
            accumulated += symbol.weight
            if roll < accumulated:
                return symbol.copy()

        # Rounding can leave roll >= the accumulated sum
        self.logger.debug(f"Weighted draw fell through (roll={roll}, total={total_weight})")
        return candidates[-1].copy()
