# tests/support.py
import copy
import itertools
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cascade_sim.domain.grid.entities.grid import Grid
from cascade_sim.domain.symbols.entities.symbol import SymbolCatalog


FOOD_IDS = ["burger", "drink", "pie", "pizza", "taco", "fries", "burrito", "hotdog", "chicken", "wrap"]

# One draw per food symbol, in catalog order, when every weight is equal
FOOD_CYCLE = [(i + 0.5) / len(FOOD_IDS) for i in range(len(FOOD_IDS))]


class ScriptedRNG:
    """
    Deterministic stand-in for an RNG strategy.

    Fractions cycle through the given sequence; integers and choice indexes
    are consumed from queues and fall back to the lowest value / first item.
    """
    def __init__(self, fractions: Optional[Sequence[float]] = None,
                 ints: Optional[Sequence[int]] = None,
                 choices: Optional[Sequence[int]] = None):
        self._fractions = itertools.cycle(fractions) if fractions else None
        self.ints = list(ints or [])
        self.choices = list(choices or [])

    def get_random_fraction(self) -> float:
        return next(self._fractions) if self._fractions is not None else 0.0

    def get_random_int(self, min_val: int, max_val: int) -> int:
        if self.ints:
            return max(min_val, min(max_val, self.ints.pop(0)))
        return min_val

    def choice(self, items: List[Any]) -> Any:
        if self.choices:
            return items[self.choices.pop(0) % len(items)]
        return items[0]

    def seed(self, seed_value: int) -> None:
        pass


BASE_CONFIG: Dict[str, Any] = {
    "game_id": "test_game",
    "initial_balance": 1000,
    "min_win_symbols": 8,
    "max_cascades": 50,
    "grid": {"rows": 5, "columns": 6},
    "symbols": [
        {"id": "burger", "name": "Burger", "weight": 1, "payouts": {"8-9": 10, "10-11": 25, "12+": 50}},
        {"id": "drink", "name": "Drink", "weight": 1, "payouts": {"8-9": 2, "10-11": 5, "12+": 10}},
        {"id": "pie", "name": "Pie", "weight": 1, "payouts": {"8-9": 4, "10-11": 8, "12+": 15}},
        {"id": "pizza", "name": "Pizza", "weight": 1, "payouts": {"8-9": 8, "10-11": 20, "12+": 40}},
        {"id": "taco", "name": "Taco", "weight": 1, "payouts": {"8-9": 5, "10-11": 10, "12+": 20}},
        {"id": "fries", "name": "Fries", "weight": 1, "payouts": {"8-9": 2, "10-11": 4, "12+": 8}},
        {"id": "burrito", "name": "Burrito", "weight": 1, "payouts": {"8-9": 5, "10-11": 10, "12+": 20}},
        {"id": "hotdog", "name": "Hotdog", "weight": 1, "payouts": {"8-9": 3, "10-11": 6, "12+": 12}},
        {"id": "chicken", "name": "Chicken", "weight": 1, "payouts": {"8-9": 6, "10-11": 15, "12+": 30}},
        {"id": "wrap", "name": "Wrap", "weight": 1, "payouts": {"12+": 12}},
        {"id": "order", "name": "Order Ticket", "weight": 1, "is_scatter": True},
    ],
    "betting": {"min_bet": 1, "max_bet": 100, "default_bet": 10},
    "ante_mode": {
        "low": {"bet_multiplier": 1.25, "order_chance": 0.5, "scatter_boost": 1.5},
        "high": {"bet_multiplier": 5, "order_chance": 0.2, "scatter_boost": 2},
    },
    "orders": {
        "normal_mode": {"chance": 0.0, "min_quantity": 8, "max_quantity": 16, "tip_multipliers": [5]},
        "free_spins_mode": {
            "min_orders": 3, "max_orders": 3, "min_quantity": 12, "max_quantity": 30,
            "super_bonus_multiplier": 100,
        },
    },
    "free_spins": {
        "scatter_trigger": 3,
        "spins_awarded": 10,
        "charge_bet": True,
        "packages": {
            "cheap": {"cost": 50, "spins": 1, "max_orders": 2, "tip_multipliers": [2, 3]},
            "standard": {"cost": 100, "spins": 10, "max_orders": 6, "tip_multipliers": [5, 10]},
        },
    },
}


def make_config(**overrides) -> Dict[str, Any]:
    """Deep copy of BASE_CONFIG with top-level sections replaced or merged."""
    config = copy.deepcopy(BASE_CONFIG)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key] = _merge(config[key], value)
        else:
            config[key] = value
    return config


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def make_catalog() -> SymbolCatalog:
    return SymbolCatalog.from_config(BASE_CONFIG["symbols"])


def grid_from_ids(catalog: SymbolCatalog, layout: Sequence[Sequence[Optional[str]]]) -> Grid:
    return Grid.from_symbols([
        [catalog.get(symbol_id) if symbol_id is not None else None for symbol_id in row]
        for row in layout
    ])


def cycle_layout(rows: int = 5, cols: int = 6, ids: Sequence[str] = FOOD_IDS) -> List[List[str]]:
    """Row-major layout cycling through ``ids``: at most ceil(n / len(ids)) of each."""
    flat = [ids[i % len(ids)] for i in range(rows * cols)]
    return [flat[r * cols:(r + 1) * cols] for r in range(rows)]


def layout_with(counts: Dict[str, int], rows: int = 5, cols: int = 6,
                filler: Sequence[str] = FOOD_IDS) -> List[List[str]]:
    """
    Layout holding exactly ``counts`` of the named symbols, padded by cycling
    through the remaining filler symbols.
    """
    flat = [symbol_id for symbol_id, count in counts.items() for _ in range(count)]
    pad = [s for s in filler if s not in counts]
    i = 0
    while len(flat) < rows * cols:
        flat.append(pad[i % len(pad)])
        i += 1
    return [flat[r * cols:(r + 1) * cols] for r in range(rows)]
