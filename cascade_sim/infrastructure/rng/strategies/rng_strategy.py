# cascade_sim/infrastructure/rng/strategies/rng_strategy.py
from typing import List, Protocol, Any


class RNGStrategy(Protocol):
    """Protocol defining the interface for random number generators."""

    def get_random_int(self, min_val: int, max_val: int) -> int:
        """
        Get a random integer in the range [min_val, max_val].

        Used for order quantities and free-spin order counts.
        """
        ...

    def get_random_fraction(self) -> float:
        """
        Get a random float in the half-open range [0, 1).

        Used for weighted symbol draws and order chance checks.
        """
        ...

    def seed(self, seed_value: int) -> None:
        ...

    def choice(self, items: List[Any]) -> Any:
        """
        Randomly select an item from a non-empty list (order symbol, tip).
        """
        ...
