# cascade_sim/infrastructure/rng/strategies/mersenne_rng.py
import random
from typing import List, Optional, Any


class MersenneTwisterRNG:
    """
    Random number generator using the Mersenne Twister algorithm (Python's default).
    """
    def __init__(self, seed_value: Optional[int] = None):
        """
        Initialize the RNG with an optional seed.

        Args:
            seed_value: Optional seed value for reproducible games
        """
        # Dedicated instance so engines never share the module-level state
        self._random = random.Random()

        if seed_value is not None:
            self.seed(seed_value)

    def get_random_int(self, min_val: int, max_val: int) -> int:
        return self._random.randint(min_val, max_val)

    def get_random_fraction(self) -> float:
        return self._random.random()

    def seed(self, seed_value: int) -> None:
        self._random.seed(seed_value)

    def choice(self, items: List[Any]) -> Any:
        """
        Randomly select an item from a list.

        Raises:
            IndexError: If items list is empty
        """
        if not items:
            raise IndexError("Cannot choose from an empty list")
        return self._random.choice(items)
