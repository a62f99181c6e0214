# cascade_sim/infrastructure/rng/strategies/numpy_rng.py
import numpy as np
from typing import List, Optional, Any


class NumpyRNG:
    """
    Random number generator backed by NumPy's RandomState, for long autoplay
    runs.
    """
    def __init__(self, seed_value: Optional[int] = None):
        self.seed(seed_value)

    def get_random_int(self, min_val: int, max_val: int) -> int:
        # NumPy's randint is [min, max) so we add 1 to max_val
        return int(self.rng.randint(min_val, max_val + 1))

    def get_random_fraction(self) -> float:
        return float(self.rng.random_sample())

    def seed(self, seed_value: Optional[int]) -> None:
        self.rng = np.random.RandomState(seed_value)

    def choice(self, items: List[Any]) -> Any:
        """
        Randomly select an item from a list.

        Raises:
            IndexError: If items list is empty
        """
        if not items:
            raise IndexError("Cannot choose from an empty list")

        # Index selection keeps symbols and tips out of numpy arrays
        idx = self.rng.randint(0, len(items))
        return items[idx]
