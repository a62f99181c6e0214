# cascade_sim/infrastructure/rng/rng_provider.py
import logging
from typing import Optional, Dict, Any

from .strategies.mersenne_rng import MersenneTwisterRNG
from .strategies.numpy_rng import NumpyRNG
from .strategies.rng_strategy import RNGStrategy


STRATEGIES = {
    "mersenne": (MersenneTwisterRNG, "Mersenne Twister (Python's default random generator)"),
    "numpy": (NumpyRNG, "NumPy RandomState (faster for long autoplay runs)"),
}


class RNGProvider:
    """
    Builds the random number generator a game engine draws from.

    Every engine gets its own generator so two games never consume each
    other's draws; a seeded game always replays the same spins.
    """
    def __init__(self, default_strategy: str = "mersenne"):
        self.logger = logging.getLogger("infrastructure.rng.provider")
        if default_strategy.lower() not in STRATEGIES:
            raise ValueError(f"Unknown RNG strategy: {default_strategy}")
        self.default_strategy = default_strategy.lower()

    def create(self, strategy_name: Optional[str] = None, seed: Optional[int] = None) -> RNGStrategy:
        """
        Create a fresh generator.

        Raises:
            ValueError: If the strategy name is unknown
        """
        name = (strategy_name or self.default_strategy).lower()
        if name not in STRATEGIES:
            self.logger.error(f"Unknown RNG strategy: {name}")
            raise ValueError(f"Unknown RNG strategy: {name}")

        strategy_cls, _ = STRATEGIES[name]
        self.logger.debug(f"Creating {strategy_cls.__name__} with seed: {seed}")
        return strategy_cls(seed)

    def create_for_game(self, rng_config: Optional[Dict[str, Any]],
                        strategy_override: Optional[str] = None,
                        seed_override: Optional[int] = None) -> RNGStrategy:
        """
        Create the generator for one game from the ``rng`` section of its
        configuration. Explicit overrides (command line) win over the file.

        Example section:
            {"strategy": "numpy", "seed": 12345}
        """
        rng_config = rng_config or {}
        strategy_name = strategy_override or rng_config.get("strategy")
        seed = seed_override if seed_override is not None else rng_config.get("seed")

        rng = self.create(strategy_name, seed)
        if seed is None:
            self.logger.info(f"Unseeded {type(rng).__name__}: spins will not be reproducible")
        return rng

    @staticmethod
    def available_strategies() -> Dict[str, str]:
        return {name: description for name, (_, description) in STRATEGIES.items()}
