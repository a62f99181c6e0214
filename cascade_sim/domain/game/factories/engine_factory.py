# cascade_sim/domain/game/factories/engine_factory.py
import logging
import os
from typing import Dict, Any, Optional

from ..entities.game_engine import GameEngine


PACKAGE_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..', '..'))
DEFAULT_GAME_CONFIG = os.path.join(PACKAGE_ROOT, 'application', 'config', 'games', 'food_slots.yaml')
GAME_CONFIG_SCHEMA = os.path.join(PACKAGE_ROOT, 'infrastructure', 'config', 'schemas', 'game_config.schema.json')


class EngineFactory:
    """
    Factory for creating GameEngine instances from configuration.
    """
    def __init__(self, rng_provider=None, event_dispatcher=None):
        """
        Args:
            rng_provider: RNG provider used to build each engine's RNG strategy
            event_dispatcher: Optional dispatcher handed to every engine
        """
        self.logger = logging.getLogger("domain.game.factory")
        self.rng_provider = rng_provider
        self.event_dispatcher = event_dispatcher

    def create_engine(self, game_id: str, config: Dict[str, Any],
                      rng_strategy_name: Optional[str] = None,
                      seed: Optional[int] = None) -> GameEngine:
        """
        Create a new engine.

        The RNG strategy and seed default to the ``rng`` section of the
        configuration; explicit arguments override it.

        Raises:
            ValueError: If no RNG provider is available
        """
        if self.rng_provider is None:
            self.logger.error("No RNG provider available, cannot create engine")
            raise ValueError("EngineFactory requires an RNG provider")

        rng = self.rng_provider.create_for_game(config.get("rng"), rng_strategy_name, seed)
        self.logger.info(f"Creating game engine {game_id} (rng={type(rng).__name__})")
        return GameEngine(game_id, config, rng, self.event_dispatcher)

    def create_engine_from_file(self, config_loader, file_path: str = DEFAULT_GAME_CONFIG,
                                game_id: Optional[str] = None,
                                rng_strategy_name: Optional[str] = None,
                                seed: Optional[int] = None) -> GameEngine:
        """
        Load, validate and build an engine from a YAML game file.

        The game id comes from the argument, then ``game_id`` in the file,
        then the file name.
        """
        self.logger.info(f"Creating engine from file: {file_path}")
        config = config_loader.load_file(file_path, GAME_CONFIG_SCHEMA)

        if game_id is None:
            game_id = config.get("game_id") or os.path.splitext(os.path.basename(file_path))[0]

        return self.create_engine(game_id, config, rng_strategy_name, seed)
