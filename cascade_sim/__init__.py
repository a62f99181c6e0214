# cascade_sim/__init__.py
"""
Cascade slot simulator

Cluster-pay cascading slot engine with:
- Weighted symbol sampling and cluster win detection
- Cascade (remove, drop, refill) resolution
- Orders, free spins, ante modes and bonus buys
"""

from .domain.game.entities.game_engine import GameEngine
from .domain.game.entities.game_state import GameState, SpinOutcome
from .domain.game.factories.engine_factory import EngineFactory
from .domain.game.errors import (
    GameError,
    InsufficientBalanceError,
    CascadeLimitExceededError,
    FreeSpinsActiveError,
)

__all__ = [
    'GameEngine',
    'GameState',
    'SpinOutcome',
    'EngineFactory',
    'GameError',
    'InsufficientBalanceError',
    'CascadeLimitExceededError',
    'FreeSpinsActiveError',
]

__version__ = "1.0.0"
