# cascade_sim/domain/events/game_events.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Dict, Any


class GameEventType(Enum):
    """Event types emitted by the spin engine for presentation layers."""
    SPIN_STARTED = auto()
    SPIN_COMPLETED = auto()
    SPIN_REJECTED = auto()           # insufficient balance for a spin
    PURCHASE_REJECTED = auto()       # insufficient balance for a package
    CASCADE_STEP = auto()
    FREE_SPINS_TRIGGERED = auto()    # natural scatter trigger
    FREE_SPINS_PURCHASED = auto()
    FREE_SPINS_ENDED = auto()
    ORDER_CREATED = auto()
    ORDER_COMPLETED = auto()
    SUPER_BONUS_AWARDED = auto()
    BIG_WIN = auto()


@dataclass
class GameEvent:
    """Something that happened inside one game engine. ``data`` is JSON-friendly."""
    type: GameEventType
    game_id: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.name,
            "game_id": self.game_id,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }

    def __str__(self) -> str:
        return f"GameEvent(type={self.type.name}, game={self.game_id})"
