# cascade_sim/domain/bonus/entities/ante_mode.py
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Union


class AnteMode(Enum):
    NONE = "none"
    LOW = "low"
    HIGH = "high"

    @classmethod
    def parse(cls, value: Union["AnteMode", str]) -> "AnteMode":
        """Accept an AnteMode or its string value. Raises ValueError otherwise."""
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


@dataclass(frozen=True)
class AnteModifier:
    """Effective spin cost and odds for one ante mode."""
    bet_multiplier: float
    order_chance: float
    scatter_threshold: int


@dataclass(frozen=True)
class AnteLevel:
    bet_multiplier: float
    order_chance: float
    scatter_boost: float


@dataclass(frozen=True)
class AnteRules:
    """Configured boosts for the low and high ante modes."""
    low: AnteLevel = AnteLevel(bet_multiplier=1.25, order_chance=0.5, scatter_boost=1.5)
    high: AnteLevel = AnteLevel(bet_multiplier=5.0, order_chance=1.0, scatter_boost=2.0)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "AnteRules":
        defaults = cls()

        def level(section: Dict[str, Any], default: AnteLevel) -> AnteLevel:
            section = section or {}
            parsed = AnteLevel(
                bet_multiplier=float(section.get("bet_multiplier", default.bet_multiplier)),
                order_chance=float(section.get("order_chance", default.order_chance)),
                scatter_boost=float(section.get("scatter_boost", default.scatter_boost)),
            )
            if parsed.bet_multiplier <= 0 or parsed.scatter_boost <= 0:
                raise ValueError(f"Ante multipliers and boosts must be positive: {section}")
            return parsed

        return cls(
            low=level(config.get("low"), defaults.low),
            high=level(config.get("high"), defaults.high),
        )

    def modifier(self, mode: AnteMode, base_order_chance: float, base_scatter_threshold: int) -> AnteModifier:
        if mode is AnteMode.LOW:
            return AnteModifier(
                bet_multiplier=self.low.bet_multiplier,
                order_chance=self.low.order_chance,
                scatter_threshold=_boosted_threshold(base_scatter_threshold, self.low.scatter_boost),
            )
        if mode is AnteMode.HIGH:
            # High ante always brings an order, whatever the file says
            return AnteModifier(
                bet_multiplier=self.high.bet_multiplier,
                order_chance=1.0,
                scatter_threshold=_boosted_threshold(base_scatter_threshold, self.high.scatter_boost),
            )
        return AnteModifier(
            bet_multiplier=1.0,
            order_chance=base_order_chance,
            scatter_threshold=base_scatter_threshold,
        )


def _boosted_threshold(base: int, boost: float) -> int:
    return max(1, math.floor(base / boost))
