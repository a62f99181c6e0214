# cascade_sim/domain/game/entities/game_state.py
from dataclasses import dataclass
from typing import Dict, Any, Tuple

from ...bonus.entities.ante_mode import AnteMode
from ...cascade.services.cascade_resolver import CascadeStep
from ...grid.entities.grid import Grid
from ...grid.services.win_detector import WinInfo
from ...orders.entities.order import Order


@dataclass(frozen=True)
class GameState:
    """
    Point-in-time snapshot of an engine. Built fresh on every read and shares
    no mutable structure with the engine.
    """
    grid: Grid
    balance: float
    current_bet: float
    total_win: float
    is_spinning: bool
    is_free_spins: bool
    free_spins_remaining: int
    orders: Tuple[Order, ...]
    ante_mode: AnteMode
    cascade_steps: Tuple[CascadeStep, ...]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serialisable form for presentation layers."""
        return {
            "grid": self.grid.to_symbol_ids(),
            "balance": self.balance,
            "current_bet": self.current_bet,
            "total_win": self.total_win,
            "is_spinning": self.is_spinning,
            "is_free_spins": self.is_free_spins,
            "free_spins_remaining": self.free_spins_remaining,
            "orders": [order.to_dict() for order in self.orders],
            "ante_mode": self.ante_mode.value,
            "cascade_steps": [step.to_dict() for step in self.cascade_steps],
        }


@dataclass(frozen=True)
class SpinOutcome:
    """
    Result returned by ``GameEngine.spin``.

    ``total_win`` is what the cascades paid. Order tips and the super bonus
    are reported separately; ``GameState.total_win`` holds the sum of all three.
    """
    wins: Tuple[WinInfo, ...] = ()
    cascades: int = 0
    total_win: float = 0.0
    bet_cost: float = 0.0
    order_tips: float = 0.0
    super_bonus: float = 0.0
    free_spins_triggered: bool = False
    free_spins_ended: bool = False
    was_free_spin: bool = False

    @property
    def total_credited(self) -> float:
        return self.total_win + self.order_tips + self.super_bonus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wins": [win.to_dict() for win in self.wins],
            "cascades": self.cascades,
            "total_win": self.total_win,
            "bet_cost": self.bet_cost,
            "order_tips": self.order_tips,
            "super_bonus": self.super_bonus,
            "free_spins_triggered": self.free_spins_triggered,
            "free_spins_ended": self.free_spins_ended,
            "was_free_spin": self.was_free_spin,
        }
