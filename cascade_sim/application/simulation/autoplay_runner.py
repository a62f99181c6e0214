# cascade_sim/application/simulation/autoplay_runner.py
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

import numpy as np
from tqdm import tqdm

from cascade_sim.domain.events.event_dispatcher import EventDispatcher
from cascade_sim.domain.events.game_events import GameEventType
from cascade_sim.domain.game.errors import (
    InsufficientBalanceError, FreeSpinsActiveError, CascadeLimitExceededError
)


@dataclass
class AutoplayStats:
    """Aggregated results of an autoplay run."""
    game_id: str
    spins: int = 0
    free_spins_played: int = 0
    total_bet: float = 0.0
    total_win: float = 0.0
    win_count: int = 0
    total_cascades: int = 0
    max_cascades: int = 0
    free_spins_triggered: int = 0
    free_spins_purchased: int = 0
    orders_completed: int = 0
    super_bonuses: int = 0
    start_balance: float = 0.0
    end_balance: float = 0.0
    stop_reason: str = ""
    duration: float = 0.0
    win_multipliers: List[float] = field(default_factory=list, repr=False)

    @property
    def return_to_player(self) -> float:
        return self.total_win / self.total_bet if self.total_bet > 0 else 0.0

    @property
    def hit_rate(self) -> float:
        return self.win_count / self.spins if self.spins > 0 else 0.0

    def update_spin(self, cost: float, credited: float, bet: float, cascades: int, was_free_spin: bool):
        self.spins += 1
        self.total_bet += cost
        self.total_win += credited
        self.total_cascades += cascades
        self.max_cascades = max(self.max_cascades, cascades)
        if was_free_spin:
            self.free_spins_played += 1
        if credited > 0:
            self.win_count += 1
        self.win_multipliers.append(credited / bet if bet > 0 else 0.0)

    def to_dict(self) -> Dict[str, Any]:
        multipliers = np.asarray(self.win_multipliers, dtype=float)
        has_spins = multipliers.size > 0
        return {
            "game_id": self.game_id,
            "spins": self.spins,
            "free_spins_played": self.free_spins_played,
            "total_bet": round(self.total_bet, 2),
            "total_win": round(self.total_win, 2),
            "return_to_player": round(self.return_to_player, 6),
            "hit_rate": round(self.hit_rate, 6),
            "avg_cascades": round(self.total_cascades / self.spins, 4) if self.spins else 0.0,
            "max_cascades": self.max_cascades,
            "free_spins_triggered": self.free_spins_triggered,
            "free_spins_purchased": self.free_spins_purchased,
            "orders_completed": self.orders_completed,
            "super_bonuses": self.super_bonuses,
            "win_multiplier_mean": float(multipliers.mean()) if has_spins else 0.0,
            "win_multiplier_std": float(multipliers.std()) if has_spins else 0.0,
            "win_multiplier_max": float(multipliers.max()) if has_spins else 0.0,
            "start_balance": self.start_balance,
            "end_balance": self.end_balance,
            "stop_reason": self.stop_reason,
            "duration": round(self.duration, 3),
        }


class AutoplayRunner:
    """
    Plays a fixed number of spins on one engine and collects statistics.

    Stops early when the balance can no longer cover a spin. With
    ``buy_package`` set, a free-spin package is bought whenever no session is
    running and the balance allows it.
    """
    def __init__(self, engine, config: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(f"application.simulation.autoplay.{engine.id}")
        self.engine = engine

        self.config = config or {}
        self.max_spins = int(self.config.get("max_spins", 1000))
        self.buy_package = self.config.get("buy_package")
        self.show_progress = bool(self.config.get("show_progress", False))

        if self.engine.event_dispatcher is None:
            self.engine.event_dispatcher = EventDispatcher()
        self._stats: Optional[AutoplayStats] = None

    def run(self) -> AutoplayStats:
        stats = AutoplayStats(game_id=self.engine.id, start_balance=self.engine.balance)
        self._stats = stats
        dispatcher = self.engine.event_dispatcher
        dispatcher.subscribe(GameEventType.ORDER_COMPLETED, self._on_order_completed)
        dispatcher.subscribe(GameEventType.SUPER_BONUS_AWARDED, self._on_super_bonus)

        self.logger.info(f"Starting autoplay: {self.max_spins} spins, bet {self.engine.current_bet}, "
                         f"ante {self.engine.ante_mode.value}, buy {self.buy_package}")
        start_time = time.time()
        pbar = tqdm(total=self.max_spins, desc=self.engine.id) if self.show_progress else None

        try:
            stats.stop_reason = "max_spins"
            while stats.spins < self.max_spins:
                if self.buy_package and not self.engine.bonus.is_free_spins:
                    if not self._buy(stats):
                        stats.stop_reason = "insufficient_balance"
                        break

                bet = self.engine.current_bet
                try:
                    outcome = self.engine.spin()
                except InsufficientBalanceError as e:
                    self.logger.info(f"Autoplay stopped: {e.message}")
                    stats.stop_reason = "insufficient_balance"
                    break
                except CascadeLimitExceededError as e:
                    self.logger.error(f"Autoplay stopped after {stats.spins} spins: {e.message}")
                    stats.stop_reason = "cascade_limit"
                    break

                stats.update_spin(outcome.bet_cost, outcome.total_credited, bet,
                                  outcome.cascades, outcome.was_free_spin)
                if outcome.free_spins_triggered:
                    stats.free_spins_triggered += 1
                if pbar is not None:
                    pbar.update(1)
        finally:
            if pbar is not None:
                pbar.close()
            dispatcher.unsubscribe(self._on_order_completed, GameEventType.ORDER_COMPLETED)
            dispatcher.unsubscribe(self._on_super_bonus, GameEventType.SUPER_BONUS_AWARDED)
            self._stats = None

        stats.end_balance = self.engine.balance
        stats.duration = time.time() - start_time
        self.logger.info(
            f"Autoplay finished - spins: {stats.spins}, RTP: {stats.return_to_player:.4f}, "
            f"hit rate: {stats.hit_rate:.4f}, reason: {stats.stop_reason}"
        )
        return stats

    def _buy(self, stats: AutoplayStats) -> bool:
        balance_before = self.engine.balance
        try:
            self.engine.buy_free_spins(self.buy_package)
        except InsufficientBalanceError as e:
            self.logger.info(f"Autoplay stopped: {e.message}")
            return False
        except FreeSpinsActiveError:
            return True
        stats.free_spins_purchased += 1
        stats.total_bet += balance_before - self.engine.balance
        return True

    def _on_order_completed(self, event):
        if self._stats is not None:
            self._stats.orders_completed += 1

    def _on_super_bonus(self, event):
        if self._stats is not None:
            self._stats.super_bonuses += 1
