# cascade_sim/domain/game/entities/game_engine.py
import copy
import logging
from typing import Dict, Any, Optional, Union

from ..errors import GameError, InsufficientBalanceError, CascadeLimitExceededError, FreeSpinsActiveError
from .game_state import GameState, SpinOutcome
from ...bonus.entities.ante_mode import AnteMode, AnteRules
from ...bonus.services.bonus_controller import BonusController, FreeSpinRules, PackageType
from ...cascade.services.cascade_resolver import CascadeResolver, CascadeStep
from ...events.event_dispatcher import EventDispatcher
from ...events.game_events import GameEvent, GameEventType
from ...grid.entities.grid import Grid
from ...grid.services.payout_calculator import PayoutCalculator
from ...grid.services.win_detector import WinDetector, WinInfo
from ...orders.services.order_tracker import OrderTracker, OrderRules, OrderSettlement
from ...symbols.entities.symbol import SymbolCatalog
from ...symbols.services.symbol_sampler import WeightedSymbolSampler


class GameEngine:
    """
    Single-player cascading slot engine.

    Owns the only mutable game state (balance, bet, ante mode, grid, orders,
    free-spin session) and advances it one spin at a time. Readers get
    independent snapshots through ``get_state``; presentation layers can also
    subscribe to ``GameEventType`` events on the dispatcher.
    """
    BIG_WIN_THRESHOLD = 10  # total credited / bet

    def __init__(self, game_id: str, config: Dict[str, Any], rng,
                 event_dispatcher: Optional[EventDispatcher] = None):
        """
        Initialize the engine.

        Args:
            game_id: Identifier used in logs and events
            config: Game configuration dictionary (see food_slots.yaml)
            rng: RNG strategy shared by every random draw of this engine
            event_dispatcher: Optional dispatcher receiving game events
        """
        if rng is None:
            raise ValueError("GameEngine requires an RNG strategy")

        self.id = game_id
        self.logger = logging.getLogger(f"domain.game.{game_id}")
        self.logger.info(f"Initializing game engine: {game_id}")

        self.config = config
        self.rng = rng
        self.event_dispatcher = event_dispatcher

        self._load_grid(config.get("grid", {}))
        self._load_betting(config.get("betting", {}))

        self.catalog = SymbolCatalog.from_config(config.get("symbols", []))
        self.sampler = WeightedSymbolSampler(self.catalog, rng)
        self.win_detector = WinDetector(self.catalog, int(config.get("min_win_symbols", 8)))
        self.payout_calculator = PayoutCalculator()
        self.cascade_resolver = CascadeResolver(
            self.win_detector,
            self.payout_calculator,
            self.sampler,
            max_cascades=int(config.get("max_cascades", 100)),
        )
        self.order_tracker = OrderTracker(
            self.catalog, OrderRules.from_config(config.get("orders", {}) or {}), rng
        )
        self.bonus = BonusController(
            FreeSpinRules.from_config(config.get("free_spins", {}) or {}),
            AnteRules.from_config(config.get("ante_mode", {}) or {}),
            self.order_tracker,
        )

        # Mutable state, touched only by spin(), buy_free_spins() and setters
        self.balance = float(config.get("initial_balance", 1000000))
        self.current_bet = self.default_bet
        self.total_win = 0.0
        self.is_spinning = False
        self.ante_mode = AnteMode.NONE
        self.cascade_steps = []
        self.grid = Grid.generate(self.rows, self.cols, self.sampler, include_scatter=False)

        self.logger.info(
            f"Game {game_id} initialized - {self.rows}x{self.cols} grid, "
            f"{len(self.catalog)} symbols, balance {self.balance:.2f}"
        )

    def _load_grid(self, grid_config: Dict[str, Any]):
        self.rows = int(grid_config.get("rows", 5))
        self.cols = int(grid_config.get("columns", 6))
        if self.rows < 1 or self.cols < 1:
            raise ValueError(f"Invalid grid size {self.rows}x{self.cols}")

    def _load_betting(self, betting_config: Dict[str, Any]):
        self.min_bet = float(betting_config.get("min_bet", 1))
        self.max_bet = float(betting_config.get("max_bet", 100))
        if self.min_bet > self.max_bet:
            raise ValueError(f"min_bet {self.min_bet} exceeds max_bet {self.max_bet}")

        default_bet = float(betting_config.get("default_bet", self.min_bet))
        if not self.min_bet <= default_bet <= self.max_bet:
            self.logger.warning(f"Default bet {default_bet} outside [{self.min_bet}, {self.max_bet}], using min_bet")
            default_bet = self.min_bet
        self.default_bet = default_bet

    # --- queries ----------------------------------------------------------

    def get_state(self) -> GameState:
        """Deep, independent snapshot of the current state."""
        return GameState(
            grid=self.grid.clone(),
            balance=self.balance,
            current_bet=self.current_bet,
            total_win=self.total_win,
            is_spinning=self.is_spinning,
            is_free_spins=self.bonus.is_free_spins,
            free_spins_remaining=self.bonus.free_spins_remaining,
            orders=tuple(self.order_tracker.orders),
            ante_mode=self.ante_mode,
            cascade_steps=copy.deepcopy(tuple(self.cascade_steps)),
        )

    def spin_cost(self) -> float:
        """What the next spin will debit."""
        return self.bonus.spin_cost(self.current_bet, self.ante_mode)

    def get_info(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "grid": {"rows": self.rows, "columns": self.cols},
            "symbols": [symbol.id for symbol in self.catalog],
            "min_win_symbols": self.win_detector.min_win_size,
            "max_cascades": self.cascade_resolver.max_cascades,
            "bet_range": [self.min_bet, self.max_bet],
            "default_bet": self.default_bet,
        }

    # --- commands ---------------------------------------------------------

    def set_bet(self, amount: float):
        """Change the bet. Amounts outside [min_bet, max_bet] are ignored."""
        if self.min_bet <= amount <= self.max_bet:
            self.current_bet = amount
            self.logger.debug(f"Bet set to {amount}")
        else:
            self.logger.debug(f"Ignoring bet {amount} outside [{self.min_bet}, {self.max_bet}]")

    def set_ante_mode(self, mode: Union[AnteMode, str]):
        self.ante_mode = AnteMode.parse(mode)
        self.logger.debug(f"Ante mode set to {self.ante_mode.value}")

    def spin(self) -> SpinOutcome:
        """
        Play one spin to completion.

        Returns:
            SpinOutcome; an empty outcome if a spin is already in progress

        Raises:
            InsufficientBalanceError: Balance below the spin cost (nothing changes)
            CascadeLimitExceededError: The cascade cap was hit; the spin is
                rolled back before the error propagates
        """
        if self.is_spinning:
            self.logger.debug("Spin requested while spinning, ignoring")
            return SpinOutcome()

        was_free_spin = self.bonus.is_free_spins
        bet = self.current_bet
        cost = self.bonus.spin_cost(bet, self.ante_mode)

        if self.balance < cost:
            self.logger.info(f"Spin rejected: cost {cost:.2f}, balance {self.balance:.2f}")
            self._dispatch(GameEventType.SPIN_REJECTED, {"required": cost, "available": self.balance})
            raise InsufficientBalanceError(cost, self.balance)

        checkpoint = self._checkpoint()
        self.is_spinning = True
        try:
            outcome = self._run_spin(bet, cost, was_free_spin)
        except CascadeLimitExceededError:
            self.logger.error("Rolling back spin after cascade cap was exceeded")
            self._restore(checkpoint)
            raise
        finally:
            self.is_spinning = False

        self._dispatch(GameEventType.SPIN_COMPLETED, outcome.to_dict())
        if bet > 0 and outcome.total_credited >= bet * self.BIG_WIN_THRESHOLD:
            self._dispatch(GameEventType.BIG_WIN, {"amount": outcome.total_credited, "bet": bet})

        return outcome

    def _run_spin(self, bet: float, cost: float, was_free_spin: bool) -> SpinOutcome:
        self.balance -= cost
        self.total_win = 0.0
        self.cascade_steps = []
        self._dispatch(GameEventType.SPIN_STARTED, {"bet": bet, "cost": cost, "free_spin": was_free_spin})

        if not was_free_spin:
            modifier = self.bonus.ante_modifier(self.ante_mode)
            order = self.order_tracker.start_spin(modifier.order_chance)
            if order is not None:
                self._dispatch(GameEventType.ORDER_CREATED, order.to_dict())

        initial_grid = self._draw_spin_grid()
        self.grid = initial_grid

        result = self.cascade_resolver.resolve(
            initial_grid,
            bet,
            on_win=self._record_win,
            on_step=self._record_step,
        )
        self.grid = result.final_grid
        self.cascade_steps = list(result.steps)

        triggered = False
        # Scatters only land on the initial drop, so that grid decides the trigger.
        # Session orders replace the base-game order before completion is checked.
        if self.bonus.should_trigger(initial_grid, self.ante_mode):
            self.bonus.trigger_free_spins()
            triggered = True
            self._dispatch(GameEventType.FREE_SPINS_TRIGGERED, {
                "scatters": initial_grid.scatter_count(),
                "spins": self.bonus.free_spins_remaining,
                "orders": [order.to_dict() for order in self.order_tracker.orders],
            })

        self._credit(result.total_win)
        order_tips = self._settle_orders(bet, in_free_spins=self.bonus.is_free_spins)

        ended = False
        super_bonus = 0.0
        if was_free_spin:
            ended, settlement = self.bonus.advance_countdown(bet)
            if ended:
                super_bonus = settlement.super_bonus
                self._credit(super_bonus)
                if super_bonus > 0:
                    self._dispatch(GameEventType.SUPER_BONUS_AWARDED, {"amount": super_bonus})
                self._dispatch(GameEventType.FREE_SPINS_ENDED, {"super_bonus": super_bonus})

        self.logger.debug(
            f"Spin done: cost {cost:.2f}, cascades {result.cascades}, win {result.total_win:.2f}, "
            f"tips {order_tips:.2f}, super bonus {super_bonus:.2f}, balance {self.balance:.2f}"
        )

        return SpinOutcome(
            wins=tuple(result.wins),
            cascades=result.cascades,
            total_win=result.total_win,
            bet_cost=cost,
            order_tips=order_tips,
            super_bonus=super_bonus,
            free_spins_triggered=triggered,
            free_spins_ended=ended,
            was_free_spin=was_free_spin,
        )

    def buy_free_spins(self, package_type: Union[PackageType, str]):
        """
        Buy a free-spin package at ``cost * current_bet``.

        Raises:
            ValueError: Unknown package name
            FreeSpinsActiveError: A free-spin session is already running
            InsufficientBalanceError: Balance below the package price
        """
        package = PackageType.parse(package_type)

        if self.is_spinning:
            raise GameError("Cannot buy free spins during a spin")
        if self.bonus.is_free_spins:
            raise FreeSpinsActiveError(self.bonus.free_spins_remaining)

        cost = self.bonus.package_cost(package, self.current_bet)
        if self.balance < cost:
            self.logger.info(f"Purchase of {package.value} package rejected: cost {cost:.2f}, balance {self.balance:.2f}")
            self._dispatch(GameEventType.PURCHASE_REJECTED, {
                "required": cost, "available": self.balance, "package": package.value
            })
            raise InsufficientBalanceError(cost, self.balance, operation=f"{package.value} package")

        self.balance -= cost
        self.bonus.start_package(package)
        self._dispatch(GameEventType.FREE_SPINS_PURCHASED, {
            "package": package.value,
            "cost": cost,
            "spins": self.bonus.free_spins_remaining,
            "orders": [order.to_dict() for order in self.order_tracker.orders],
        })

    # --- helpers ----------------------------------------------------------

    def _draw_spin_grid(self) -> Grid:
        return Grid.generate(self.rows, self.cols, self.sampler, include_scatter=True)

    def _record_win(self, win: WinInfo):
        self.order_tracker.record_win(win.symbol.id, win.count)

    def _record_step(self, step: CascadeStep):
        self._dispatch(GameEventType.CASCADE_STEP, step.to_dict())

    def _settle_orders(self, bet: float, in_free_spins: bool) -> float:
        settlement: OrderSettlement = self.order_tracker.settle_spin(bet, in_free_spins)
        for order in settlement.completed:
            self._dispatch(GameEventType.ORDER_COMPLETED, {
                **order.to_dict(), "tip": bet * order.tip_multiplier
            })
        self._credit(settlement.tips)
        return settlement.tips

    def _credit(self, amount: float):
        self.balance += amount
        self.total_win += amount

    def _checkpoint(self) -> Dict[str, Any]:
        return {
            "balance": self.balance,
            "total_win": self.total_win,
            "grid": self.grid,
            "cascade_steps": list(self.cascade_steps),
            "orders": self.order_tracker.orders,
            "is_free_spins": self.bonus.is_free_spins,
            "free_spins_remaining": self.bonus.free_spins_remaining,
        }

    def _restore(self, checkpoint: Dict[str, Any]):
        self.balance = checkpoint["balance"]
        self.total_win = checkpoint["total_win"]
        self.grid = checkpoint["grid"]
        self.cascade_steps = checkpoint["cascade_steps"]
        self.order_tracker.restore(checkpoint["orders"])
        self.bonus.restore(checkpoint["is_free_spins"], checkpoint["free_spins_remaining"])

    def _dispatch(self, event_type: GameEventType, data: Optional[Dict[str, Any]] = None):
        if self.event_dispatcher is None:
            return
        self.event_dispatcher.dispatch(GameEvent(type=event_type, data=dict(data or {}), game_id=self.id))

    def __repr__(self) -> str:
        return f"GameEngine(id={self.id}, balance={self.balance:.2f}, bet={self.current_bet})"
