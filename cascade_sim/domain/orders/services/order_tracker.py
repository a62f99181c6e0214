# cascade_sim/domain/orders/services/order_tracker.py
import logging
from dataclasses import dataclass
from typing import Dict, List, Any, Optional, Sequence, Tuple

from ..entities.order import Order
from ...symbols.entities.symbol import SymbolCatalog


@dataclass(frozen=True)
class OrderRules:
    """Order parameters for base-game spins and free-spin sessions."""
    normal_chance: float = 0.3
    normal_min_quantity: int = 8
    normal_max_quantity: int = 16
    normal_tip_multipliers: Tuple[float, ...] = (2, 3, 5, 10)
    free_min_orders: int = 2
    free_max_orders: int = 4
    free_min_quantity: int = 12
    free_max_quantity: int = 30
    free_tip_multipliers: Tuple[float, ...] = (2, 3, 5, 10)
    super_bonus_multiplier: float = 100

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "OrderRules":
        """Parse the ``orders`` section of a game file."""
        normal = config.get("normal_mode", {}) or {}
        free = config.get("free_spins_mode", {}) or {}
        defaults = cls()

        normal_tips = tuple(normal.get("tip_multipliers", defaults.normal_tip_multipliers))
        # Natural free-spin orders reuse the base-game tips unless overridden
        free_tips = tuple(free.get("tip_multipliers", normal_tips))

        rules = cls(
            normal_chance=float(normal.get("chance", defaults.normal_chance)),
            normal_min_quantity=int(normal.get("min_quantity", defaults.normal_min_quantity)),
            normal_max_quantity=int(normal.get("max_quantity", defaults.normal_max_quantity)),
            normal_tip_multipliers=normal_tips,
            free_min_orders=int(free.get("min_orders", defaults.free_min_orders)),
            free_max_orders=int(free.get("max_orders", defaults.free_max_orders)),
            free_min_quantity=int(free.get("min_quantity", defaults.free_min_quantity)),
            free_max_quantity=int(free.get("max_quantity", defaults.free_max_quantity)),
            free_tip_multipliers=free_tips,
            super_bonus_multiplier=float(free.get("super_bonus_multiplier", defaults.super_bonus_multiplier)),
        )

        for low, high, label in (
            (rules.normal_min_quantity, rules.normal_max_quantity, "normal_mode quantity"),
            (rules.free_min_quantity, rules.free_max_quantity, "free_spins_mode quantity"),
            (rules.free_min_orders, rules.free_max_orders, "free_spins_mode orders"),
        ):
            if low > high:
                raise ValueError(f"Invalid {label} range: {low} > {high}")
        if not rules.normal_tip_multipliers or not rules.free_tip_multipliers:
            raise ValueError("Tip multiplier sets must not be empty")

        return rules


@dataclass(frozen=True)
class OrderSettlement:
    """Outcome of a completion check."""
    completed: Tuple[Order, ...] = ()
    tips: float = 0.0
    super_bonus: float = 0.0
    cleared: bool = False


class OrderTracker:
    """
    Owns the active orders, advances them from win events and settles
    completed orders into tips.
    """
    def __init__(self, catalog: SymbolCatalog, rules: OrderRules, rng):
        self.logger = logging.getLogger("domain.orders.tracker")
        self.catalog = catalog
        self.rules = rules
        self.rng = rng
        self._orders: List[Order] = []

    @property
    def orders(self) -> List[Order]:
        """Independent copies of the active orders."""
        return [order.copy() for order in self._orders]

    def restore(self, orders: Sequence[Order]):
        self._orders = [order.copy() for order in orders]

    # --- generation -------------------------------------------------------

    def start_spin(self, order_chance: float) -> Optional[Order]:
        """
        Base-game spin start: drop any leftover order and, with probability
        ``order_chance``, create exactly one new order.
        """
        self._orders = []
        if self.rng.get_random_fraction() >= order_chance:
            return None

        order = self._create_order(
            self.rules.normal_min_quantity,
            self.rules.normal_max_quantity,
            self.rules.normal_tip_multipliers,
        )
        self._orders = [order]
        self.logger.debug(f"Created order {order.quantity}x {order.symbol_id} (tip x{order.tip_multiplier})")
        return order.copy()

    def draw_free_spin_order_count(self) -> int:
        return self.rng.get_random_int(self.rules.free_min_orders, self.rules.free_max_orders)

    def start_free_spin_session(self, order_count: int,
                                tip_multipliers: Optional[Sequence[float]] = None) -> List[Order]:
        """
        Replace the active orders with ``order_count`` free-spin orders. They
        persist until the session ends.
        """
        tips = tuple(tip_multipliers) if tip_multipliers else self.rules.free_tip_multipliers
        self._orders = [
            self._create_order(self.rules.free_min_quantity, self.rules.free_max_quantity, tips)
            for _ in range(max(0, order_count))
        ]
        self.logger.debug(f"Started free-spin session with {len(self._orders)} orders")
        return self.orders

    def _create_order(self, min_quantity: int, max_quantity: int,
                      tip_multipliers: Sequence[float]) -> Order:
        symbol = self.rng.choice(list(self.catalog.food_symbols))
        return Order(
            symbol_id=symbol.id,
            quantity=self.rng.get_random_int(min_quantity, max_quantity),
            tip_multiplier=self.rng.choice(list(tip_multipliers)),
        )

    # --- progress ---------------------------------------------------------

    def record_win(self, symbol_id: str, count: int):
        """Advance every open order for ``symbol_id`` by ``count``, capped."""
        for order in self._orders:
            if order.symbol_id == symbol_id:
                order.add_progress(count)

    # --- settlement -------------------------------------------------------

    def settle_spin(self, bet: float, in_free_spins: bool) -> OrderSettlement:
        """
        End-of-spin completion check.

        Fulfilled orders complete and pay ``bet * tip_multiplier``. In the
        base game the list is cleared when nothing completed; in free spins
        unfinished orders carry over.
        """
        completed = []
        tips = 0.0
        for order in self._orders:
            if order.mark_completed():
                completed.append(order.copy())
                tips += bet * order.tip_multiplier
                self.logger.info(f"Order completed: {order.quantity}x {order.symbol_id}, tip {bet * order.tip_multiplier:.2f}")

        cleared = False
        if not in_free_spins and not completed:
            cleared = bool(self._orders)
            self._orders = []

        return OrderSettlement(completed=tuple(completed), tips=tips, cleared=cleared)

    def settle_session(self, bet: float) -> OrderSettlement:
        """
        Free-spin session end: pay the super bonus when at least one order
        exists and all are completed, then clear the orders either way.
        """
        super_bonus = 0.0
        if self._orders and all(order.completed for order in self._orders):
            super_bonus = bet * self.rules.super_bonus_multiplier
            self.logger.info(f"All {len(self._orders)} session orders completed, super bonus {super_bonus:.2f}")

        completed = tuple(order.copy() for order in self._orders if order.completed)
        self._orders = []
        return OrderSettlement(completed=completed, super_bonus=super_bonus, cleared=True)
