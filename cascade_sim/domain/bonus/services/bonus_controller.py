# cascade_sim/domain/bonus/services/bonus_controller.py
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Tuple, Union

from ..entities.ante_mode import AnteMode, AnteModifier, AnteRules
from ...grid.entities.grid import Grid
from ...orders.services.order_tracker import OrderTracker, OrderSettlement


class PackageType(Enum):
    CHEAP = "cheap"
    STANDARD = "standard"

    @classmethod
    def parse(cls, value: Union["PackageType", str]) -> "PackageType":
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


@dataclass(frozen=True)
class BuyPackage:
    """A purchasable free-spin package. ``cost`` is a multiple of the bet."""
    cost: float
    spins: int
    max_orders: int
    tip_multipliers: Tuple[float, ...]


DEFAULT_PACKAGES = {
    PackageType.CHEAP: BuyPackage(cost=50, spins=5, max_orders=2, tip_multipliers=(2, 3, 5)),
    PackageType.STANDARD: BuyPackage(cost=100, spins=10, max_orders=4, tip_multipliers=(5, 10, 15)),
}


@dataclass(frozen=True)
class FreeSpinRules:
    scatter_trigger: int = 3
    spins_awarded: int = 10
    charge_bet: bool = True
    packages: Tuple[Tuple[PackageType, BuyPackage], ...] = tuple(DEFAULT_PACKAGES.items())

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "FreeSpinRules":
        """Parse the ``free_spins`` section of a game file."""
        defaults = cls()
        packages_config = config.get("packages", {}) or {}
        packages = []

        for package_type, default in DEFAULT_PACKAGES.items():
            section = packages_config.get(package_type.value, {}) or {}
            packages.append((package_type, BuyPackage(
                cost=float(section.get("cost", default.cost)),
                spins=int(section.get("spins", default.spins)),
                max_orders=int(section.get("max_orders", default.max_orders)),
                tip_multipliers=tuple(section.get("tip_multipliers", default.tip_multipliers)),
            )))

        return cls(
            scatter_trigger=int(config.get("scatter_trigger", defaults.scatter_trigger)),
            spins_awarded=int(config.get("spins_awarded", defaults.spins_awarded)),
            charge_bet=bool(config.get("charge_bet", defaults.charge_bet)),
            packages=tuple(packages),
        )

    def package(self, package_type: PackageType) -> BuyPackage:
        return dict(self.packages)[package_type]


class BonusController:
    """
    Free-spin and ante state machine.

    Owns the free-spin flag and countdown. Orders for a session are created
    through the order tracker so their generation policy lives in one place.
    """
    def __init__(self, free_spin_rules: FreeSpinRules, ante_rules: AnteRules,
                 order_tracker: OrderTracker):
        self.logger = logging.getLogger("domain.bonus.controller")
        self.free_spin_rules = free_spin_rules
        self.ante_rules = ante_rules
        self.order_tracker = order_tracker

        self.is_free_spins = False
        self.free_spins_remaining = 0

    # --- ante -------------------------------------------------------------

    def ante_modifier(self, mode: AnteMode) -> AnteModifier:
        return self.ante_rules.modifier(
            mode,
            base_order_chance=self.order_tracker.rules.normal_chance,
            base_scatter_threshold=self.free_spin_rules.scatter_trigger,
        )

    def spin_cost(self, bet: float, mode: AnteMode) -> float:
        """Amount debited for one spin at ``bet`` under ``mode``."""
        if self.is_free_spins and not self.free_spin_rules.charge_bet:
            return 0.0
        return bet * self.ante_modifier(mode).bet_multiplier

    # --- natural trigger --------------------------------------------------

    def should_trigger(self, grid: Grid, mode: AnteMode) -> bool:
        """True when ``grid`` carries enough scatters and no session is running."""
        if self.is_free_spins:
            return False
        scatter_count = grid.scatter_count()
        threshold = self.ante_modifier(mode).scatter_threshold
        self.logger.debug(f"Scatter check: {scatter_count} scatters, threshold {threshold}")
        return scatter_count >= threshold

    def trigger_free_spins(self):
        """Enter a naturally triggered session with a random number of orders."""
        order_count = self.order_tracker.draw_free_spin_order_count()
        self._enter(self.free_spin_rules.spins_awarded, order_count,
                    self.order_tracker.rules.free_tip_multipliers)

    # --- buy bonus --------------------------------------------------------

    def package_cost(self, package_type: PackageType, bet: float) -> float:
        return self.free_spin_rules.package(package_type).cost * bet

    def start_package(self, package_type: PackageType):
        """Enter a purchased session. Payment is the caller's concern."""
        package = self.free_spin_rules.package(package_type)
        order_count = min(package.max_orders, self.order_tracker.rules.free_max_orders)
        self._enter(package.spins, order_count, package.tip_multipliers)

    def _enter(self, spins: int, order_count: int, tip_multipliers):
        self.is_free_spins = True
        self.free_spins_remaining = spins
        self.order_tracker.start_free_spin_session(order_count, tip_multipliers)
        self.logger.info(f"Free spins started: {spins} spins, {order_count} orders")

    # --- countdown --------------------------------------------------------

    def advance_countdown(self, bet: float) -> Tuple[bool, OrderSettlement]:
        """
        Consume one free spin.

        Returns:
            (session_ended, settlement). The settlement carries the super
            bonus when the session ended with every order completed.
        """
        if not self.is_free_spins or self.free_spins_remaining <= 0:
            return False, OrderSettlement()

        self.free_spins_remaining -= 1
        if self.free_spins_remaining > 0:
            return False, OrderSettlement()

        self.is_free_spins = False
        settlement = self.order_tracker.settle_session(bet)
        self.logger.info(f"Free spins ended, super bonus {settlement.super_bonus:.2f}")
        return True, settlement

    def restore(self, is_free_spins: bool, free_spins_remaining: int):
        self.is_free_spins = is_free_spins
        self.free_spins_remaining = free_spins_remaining
