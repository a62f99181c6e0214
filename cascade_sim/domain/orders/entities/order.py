# cascade_sim/domain/orders/entities/order.py
from dataclasses import dataclass, replace
from typing import Dict, Any


@dataclass
class Order:
    """
    A collection objective: gather ``quantity`` winning cells of one symbol
    to earn ``tip_multiplier`` times the bet.

    ``collected`` only grows and never passes ``quantity``; ``completed``
    only ever goes from False to True.
    """
    symbol_id: str
    quantity: int
    tip_multiplier: float
    collected: int = 0
    completed: bool = False

    def __post_init__(self):
        if self.quantity < 1:
            raise ValueError(f"Order quantity must be positive, got {self.quantity}")
        self.collected = max(0, min(self.collected, self.quantity))

    @property
    def is_fulfilled(self) -> bool:
        return self.collected >= self.quantity

    @property
    def remaining(self) -> int:
        return self.quantity - self.collected

    def add_progress(self, count: int) -> int:
        """
        Record ``count`` collected symbols. Completed orders ignore progress.

        Returns:
            How many symbols were actually counted after capping
        """
        if self.completed or count <= 0:
            return 0
        before = self.collected
        self.collected = min(self.collected + count, self.quantity)
        return self.collected - before

    def mark_completed(self) -> bool:
        """Complete a fulfilled order. Returns True only on the first call."""
        if self.completed or not self.is_fulfilled:
            return False
        self.completed = True
        return True

    def copy(self) -> "Order":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol_id": self.symbol_id,
            "quantity": self.quantity,
            "collected": self.collected,
            "tip_multiplier": self.tip_multiplier,
            "completed": self.completed,
        }
