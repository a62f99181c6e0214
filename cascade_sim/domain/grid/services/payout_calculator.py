# cascade_sim/domain/grid/services/payout_calculator.py
from ...symbols.entities.symbol import Symbol, PayoutTier


class PayoutCalculator:
    """Maps a cluster's symbol and size to a bet multiplier."""

    def multiplier(self, symbol: Symbol, count: int) -> float:
        return symbol.payouts.get(PayoutTier.for_count(count))

    def payout(self, symbol: Symbol, count: int, bet: float) -> float:
        """Currency amount for a cluster at the given bet."""
        return self.multiplier(symbol, count) * bet
