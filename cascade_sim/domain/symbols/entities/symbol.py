# cascade_sim/domain/symbols/entities/symbol.py
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Any, Optional, Iterator


class PayoutTier(Enum):
    """Cluster-size buckets used by the pay table."""
    EIGHT_TO_NINE = "8-9"
    TEN_TO_ELEVEN = "10-11"
    TWELVE_PLUS = "12+"

    @classmethod
    def for_count(cls, count: int) -> Optional["PayoutTier"]:
        """
        Map a cluster size to its tier. The highest matching tier wins;
        sizes below eight have no tier.
        """
        if count >= 12:
            return cls.TWELVE_PLUS
        if count >= 10:
            return cls.TEN_TO_ELEVEN
        if count >= 8:
            return cls.EIGHT_TO_NINE
        return None


@dataclass(frozen=True)
class PayoutTable:
    """Multipliers per tier. An absent tier pays nothing."""
    eight_to_nine: Optional[float] = None
    ten_to_eleven: Optional[float] = None
    twelve_plus: Optional[float] = None

    def get(self, tier: Optional[PayoutTier]) -> float:
        if tier is PayoutTier.TWELVE_PLUS:
            value = self.twelve_plus
        elif tier is PayoutTier.TEN_TO_ELEVEN:
            value = self.ten_to_eleven
        elif tier is PayoutTier.EIGHT_TO_NINE:
            value = self.eight_to_nine
        else:
            value = None
        return value if value is not None else 0.0

    @classmethod
    def from_config(cls, payouts: Optional[Dict[str, Any]]) -> "PayoutTable":
        payouts = payouts or {}
        return cls(
            eight_to_nine=payouts.get(PayoutTier.EIGHT_TO_NINE.value),
            ten_to_eleven=payouts.get(PayoutTier.TEN_TO_ELEVEN.value),
            twelve_plus=payouts.get(PayoutTier.TWELVE_PLUS.value),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            tier.value: value
            for tier, value in (
                (PayoutTier.EIGHT_TO_NINE, self.eight_to_nine),
                (PayoutTier.TEN_TO_ELEVEN, self.ten_to_eleven),
                (PayoutTier.TWELVE_PLUS, self.twelve_plus),
            )
            if value is not None
        }


@dataclass(frozen=True)
class Symbol:
    """Immutable catalog entry."""
    id: str
    name: str
    weight: float
    payouts: PayoutTable = field(default_factory=PayoutTable)
    is_scatter: bool = False

    def copy(self) -> "Symbol":
        """Return an equal but distinct record for a cell to own."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "weight": self.weight,
            "payouts": self.payouts.to_dict(),
            "is_scatter": self.is_scatter,
        }


class SymbolCatalog:
    """
    Read-only lookup of every symbol the game knows about, in configured order.

    Food symbols are all non-scatter symbols; they are the only ones that can
    win clusters, be the target of an order or be dropped in by a refill.
    """
    def __init__(self, symbols: List[Symbol]):
        self.logger = logging.getLogger("domain.symbols.catalog")
        self._symbols = tuple(symbols)
        self._by_id = {symbol.id: symbol for symbol in self._symbols}

        if len(self._by_id) != len(self._symbols):
            raise ValueError("Symbol ids must be unique")

        self.food_symbols = tuple(s for s in self._symbols if not s.is_scatter)
        self.scatter_symbols = tuple(s for s in self._symbols if s.is_scatter)

        if not self.food_symbols:
            raise ValueError("Symbol catalog needs at least one non-scatter symbol")

    @classmethod
    def from_config(cls, symbols_config: List[Dict[str, Any]]) -> "SymbolCatalog":
        """
        Build a catalog from the ``symbols`` list of a game file.

        Invalid entries (missing id, non-positive weight, duplicate id) are
        skipped with a warning.
        """
        logger = logging.getLogger("domain.symbols.catalog")
        symbols = []
        seen = set()

        for i, entry in enumerate(symbols_config or []):
            if not isinstance(entry, dict) or not entry.get("id"):
                logger.warning(f"Invalid symbol entry at index {i}: {entry}")
                continue

            symbol_id = str(entry["id"])
            weight = entry.get("weight", 0)
            if not isinstance(weight, (int, float)) or weight <= 0:
                logger.warning(f"Symbol {symbol_id} has non-positive weight {weight}, skipping")
                continue
            if symbol_id in seen:
                logger.warning(f"Duplicate symbol id {symbol_id}, skipping")
                continue

            seen.add(symbol_id)
            symbols.append(Symbol(
                id=symbol_id,
                name=entry.get("name", symbol_id),
                weight=float(weight),
                payouts=PayoutTable.from_config(entry.get("payouts")),
                is_scatter=bool(entry.get("is_scatter", False)),
            ))

        logger.debug(f"Loaded {len(symbols)} symbols")
        return cls(symbols)

    def get(self, symbol_id: str) -> Optional[Symbol]:
        return self._by_id.get(symbol_id)

    def __contains__(self, symbol_id: str) -> bool:
        return symbol_id in self._by_id

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"SymbolCatalog(symbols={len(self._symbols)}, scatters={len(self.scatter_symbols)})"
