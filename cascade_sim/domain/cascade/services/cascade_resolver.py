# cascade_sim/domain/cascade/services/cascade_resolver.py
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Any, Callable, Optional, Tuple

from ...grid.entities.grid import Grid
from ...grid.services.win_detector import WinDetector, WinInfo
from ...grid.services.payout_calculator import PayoutCalculator
from ...game.errors import CascadeLimitExceededError


class CascadePhase(Enum):
    SCANNING = auto()
    REMOVING = auto()
    DROPPING = auto()
    REFILLING = auto()
    DONE = auto()


@dataclass(frozen=True)
class CascadeStep:
    """One detect-pay-remove-drop-refill iteration, kept for replay."""
    wins: Tuple[WinInfo, ...]
    grid_before_removal: Grid
    grid_after_removal: Grid
    grid_after_drop: Grid
    grid_after_fill: Grid

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wins": [win.to_dict() for win in self.wins],
            "grid_before_removal": self.grid_before_removal.to_symbol_ids(),
            "grid_after_removal": self.grid_after_removal.to_symbol_ids(),
            "grid_after_drop": self.grid_after_drop.to_symbol_ids(),
            "grid_after_fill": self.grid_after_fill.to_symbol_ids(),
        }


@dataclass
class CascadeResult:
    cascades: int = 0
    wins: List[WinInfo] = field(default_factory=list)
    total_win: float = 0.0
    steps: List[CascadeStep] = field(default_factory=list)
    final_grid: Optional[Grid] = None


class CascadeResolver:
    """
    Drives the scan -> remove -> drop -> refill loop until a scan finds no
    wins.

    Nothing bounds the number of cascades structurally, so the loop is capped
    at ``max_cascades`` and raises ``CascadeLimitExceededError`` instead of
    spinning forever.
    """
    def __init__(self, win_detector: WinDetector, payout_calculator: PayoutCalculator,
                 sampler, max_cascades: int = 100):
        if max_cascades < 1:
            raise ValueError(f"max_cascades must be at least 1, got {max_cascades}")

        self.logger = logging.getLogger("domain.cascade.resolver")
        self.win_detector = win_detector
        self.payout_calculator = payout_calculator
        self.sampler = sampler
        self.max_cascades = max_cascades
        self.phase = CascadePhase.DONE

    def resolve(self, grid: Grid, bet: float,
                on_win: Optional[Callable[[WinInfo], None]] = None,
                on_step: Optional[Callable[[CascadeStep], None]] = None) -> CascadeResult:
        """
        Resolve every cascade starting from a freshly generated grid.

        Args:
            grid: Initial grid of the spin
            bet: Bet used to scale payouts
            on_win: Called once per paid win (order progress hook)
            on_step: Called once per completed cascade step

        Returns:
            CascadeResult with the steps, all wins and the settled grid

        Raises:
            CascadeLimitExceededError: If the grid has not settled after
                ``max_cascades`` steps
        """
        result = CascadeResult()
        current = grid
        wins: List[WinInfo] = []
        before_removal = after_removal = after_drop = None

        self.phase = CascadePhase.SCANNING
        while self.phase is not CascadePhase.DONE:
            if self.phase is CascadePhase.SCANNING:
                wins = self.win_detector.detect(current)
                if not wins:
                    self.phase = CascadePhase.DONE
                    continue
                if result.cascades >= self.max_cascades:
                    self.logger.error(f"Cascade cap of {self.max_cascades} reached with wins still on the grid")
                    raise CascadeLimitExceededError(self.max_cascades)
                self.phase = CascadePhase.REMOVING

            elif self.phase is CascadePhase.REMOVING:
                wins = [self._pay(win, bet) for win in wins]
                for win in wins:
                    result.total_win += win.payout
                    result.wins.append(win)
                    if on_win is not None:
                        on_win(win)

                before_removal = current.clone()
                current = current.without_cells(cell for win in wins for cell in win.cells)
                after_removal = current.clone()
                self.phase = CascadePhase.DROPPING

            elif self.phase is CascadePhase.DROPPING:
                current = current.compacted()
                after_drop = current.clone()
                self.phase = CascadePhase.REFILLING

            elif self.phase is CascadePhase.REFILLING:
                current = current.refilled(self.sampler)
                step = CascadeStep(
                    wins=tuple(wins),
                    grid_before_removal=before_removal,
                    grid_after_removal=after_removal,
                    grid_after_drop=after_drop,
                    grid_after_fill=current.clone(),
                )
                result.steps.append(step)
                result.cascades += 1
                self.logger.debug(
                    f"Cascade {result.cascades}: {len(wins)} wins, "
                    f"running total {result.total_win:.2f}"
                )
                if on_step is not None:
                    on_step(step)
                self.phase = CascadePhase.SCANNING

        result.final_grid = current
        return result

    def _pay(self, win: WinInfo, bet: float) -> WinInfo:
        return win.with_payout(self.payout_calculator.payout(win.symbol, win.count, bet))
