# cascade_sim/domain/game/errors.py


class GameError(Exception):
    """Base class for errors raised by the spin engine."""
    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else {}


class InsufficientBalanceError(GameError):
    """A spin or bonus purchase costs more than the current balance."""
    def __init__(self, required: float, available: float, operation: str = "spin"):
        self.required = required
        self.available = available
        self.operation = operation
        super().__init__(
            f"Insufficient balance for {operation}: required {required:.2f}, available {available:.2f}",
            details={"required": required, "available": available, "operation": operation}
        )


class CascadeLimitExceededError(GameError):
    """The cascade loop did not settle within its iteration cap."""
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Cascade resolution exceeded {limit} iterations",
            details={"limit": limit}
        )


class FreeSpinsActiveError(GameError):
    """A bonus purchase was attempted while free spins are running."""
    def __init__(self, remaining: int):
        self.remaining = remaining
        super().__init__(
            f"Cannot buy free spins while {remaining} free spins remain",
            details={"remaining": remaining}
        )
