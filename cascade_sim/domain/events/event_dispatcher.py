# cascade_sim/domain/events/event_dispatcher.py
import logging
from collections import Counter
from typing import Callable, Dict, List, Optional

from .game_events import GameEvent, GameEventType


Handler = Callable[[GameEvent], None]


class EventDispatcher:
    """
    Fans game events out to subscribers.

    A subscriber listens either to one GameEventType or, through
    ``subscribe_all``, to every event an engine emits (a UI replaying a spin
    step by step). Handlers run synchronously: typed subscribers first, then
    catch-all ones, each in subscription order. A failing handler is logged
    and skipped so observers can never break a spin in progress.
    """
    def __init__(self):
        self.logger = logging.getLogger("domain.events.dispatcher")
        self._subscribers: Dict[GameEventType, List[Handler]] = {event_type: [] for event_type in GameEventType}
        self._catch_all: List[Handler] = []
        self.dispatched = Counter()  # GameEventType -> events dispatched

    def subscribe(self, event_type: GameEventType, handler: Handler):
        self._subscribers[event_type].append(handler)
        self.logger.debug(f"Subscribed handler to {event_type.name}")

    def subscribe_all(self, handler: Handler):
        self._catch_all.append(handler)
        self.logger.debug("Subscribed handler to all game events")

    def unsubscribe(self, handler: Handler, event_type: Optional[GameEventType] = None) -> bool:
        """
        Remove a handler from one event type, or from the catch-all list when
        ``event_type`` is None.

        Returns:
            True if the handler was subscribed
        """
        handlers = self._catch_all if event_type is None else self._subscribers[event_type]
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def subscribers(self, event_type: GameEventType) -> List[Handler]:
        return list(self._subscribers[event_type])

    def dispatch(self, event: GameEvent):
        self.dispatched[event.type] += 1
        for handler in self._subscribers[event.type] + self._catch_all:
            try:
                handler(event)
            except Exception:
                self.logger.exception(f"Handler failed for {event.type.name} on game {event.game_id}")
